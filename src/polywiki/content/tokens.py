"""Whitespace-preserving tokenizer that marks clickable words."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

WHITESPACE_SPLIT_PATTERN = re.compile(r"(\s+)")
# Sentence punctuation, straight/curly quotes and markdown emphasis markers.
STRIP_CHARACTERS = ".,!?;:()\"'“”‘’*_`"


@dataclass(frozen=True)
class Fragment:
    text: str
    word: Optional[str] = None

    @property
    def clickable(self) -> bool:
        return self.word is not None


def clean_word(token: str) -> str:
    """Canonical lookup word for a token.

    Besides sentence punctuation and quotes, the markdown emphasis markers
    ``*``, ``_`` and backtick are trimmed so ``**Entropy**`` looks up
    ``Entropy``. The cost: a token made only of those markers (a lone ``*``
    bullet) is never clickable, and ``_private_`` looks up ``private``.
    """
    return token.strip(STRIP_CHARACTERS)


def tokenize(body: str) -> Iterator[Fragment]:
    """Yield fragments whose concatenated text reproduces ``body`` exactly.

    Non-whitespace fragments carry the punctuation-free canonical word used
    as the lookup target; the rendered text keeps the original characters.
    """
    for piece in WHITESPACE_SPLIT_PATTERN.split(body):
        if not piece:
            continue
        if piece.isspace():
            yield Fragment(text=piece)
            continue
        word = clean_word(piece)
        yield Fragment(text=piece, word=word or None)


def clickable_words(body: str) -> list[str]:
    return [fragment.word for fragment in tokenize(body) if fragment.word]
