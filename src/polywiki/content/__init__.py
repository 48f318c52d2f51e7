"""Incremental structured-content parsing for streamed explanations."""

from polywiki.content.sections import (
    GENERAL_TITLE,
    ParsedDocument,
    Section,
    parse_document,
    segment,
)
from polywiki.content.stabilizer import stabilize
from polywiki.content.tokens import Fragment, clickable_words, tokenize

__all__ = [
    "GENERAL_TITLE",
    "Fragment",
    "ParsedDocument",
    "Section",
    "clickable_words",
    "parse_document",
    "segment",
    "stabilize",
    "tokenize",
]
