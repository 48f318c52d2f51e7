"""Section segmentation for streamed markdown explanations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from polywiki.content.stabilizer import stabilize

GENERAL_TITLE = "General"
RELATED_TITLE = "related"
SECTION_SEPARATOR = "\n\n"

# "## Title" on its own line. "###" never matches because the third
# character must be the single separating space.
HEADER_PATTERN = re.compile(r"^## (.*)$", re.MULTILINE)
BULLET_PATTERN = re.compile(r"^[-*]\s+")


@dataclass(frozen=True)
class Section:
    """A named block of explanatory text under one topic heading."""

    title: str
    body: str

    @property
    def key(self) -> str:
        return self.title.lower()


@dataclass(frozen=True)
class ParsedDocument:
    """Tabbed view of one raw response: sections plus related topics."""

    sections: Tuple[Section, ...] = field(default_factory=tuple)
    related: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def titles(self) -> List[str]:
        return [section.title for section in self.sections]

    def find(self, title: str) -> Optional[Section]:
        """Return the section whose title matches case-insensitively."""
        wanted = title.strip().lower()
        for section in self.sections:
            if section.key == wanted:
                return section
        return None

    def resolve_tab(self, title: Optional[str]) -> Optional[Section]:
        """Return the requested tab, falling back to the first section.

        Used while streaming: the previously active tab may not exist yet
        (new lookup) or may have been renamed by a later chunk.
        """
        if title:
            found = self.find(title)
            if found is not None:
                return found
        return self.sections[0] if self.sections else None

    def is_streaming_section(self, section: Optional[Section], loading: bool) -> bool:
        """The last section is the one still receiving text while loading."""
        if not loading or section is None or not self.sections:
            return False
        return section is self.sections[-1]


def _related_items(body: str) -> List[str]:
    items: List[str] = []
    for line in body.split("\n"):
        item = BULLET_PATTERN.sub("", line.strip()).strip()
        if item:
            items.append(item)
    return items


def segment(raw_text: str) -> ParsedDocument:
    """Split raw markdown into ordered sections and a related-topics list.

    Never fails: text without any ``## `` header becomes a single
    ``General`` section, and empty input yields an empty document.
    """
    parts = HEADER_PATTERN.split(raw_text)
    titles: List[str] = []
    bodies: Dict[str, List[str]] = {}
    display: Dict[str, str] = {}
    related: List[str] = []

    def _add(title: str, body: str) -> None:
        key = title.lower()
        if key not in bodies:
            titles.append(key)
            display[key] = title
            bodies[key] = []
        bodies[key].append(body)

    preamble = parts[0].strip()
    if preamble:
        _add(GENERAL_TITLE, preamble)

    for index in range(1, len(parts), 2):
        title = parts[index].strip()
        body = parts[index + 1].strip() if index + 1 < len(parts) else ""
        if title.lower() == RELATED_TITLE:
            related.extend(_related_items(body))
            continue
        # A bare "## " line has no usable tab name; keep its text with the
        # broad definition.
        _add(title or GENERAL_TITLE, body)

    sections = tuple(
        Section(title=display[key], body=SECTION_SEPARATOR.join(bodies[key]))
        for key in titles
    )
    return ParsedDocument(sections=sections, related=tuple(related))


def parse_document(raw_text: str, is_streaming: bool = False) -> ParsedDocument:
    """Stabilize then segment: the structured view of an in-flight response."""
    return segment(stabilize(raw_text, is_streaming))
