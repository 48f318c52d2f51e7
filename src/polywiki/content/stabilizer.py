"""Suppress half-typed trailing headers while a response is streaming."""

import re

# "\n## Hist" at the very end of the buffer: the header line may still grow,
# so exposing it would flash a short-lived tab.
PARTIAL_HEADER_PATTERN = re.compile(r"\n## ?[a-zA-Z0-9 ]*\Z")


def stabilize(raw_text: str, is_streaming: bool) -> str:
    """Return the portion of ``raw_text`` that is safe to segment."""
    if not is_streaming:
        return raw_text
    return PARTIAL_HEADER_PATTERN.sub("", raw_text)
