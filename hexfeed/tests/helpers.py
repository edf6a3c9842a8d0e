"""Frame parsing helpers shared by stream tests."""

from __future__ import annotations

import re

HEX_RE = re.compile(r"^[0-9a-f]{6}$")


def fragment_hexes(frame: str) -> list[str]:
    """Return the three hex occurrences (color, border, label) of one frame."""
    color = re.search(r"color:#([0-9a-f]+);", frame)
    border = re.search(r"border:1px solid #([0-9a-f]+);", frame)
    label = re.search(r">([^<]*)</span>", frame)
    return [match.group(1) if match else "" for match in (color, border, label)]


def split_frames(body: str) -> list[str]:
    """Split an event-stream body into non-empty frames."""
    return [chunk for chunk in body.split("\n\n") if chunk.strip()]
