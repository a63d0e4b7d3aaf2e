"""Value types attached to blip content."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Range:
    """Half-open character range ``[start, end)`` within blip content."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid range [{self.start}, {self.end})")

    def to_dict(self) -> dict[str, Any]:
        return {"javaClass": "com.google.wave.api.Range", "start": self.start, "end": self.end}


@dataclass
class Annotation:
    """A named value applied to a range of content (e.g. ``style/fontWeight``)."""

    name: str
    value: str
    range: Range

    def to_dict(self) -> dict[str, Any]:
        return {
            "javaClass": "com.google.wave.api.Annotation",
            "name": self.name,
            "value": self.value,
            "range": self.range.to_dict(),
        }


@dataclass
class Element:
    """A structured element (gadget, image, form input) at a content position."""

    type: str
    properties: dict[str, Any] = field(default_factory=dict)
