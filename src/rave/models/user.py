"""Participants of a wave (people and robots)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rave.models.component import Component

if TYPE_CHECKING:
    from rave.models.context import Context


class User(Component):
    """A participant, identified by address (e.g. ``bob@example.com``)."""

    def __init__(
        self,
        id: str,
        *,
        name: str | None = None,
        url: str | None = None,
        image_url: str | None = None,
        context: Context | None = None,
    ) -> None:
        super().__init__(id, context)
        self.name = name or id
        self.url = url
        self.image_url = image_url

    def to_dict(self) -> dict[str, Any]:
        return {
            "javaClass": "com.google.wave.api.ParticipantProfile",
            "address": self.id,
            "name": self.name,
            "imageUrl": self.image_url or "",
            "profileUrl": self.url or "",
        }
