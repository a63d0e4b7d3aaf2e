"""Events delivered by the service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rave.models.blip import Blip
    from rave.models.context import Context
    from rave.models.user import User
    from rave.models.wavelet import Wavelet


class EventType(Enum):
    """Event names as sent on the wire."""

    BLIP_CONTRIBUTORS_CHANGED = "BLIP_CONTRIBUTORS_CHANGED"
    BLIP_DELETED = "BLIP_DELETED"
    BLIP_SUBMITTED = "BLIP_SUBMITTED"
    BLIP_VERSION_CHANGED = "BLIP_VERSION_CHANGED"
    DOCUMENT_CHANGED = "DOCUMENT_CHANGED"
    FORM_BUTTON_CLICKED = "FORM_BUTTON_CLICKED"
    WAVELET_BLIP_CREATED = "WAVELET_BLIP_CREATED"
    WAVELET_BLIP_REMOVED = "WAVELET_BLIP_REMOVED"
    WAVELET_PARTICIPANTS_CHANGED = "WAVELET_PARTICIPANTS_CHANGED"
    WAVELET_SELF_ADDED = "WAVELET_SELF_ADDED"
    WAVELET_SELF_REMOVED = "WAVELET_SELF_REMOVED"
    WAVELET_TIMESTAMP_CHANGED = "WAVELET_TIMESTAMP_CHANGED"
    WAVELET_TITLE_CHANGED = "WAVELET_TITLE_CHANGED"
    WAVELET_VERSION_CHANGED = "WAVELET_VERSION_CHANGED"

    @property
    def handler_name(self) -> str:
        """Name of the robot method that handles this event."""
        return self.value.lower()


@dataclass
class Event:
    """Something that happened in a wavelet the robot participates in.

    Attributes:
        type: The kind of event.
        context: Context built from the same message.
        timestamp: When the event happened.
        modified_by_id: Address of the participant that caused it.
        properties: Event-specific values (``blipId``, ``participantsAdded`` ...).
    """

    type: EventType
    context: Context = field(repr=False)
    timestamp: datetime | None = None
    modified_by_id: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def blip_id(self) -> str | None:
        return self.properties.get("blipId")

    @property
    def blip(self) -> Blip | None:
        """Blip the event refers to, if any."""
        blip_id = self.blip_id
        return self.context.blips.get(blip_id) if blip_id else None

    @property
    def modified_by(self) -> User | None:
        return self.context.users.get(self.modified_by_id) if self.modified_by_id else None

    @property
    def wavelet(self) -> Wavelet | None:
        return self.context.primary_wavelet
