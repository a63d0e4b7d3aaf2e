"""Per-event registry of entities and pending operations."""

from __future__ import annotations

import json
import logging
from typing import Any

from rave.ids import IdGenerator, default_id_generator
from rave.models.blip import Blip
from rave.models.operation import Operation, operations_bundle
from rave.models.user import User
from rave.models.wave import Wave
from rave.models.wavelet import Wavelet

logger = logging.getLogger(__name__)


class Context:
    """Everything a robot knows while handling one inbound message.

    Entities are stored by id; relationships between them are ids resolved
    here. Mutations made through the entities are queued in ``operations``.

    Args:
        robot_id: Address of the robot acting in this context.
        version: Protocol version echoed in the response bundle.
        id_generator: Source of synthetic ids for locally created blips.
    """

    def __init__(
        self,
        *,
        robot_id: str | None = None,
        version: str = "1",
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.robot_id = robot_id
        self.version = version
        self.id_generator = id_generator or default_id_generator
        self.blips: dict[str, Blip] = {}
        self.wavelets: dict[str, Wavelet] = {}
        self.waves: dict[str, Wave] = {}
        self.users: dict[str, User] = {}
        self.operations: list[Operation] = []

    def add_blip(self, blip: Blip) -> Blip:
        blip.context = self
        self.blips[blip.id] = blip
        return blip

    def remove_blip(self, blip: Blip) -> None:
        self.blips.pop(blip.id, None)

    def add_wavelet(self, wavelet: Wavelet) -> Wavelet:
        wavelet.context = self
        self.wavelets[wavelet.id] = wavelet
        return wavelet

    def add_wave(self, wave: Wave) -> Wave:
        wave.context = self
        self.waves[wave.id] = wave
        return wave

    def add_user(self, user: User) -> User:
        user.context = self
        self.users[user.id] = user
        return user

    def ensure_user(self, user_id: str) -> User:
        """Return the user with ``user_id``, registering a bare one if unknown."""
        user = self.users.get(user_id)
        if user is None:
            user = self.add_user(User(user_id))
        return user

    def add_operation(self, operation: Operation) -> None:
        logger.debug(
            "Queued %s for blip %s", operation.type.value, operation.blip_id or "-"
        )
        self.operations.append(operation)

    @property
    def primary_wavelet(self) -> Wavelet | None:
        """The wavelet the inbound message was about."""
        return next(iter(self.wavelets.values()), None)

    def print_structure(self) -> str:
        return "".join(wavelet.print_structure() for wavelet in self.wavelets.values())

    def to_dict(self) -> dict[str, Any]:
        """Pending operations as a response bundle."""
        return operations_bundle(self.operations, self.version)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
