"""Wavelets: a conversation thread (tree of blips) with its own participants."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from rave.exceptions import StructureError
from rave.models.blip import Blip, BlipCreation
from rave.models.component import Component
from rave.models.operation import Operation, OperationType
from rave.timeutils import now, time_from_json

if TYPE_CHECKING:
    from rave.models.context import Context
    from rave.models.user import User
    from rave.models.wave import Wave

logger = logging.getLogger(__name__)

JAVA_CLASS = "com.google.wave.api.impl.WaveletData"


def _as_time(value: datetime | int | None) -> datetime:
    if isinstance(value, datetime):
        return value
    return time_from_json(value) or now()


class Wavelet(Component):
    """A thread of blips inside a wave."""

    def __init__(
        self,
        id: str,
        *,
        wave_id: str | None = None,
        context: Context | None = None,
        title: str = "",
        root_blip_id: str | None = None,
        participant_ids: list[str] | None = None,
        creator_id: str | None = None,
        creation_time: datetime | int | None = None,
        last_modified_time: datetime | int | None = None,
        version: int = -1,
        data_documents: dict[str, str] | None = None,
    ) -> None:
        super().__init__(id, context)
        self.wave_id = wave_id
        self.title = title
        self.root_blip_id = root_blip_id
        self.participant_ids: list[str] = list(participant_ids or [])
        self.creator_id = creator_id
        self.creation_time = _as_time(creation_time)
        self.last_modified_time = _as_time(last_modified_time)
        self.version = version
        self.data_documents: dict[str, str] = dict(data_documents or {})

    @property
    def root_blip(self) -> Blip | None:
        if self.root_blip_id is None:
            return None
        return self._require_context().blips.get(self.root_blip_id)

    @property
    def participants(self) -> list[User | None]:
        context = self._require_context()
        return [context.users.get(user_id) for user_id in self.participant_ids]

    @property
    def creator(self) -> User | None:
        if self.creator_id is None:
            return None
        return self._require_context().users.get(self.creator_id)

    @property
    def wave(self) -> Wave | None:
        return self._require_context().waves.get(self.wave_id or "")

    def _queue(self, op_type: OperationType, prop: Any = None) -> None:
        self._require_context().add_operation(
            Operation(op_type, self.wave_id, self.id, property=prop)
        )

    def set_title(self, title: str) -> None:
        self._queue(OperationType.WAVELET_SET_TITLE, title)
        self.title = title

    def add_participant(self, user_id: str) -> None:
        if user_id in self.participant_ids:
            logger.warning("Attempt to add participant already in wavelet %s: %s", self.id, user_id)
            return
        context = self._require_context()
        self._queue(OperationType.WAVELET_ADD_PARTICIPANT, user_id)
        self.participant_ids.append(user_id)
        context.ensure_user(user_id)

    def set_data_document(self, name: str, data: str) -> None:
        self._queue(OperationType.WAVELET_DATADOC_SET, {"name": name, "data": data})
        self.data_documents[name] = data

    def remove_robot(self) -> None:
        """Ask the service to remove the acting robot from this wavelet."""
        context = self._require_context()
        self._queue(OperationType.WAVELET_REMOVE_SELF)
        if context.robot_id in self.participant_ids:
            self.participant_ids.remove(context.robot_id)

    def append_blip(self) -> Blip:
        """Add a new blip at the end of the root thread.

        Raises:
            StructureError: If the root blip is not known.
        """
        context = self._require_context()
        last = self.root_blip
        if last is None:
            raise StructureError(f"Wavelet {self.id} has no root blip")

        # Follow first replies down to the end of the main thread.
        while not last.is_leaf:
            first = last.child_blips[0]
            if first is None:
                break
            last = first

        blip = Blip(
            wave_id=self.wave_id,
            wavelet_id=self.id,
            parent_blip_id=last.id,
            context=context,
            contributor_ids=[context.robot_id] if context.robot_id else [],
            creator_id=context.robot_id,
            creation=BlipCreation.GENERATED,
        )
        self._queue(OperationType.WAVELET_APPEND_BLIP, blip)
        last.add_child_blip(blip)
        return blip

    def print_structure(self) -> str:
        root = self.root_blip
        if root is None:
            return f"{self}:<no root blip>\n"
        return f"{self}:{self.title}\n{root.print_structure(1)}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "javaClass": JAVA_CLASS,
            "waveId": self.wave_id,
            "waveletId": self.id,
            "rootBlipId": self.root_blip_id,
        }
