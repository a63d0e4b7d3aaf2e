"""Blips: the nodes of a wavelet's reply tree.

Parent and child links are stored as ids and resolved through the owning
Context, so a tree can be assembled from partial data and nodes can be
detached without leaving dangling references.

Lifecycle::

    normal --delete()--> deleted   (still has children; keeps tree shape)
    normal --delete()--> null      (leaf; detached from parent and context)
    deleted --last child removed--> null

The root blip never leaves ``normal``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from rave.exceptions import InvalidOptionError, StructureError
from rave.ids import IdGenerator, default_id_generator
from rave.models.annotation import Annotation, Element, Range
from rave.models.component import Component
from rave.models.operation import Operation, OperationType
from rave.timeutils import now, time_from_json

if TYPE_CHECKING:
    from rave.models.context import Context
    from rave.models.user import User
    from rave.models.wave import Wave
    from rave.models.wavelet import Wavelet

logger = logging.getLogger(__name__)

JAVA_CLASS = "com.google.wave.api.impl.BlipData"

# Longest content shown by str(blip) before truncating.
DISPLAY_WIDTH = 24


class BlipState(Enum):
    """Lifecycle state of a blip."""

    NORMAL = "normal"
    DELETED = "deleted"
    NULL = "null"


class BlipCreation(Enum):
    """Where a blip came from."""

    ORIGINAL = "original"  # sent by the service
    GENERATED = "generated"  # created locally by the robot
    VIRTUAL = "virtual"  # inferred from a reference, data not received yet


_E = TypeVar("_E", bound=Enum)


def _coerce(enum_cls: type[_E], value: _E | str, option: str) -> _E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidOptionError(option, value, [m.value for m in enum_cls]) from None


class Blip(Component):
    """A single message in a wavelet.

    Args:
        id: Blip id. Generated (``TBD_<wavelet_id>_<n>``) when omitted.
        context: Owning context. The blip is not registered with it here;
            see ``Context.add_blip``.
        content: Text content.
        annotations: Annotations over the content.
        child_blip_ids: Ids of direct replies, in order.
        contributor_ids: Ids of users that edited the blip.
        creator_id: Id of the original author.
        elements: Structured elements keyed by content position.
        last_modified_time: Datetime or wire timestamp (ms). Defaults to now.
        parent_blip_id: Id of the blip this replies to; None for the root.
        version: Service version, -1 until assigned.
        wave_id: Containing wave.
        wavelet_id: Containing wavelet.
        state: One of ``BlipState`` (or its value).
        creation: One of ``BlipCreation`` (or its value).
        id_generator: Source of synthetic ids. Falls back to the context's
            generator, then the process-wide default.

    Raises:
        InvalidOptionError: If ``state`` or ``creation`` is not recognised.
    """

    def __init__(
        self,
        id: str | None = None,
        *,
        context: Context | None = None,
        content: str = "",
        annotations: list[Annotation] | None = None,
        child_blip_ids: list[str] | None = None,
        contributor_ids: list[str] | None = None,
        creator_id: str | None = None,
        elements: dict[int, Element] | None = None,
        last_modified_time: datetime | int | None = None,
        parent_blip_id: str | None = None,
        version: int = -1,
        wave_id: str | None = None,
        wavelet_id: str | None = None,
        state: BlipState | str = BlipState.NORMAL,
        creation: BlipCreation | str = BlipCreation.ORIGINAL,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._state = _coerce(BlipState, state, "state")
        self._creation = _coerce(BlipCreation, creation, "creation")

        if id is None:
            generator = id_generator or (context.id_generator if context else None)
            id = (generator or default_id_generator).next_id(wavelet_id)

        super().__init__(id, context)

        self._content = content
        self.annotations: list[Annotation] = list(annotations or [])
        self._child_blip_ids: list[str] = list(child_blip_ids or [])
        self.contributor_ids: list[str] = list(contributor_ids or [])
        self.creator_id = creator_id
        self.elements: dict[int, Element] = dict(elements or {})
        if isinstance(last_modified_time, datetime):
            self.last_modified_time = last_modified_time
        else:
            self.last_modified_time = time_from_json(last_modified_time) or now()
        self._parent_blip_id = parent_blip_id
        self.version = version
        self.wave_id = wave_id
        self.wavelet_id = wavelet_id

    # --- Attributes ---

    @property
    def content(self) -> str:
        """Text contained in the blip."""
        return self._content

    @property
    def child_blip_ids(self) -> list[str]:
        return list(self._child_blip_ids)

    @property
    def parent_blip_id(self) -> str | None:
        return self._parent_blip_id

    @property
    def state(self) -> BlipState:
        return self._state

    @property
    def creation(self) -> BlipCreation:
        return self._creation

    @property
    def is_root(self) -> bool:
        return not self._parent_blip_id

    @property
    def is_leaf(self) -> bool:
        return not self._child_blip_ids

    @property
    def is_deleted(self) -> bool:
        """True when deleted or destroyed."""
        return self._state in (BlipState.DELETED, BlipState.NULL)

    @property
    def is_null(self) -> bool:
        return self._state is BlipState.NULL

    @property
    def is_generated(self) -> bool:
        return self._creation is BlipCreation.GENERATED

    @property
    def is_virtual(self) -> bool:
        return self._creation is BlipCreation.VIRTUAL

    @property
    def is_original(self) -> bool:
        return self._creation is BlipCreation.ORIGINAL

    def has_annotation(self, name: str) -> bool:
        return any(a.name == name for a in self.annotations)

    # --- Context lookups ---

    @property
    def contributors(self) -> list[User | None]:
        context = self._require_context()
        return [context.users.get(user_id) for user_id in self.contributor_ids]

    @property
    def creator(self) -> User | None:
        if self.creator_id is None:
            return None
        return self._require_context().users.get(self.creator_id)

    @property
    def child_blips(self) -> list[Blip | None]:
        """Direct replies. The first continues the thread; the rest are indented."""
        context = self._require_context()
        return [context.blips.get(blip_id) for blip_id in self._child_blip_ids]

    @property
    def parent_blip(self) -> Blip | None:
        """The blip this is a reply to, None for the root."""
        if self._parent_blip_id is None or self._context is None:
            return None
        return self._context.blips.get(self._parent_blip_id)

    @property
    def wavelet(self) -> Wavelet | None:
        return self._require_context().wavelets.get(self.wavelet_id or "")

    @property
    def wave(self) -> Wave | None:
        return self._require_context().waves.get(self.wave_id or "")

    # --- Tree operations ---

    def create_child_blip(self) -> Blip:
        """Create a reply to this blip, authored by the acting robot."""
        context = self._require_context()
        blip = Blip(
            wave_id=self.wave_id,
            wavelet_id=self.wavelet_id,
            parent_blip_id=self.id,
            context=context,
            contributor_ids=[context.robot_id] if context.robot_id else [],
            creator_id=context.robot_id,
            creation=BlipCreation.GENERATED,
        )
        context.add_operation(
            Operation(
                OperationType.BLIP_CREATE_CHILD,
                self.wave_id,
                self.wavelet_id,
                self.id,
                property=blip,
            )
        )
        self.add_child_blip(blip)
        return blip

    def add_child_blip(self, blip: Blip) -> None:
        """Link an already-built blip as the last reply (no operation queued)."""
        self._child_blip_ids.append(blip.id)
        self._require_context().add_blip(blip)

    def _remove_child_blip(self, blip: Blip) -> None:
        if blip.id in self._child_blip_ids:
            self._child_blip_ids.remove(blip.id)

        # No longer needed to hold the tree together.
        if self.is_deleted and self.is_leaf and not self.is_root:
            self._destroy()

    def delete(self) -> str | None:
        """Delete this blip from its wavelet.

        Deleting the root or an already deleted blip only logs a warning.

        Returns:
            The blip id, or None when nothing was done.
        """
        if self.is_deleted:
            logger.warning("Attempt to delete blip that has already been deleted: %s", self.id)
            return None
        if self.is_root:
            logger.warning("Attempt to delete root blip: %s", self.id)
            return None

        self._require_context().add_operation(
            Operation(OperationType.BLIP_DELETE, self.wave_id, self.wavelet_id, self.id)
        )
        return self._delete()

    def _delete(self) -> str:
        """Mark as deleted, or destroy outright when nothing hangs off this blip."""
        if self.is_root:
            raise StructureError(f"Can't delete root blip: {self.id}")

        if self.is_leaf:
            self._destroy()
        else:
            self._state = BlipState.DELETED
            self._content = ""

        return self.id

    def _destroy(self) -> str:
        """Detach from parent and context, leaving the blip null."""
        if self.is_root:
            raise StructureError(f"Can't destroy root blip: {self.id}")
        if not self.is_leaf:
            raise StructureError(f"Can't destroy non-leaf blip: {self.id}")

        parent = self.parent_blip
        if parent is not None:
            parent._remove_child_blip(self)
        self._parent_blip_id = None
        if self._context is not None:
            self._context.remove_blip(self)
        self._state = BlipState.NULL
        self._content = ""

        return self.id

    # --- Document operations ---

    def _editable(self, action: str) -> bool:
        if self.is_deleted:
            logger.warning("Attempt to %s deleted blip: %s", action, self.id)
            return False
        return True

    def _queue(self, op_type: OperationType, index: int = -1, prop: Any = None) -> None:
        self._require_context().add_operation(
            Operation(op_type, self.wave_id, self.wavelet_id, self.id, index=index, property=prop)
        )

    def set_text(self, text: str) -> None:
        """Replace the whole content."""
        if not self._editable("set text of"):
            return
        self._queue(OperationType.DOCUMENT_REPLACE, prop=text)
        self._content = text

    def append_text(self, text: str) -> None:
        if not self._editable("append text to"):
            return
        self._queue(OperationType.DOCUMENT_APPEND, prop=text)
        self._content += text

    def insert_text(self, index: int, text: str) -> None:
        """Insert ``text`` before position ``index``."""
        if not self._editable("insert text into"):
            return
        if not 0 <= index <= len(self._content):
            raise ValueError(f"Index {index} outside content of length {len(self._content)}")
        self._queue(OperationType.DOCUMENT_INSERT, index=index, prop=text)
        self._content = self._content[:index] + text + self._content[index:]

    def delete_range(self, start: int, end: int) -> None:
        """Remove content in ``[start, end)``."""
        if not self._editable("delete text from"):
            return
        text_range = self._content_range(start, end)
        self._queue(OperationType.DOCUMENT_DELETE, prop=text_range)
        self._content = self._content[:start] + self._content[end:]

    def set_annotation(self, name: str, value: str, start: int, end: int) -> Annotation | None:
        """Annotate ``[start, end)``.

        Returns:
            The new annotation, or None when the blip is deleted.
        """
        if not self._editable("annotate"):
            return None
        annotation = Annotation(name, value, self._content_range(start, end))
        self._queue(OperationType.DOCUMENT_ANNOTATION_SET, prop=annotation)
        self.annotations.append(annotation)
        return annotation

    def _content_range(self, start: int, end: int) -> Range:
        text_range = Range(start, end)
        if end > len(self._content):
            raise ValueError(f"Range end {end} outside content of length {len(self._content)}")
        return text_range

    # --- Output ---

    def __str__(self) -> str:
        text = self._content.replace("\n", "\\n")
        if len(text) > DISPLAY_WIDTH:
            text = f"{text[:DISPLAY_WIDTH - 3]}..."

        if self._state is BlipState.NORMAL:
            body = f"{','.join(self.contributor_ids)}:{text}"
        elif self._state is BlipState.DELETED:
            body = "<DELETED>"
        else:
            body = "<NULL>"

        return f"{super().__str__()}:{body}"

    def print_structure(self, indent: int = 0) -> str:
        """Render this blip and its descendants, one per line.

        Replies after the first are indented one level, separated by blank
        lines; the first reply continues the thread at the same level.
        """
        out = f"{'  ' * indent}{self}\n"

        children = [blip for blip in self.child_blips if blip is not None]

        for index, blip in enumerate(children[1:], start=1):
            if index > 1:
                out += "\n"
            out += blip.print_structure(indent + 1)

        if children:
            out += children[0].print_structure(indent)

        return out

    def to_dict(self) -> dict[str, Any]:
        """Minimal form used in operations; the service already has the rest."""
        return {
            "blipId": self.id,
            "javaClass": JAVA_CLASS,
            "waveId": self.wave_id,
            "waveletId": self.wavelet_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
