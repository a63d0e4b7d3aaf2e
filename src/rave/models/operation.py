"""Queued mutations sent back to the wave service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

OPERATION_JAVA_CLASS = "com.google.wave.api.impl.OperationImpl"
BUNDLE_JAVA_CLASS = "com.google.wave.api.impl.OperationMessageBundle"


class OperationType(Enum):
    """Operation names understood by the service."""

    WAVELET_APPEND_BLIP = "WAVELET_APPEND_BLIP"
    WAVELET_ADD_PARTICIPANT = "WAVELET_ADD_PARTICIPANT"
    WAVELET_CREATE = "WAVELET_CREATE"
    WAVELET_REMOVE_SELF = "WAVELET_REMOVE_SELF"
    WAVELET_DATADOC_SET = "WAVELET_DATADOC_SET"
    WAVELET_SET_TITLE = "WAVELET_SET_TITLE"
    BLIP_CREATE_CHILD = "BLIP_CREATE_CHILD"
    BLIP_DELETE = "BLIP_DELETE"
    DOCUMENT_ANNOTATION_DELETE = "DOCUMENT_ANNOTATION_DELETE"
    DOCUMENT_ANNOTATION_SET = "DOCUMENT_ANNOTATION_SET"
    DOCUMENT_APPEND = "DOCUMENT_APPEND"
    DOCUMENT_DELETE = "DOCUMENT_DELETE"
    DOCUMENT_INSERT = "DOCUMENT_INSERT"
    DOCUMENT_REPLACE = "DOCUMENT_REPLACE"


@dataclass
class Operation:
    """A single mutation targeting a wave, wavelet and (optionally) blip.

    Attributes:
        type: What the service should do.
        wave_id: Target wave.
        wavelet_id: Target wavelet.
        blip_id: Target blip, empty for wavelet-level operations.
        index: Position argument, -1 when unused.
        property: Payload; entities are serialized with their ``to_dict()``.
    """

    type: OperationType
    wave_id: str | None
    wavelet_id: str | None
    blip_id: str | None = None
    index: int = -1
    property: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "javaClass": OPERATION_JAVA_CLASS,
            "type": self.type.value,
            "waveId": self.wave_id or "",
            "waveletId": self.wavelet_id or "",
            "blipId": self.blip_id or "",
            "index": self.index,
            "property": _serialize_property(self.property),
        }


def _serialize_property(value: Any) -> Any:
    if value is None:
        return None
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _serialize_property(v) for k, v in value.items()}
    return value


def operations_bundle(operations: list[Operation], version: str = "1") -> dict[str, Any]:
    """Wrap operations in the message bundle the service expects in a response."""
    return {
        "javaClass": BUNDLE_JAVA_CLASS,
        "version": version,
        "operations": {
            "javaClass": "java.util.ArrayList",
            "list": [op.to_dict() for op in operations],
        },
    }
