"""Entities of the wave data model."""

from rave.models.annotation import Annotation, Element, Range
from rave.models.blip import Blip, BlipCreation, BlipState
from rave.models.component import Component
from rave.models.context import Context
from rave.models.event import Event, EventType
from rave.models.operation import Operation, OperationType, operations_bundle
from rave.models.user import User
from rave.models.wave import Wave
from rave.models.wavelet import Wavelet

__all__ = [
    "Annotation",
    "Blip",
    "BlipCreation",
    "BlipState",
    "Component",
    "Context",
    "Element",
    "Event",
    "EventType",
    "Operation",
    "OperationType",
    "Range",
    "User",
    "Wave",
    "Wavelet",
    "operations_bundle",
]
