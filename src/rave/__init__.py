"""Rave: build robots for the wave collaborative-document service."""

from rave.exceptions import (
    APIError,
    AuthenticationError,
    EventParseError,
    InvalidOptionError,
    RaveError,
    RobotLoadError,
    StructureError,
    TransportError,
)
from rave.ids import IdGenerator, default_id_generator
from rave.models import (
    Annotation,
    Blip,
    BlipCreation,
    BlipState,
    Component,
    Context,
    Element,
    Event,
    EventType,
    Operation,
    OperationType,
    Range,
    User,
    Wave,
    Wavelet,
)
from rave.robot import Robot, load_robot
from rave.serde import parse_message
from rave.transport import HttpTransport, LocalFileTransport, OperationTransport

__all__ = [
    # Robot
    "Robot",
    "load_robot",
    "parse_message",
    # Models
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
    # Ids
    "IdGenerator",
    "default_id_generator",
    # Transport
    "OperationTransport",
    "HttpTransport",
    "LocalFileTransport",
    # Exceptions
    "RaveError",
    "InvalidOptionError",
    "StructureError",
    "EventParseError",
    "RobotLoadError",
    "TransportError",
    "AuthenticationError",
    "APIError",
]
