"""Robots: application code that reacts to wave events.

A robot either subclasses ``Robot`` and defines methods named after the
events it handles::

    class Shouty(Robot):
        def blip_submitted(self, event, context):
            event.blip.set_text(event.blip.content.upper())

or registers plain functions::

    robot = Robot("shouty")
    robot.register_handler(EventType.BLIP_SUBMITTED, shout)
"""

from __future__ import annotations

import importlib
import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from typing import Any

from rave.exceptions import InvalidOptionError, RobotLoadError
from rave.ids import IdGenerator
from rave.models.context import Context
from rave.models.event import Event, EventType
from rave.serde import parse_message

logger = logging.getLogger(__name__)

Handler = Callable[[Event, Context], Any]

CAPABILITIES_NAMESPACE = "http://wave.google.com/extensions/robots/1.0"


class Robot:
    """Dispatches inbound events to handlers and collects their operations.

    Args:
        name: Display name.
        robot_id: Participant address. Defaults to ``<name>@appspot.com``.
        image_url: Avatar shown by the service.
        profile_url: Link shown on the robot's profile.
        version: Capabilities version; bump it when handled events change.
        id_generator: Id source for blips the robot creates.
    """

    def __init__(
        self,
        name: str,
        *,
        robot_id: str | None = None,
        image_url: str = "",
        profile_url: str = "",
        version: str = "1",
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.name = name
        self.id = robot_id or f"{name.lower()}@appspot.com"
        self.image_url = image_url
        self.profile_url = profile_url
        self.version = version
        self._id_generator = id_generator
        self._handlers: dict[EventType, list[Handler]] = {}

    def register_handler(self, event_type: EventType | str, handler: Handler) -> None:
        """Call ``handler(event, context)`` for every event of ``event_type``."""
        if not isinstance(event_type, EventType):
            try:
                event_type = EventType(event_type)
            except ValueError:
                raise InvalidOptionError(
                    "event type", event_type, [t.value for t in EventType]
                ) from None
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: EventType) -> list[Handler]:
        handlers = list(self._handlers.get(event_type, []))
        method = getattr(self, event_type.handler_name, None)
        if callable(method):
            handlers.insert(0, method)
        return handlers

    @property
    def handled_events(self) -> list[EventType]:
        """Event types with at least one handler, in declaration order."""
        return [t for t in EventType if self.handlers_for(t)]

    def process(self, data: Any) -> Context:
        """Parse a message bundle and run handlers for each of its events.

        Args:
            data: Decoded JSON body sent by the service.

        Returns:
            The context, holding the queued operations.

        Raises:
            EventParseError: If the message is malformed.
        """
        context, events = parse_message(
            data,
            robot_id=self.id,
            version=self.version,
            id_generator=self._id_generator,
        )

        for event in events:
            handlers = self.handlers_for(event.type)
            if not handlers:
                logger.debug("No handler for %s", event.type.value)
                continue
            logger.info(
                "Handling %s for blip %s", event.type.value, event.blip_id or "-"
            )
            for handler in handlers:
                handler(event, context)

        return context

    def handle_message(self, data: Any) -> dict[str, Any]:
        """Handle one inbound message bundle, returning the operation bundle."""
        context = self.process(data)
        logger.info("Responding with %d operation(s)", len(context.operations))
        return context.to_dict()

    def capabilities_xml(self) -> str:
        """Capabilities document telling the service which events to send."""
        ET.register_namespace("w", CAPABILITIES_NAMESPACE)
        ns = f"{{{CAPABILITIES_NAMESPACE}}}"

        root = ET.Element(f"{ns}robot")
        ET.SubElement(root, f"{ns}version").text = self.version
        capabilities = ET.SubElement(root, f"{ns}capabilities")
        for event_type in self.handled_events:
            ET.SubElement(capabilities, f"{ns}capability", name=event_type.value)
        ET.SubElement(
            root,
            f"{ns}profile",
            name=self.name,
            imageurl=self.image_url,
            profileurl=self.profile_url,
        )

        body = ET.tostring(root, encoding="unicode")
        return f'<?xml version="1.0" encoding="utf-8"?>\n{body}\n'

    def profile(self) -> dict[str, Any]:
        return {
            "javaClass": "com.google.wave.api.ParticipantProfile",
            "address": self.id,
            "name": self.name,
            "imageUrl": self.image_url,
            "profileUrl": self.profile_url,
        }


def load_robot(path: str) -> Robot:
    """Import a robot from ``package.module:attribute``.

    The attribute may be a ``Robot`` instance, or a ``Robot`` subclass or
    factory callable taking no arguments.

    Raises:
        RobotLoadError: If the path is malformed or does not yield a Robot.
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise RobotLoadError(f"Robot path must look like 'module:attribute', got {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RobotLoadError(f"Cannot import {module_name}: {e}") from e

    target = getattr(module, attribute, None)
    if target is None:
        raise RobotLoadError(f"{module_name} has no attribute {attribute!r}")

    robot: object = target
    if not isinstance(target, Robot) and callable(target):
        try:
            robot = target()
        except TypeError as e:
            raise RobotLoadError(f"Cannot create robot from {path}: {e}") from e
    if not isinstance(robot, Robot):
        raise RobotLoadError(f"{path} is not a Robot")
    return robot
