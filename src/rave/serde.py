"""Build a Context and its events from an inbound message bundle.

The service encodes collections the Java way: lists as ``{"list": [...]}``
and maps as ``{"map": {...}}``. Both the wrapped and the plain forms are
accepted here.

Example bundle::

    {
      "blips": {"map": {"b+1": {"blipId": "b+1", "content": "hi", ...}}},
      "events": {"list": [{"type": "BLIP_SUBMITTED", "modifiedBy": "bob@x",
                            "timestamp": 1250000000000,
                            "properties": {"map": {"blipId": "b+1"}}}]},
      "wavelet": {"waveId": "w+1", "waveletId": "conv+root",
                  "rootBlipId": "b+1", "participants": {"list": ["bob@x"]}}
    }
"""

from __future__ import annotations

import logging
from typing import Any

from rave.exceptions import EventParseError
from rave.ids import IdGenerator
from rave.models.annotation import Annotation, Element, Range
from rave.models.blip import Blip, BlipCreation
from rave.models.context import Context
from rave.models.event import Event, EventType
from rave.models.wave import Wave
from rave.models.wavelet import Wavelet
from rave.timeutils import time_from_json

logger = logging.getLogger(__name__)


def parse_message(
    data: Any,
    *,
    robot_id: str | None = None,
    version: str = "1",
    id_generator: IdGenerator | None = None,
) -> tuple[Context, list[Event]]:
    """Parse an event message bundle.

    Args:
        data: Decoded JSON body sent by the service.
        robot_id: Address of the robot handling the message.
        version: Protocol version for the response bundle.
        id_generator: Id source for blips the robot creates.

    Returns:
        Tuple of (populated Context, events in delivery order).

    Raises:
        EventParseError: If the bundle is not shaped as expected.
    """
    if not isinstance(data, dict):
        raise EventParseError("$", "expected a JSON object")

    context = Context(robot_id=robot_id, version=version, id_generator=id_generator)
    if robot_id:
        context.ensure_user(robot_id)

    if data.get("wavelet") is not None:
        _parse_wavelet(context, data["wavelet"])

    for key, raw in _unwrap_map(data.get("blips"), "$.blips").items():
        _parse_blip(context, key, raw, f"$.blips.{key}")

    _add_virtual_children(context)

    events = [
        event
        for index, raw in enumerate(_unwrap_list(data.get("events"), "$.events"))
        if (event := _parse_event(context, raw, f"$.events[{index}]")) is not None
    ]

    logger.debug(
        "Parsed message: %d blip(s), %d event(s)", len(context.blips), len(events)
    )
    return context, events


def _unwrap_list(value: Any, path: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, dict) and isinstance(value.get("list"), list):
        return value["list"]  # type: ignore[no-any-return]
    if isinstance(value, list):
        return value
    raise EventParseError(path, "expected a list")


def _unwrap_map(value: Any, path: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        inner = value.get("map")
        if isinstance(inner, dict):
            return inner
        return value
    raise EventParseError(path, "expected a map")


def _int(value: Any, default: int) -> int:
    return default if value is None else int(value)


def _require(raw: dict[str, Any], key: str, path: str) -> str:
    value = _optional_str(raw, key, path)
    if value is None:
        raise EventParseError(f"{path}.{key}", "missing required field")
    return value


def _optional_str(raw: dict[str, Any], key: str, path: str) -> str | None:
    value = raw.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise EventParseError(f"{path}.{key}", "expected a string")
    return value


def _parse_wavelet(context: Context, raw: Any) -> None:
    path = "$.wavelet"
    if not isinstance(raw, dict):
        raise EventParseError(path, "expected an object")

    wave_id = _require(raw, "waveId", path)
    participant_ids = [str(p) for p in _unwrap_list(raw.get("participants"), f"{path}.participants")]
    try:
        wavelet = Wavelet(
            _require(raw, "waveletId", path),
            wave_id=wave_id,
            title=_optional_str(raw, "title", path) or "",
            root_blip_id=_optional_str(raw, "rootBlipId", path),
            participant_ids=participant_ids,
            creator_id=_optional_str(raw, "creator", path),
            creation_time=time_from_json(raw.get("creationTime")),
            last_modified_time=time_from_json(raw.get("lastModifiedTime")),
            version=_int(raw.get("version"), -1),
            data_documents=_unwrap_map(raw.get("dataDocuments"), f"{path}.dataDocuments"),
        )
    except (TypeError, ValueError) as e:
        raise EventParseError(path, str(e)) from e

    context.add_wavelet(wavelet)
    context.add_wave(Wave(wave_id, wavelet_ids=[wavelet.id]))
    for user_id in participant_ids:
        context.ensure_user(user_id)
    if wavelet.creator_id:
        context.ensure_user(wavelet.creator_id)


def _parse_annotation(raw: Any, path: str) -> Annotation:
    if not isinstance(raw, dict):
        raise EventParseError(path, "expected an object")
    text_range = raw.get("range") or {}
    try:
        return Annotation(
            name=_require(raw, "name", path),
            value=str(raw.get("value", "")),
            range=Range(int(text_range.get("start", 0)), int(text_range.get("end", 0))),
        )
    except (TypeError, ValueError) as e:
        raise EventParseError(path, str(e)) from e


def _parse_elements(value: Any, path: str) -> dict[int, Element]:
    elements: dict[int, Element] = {}
    for position, raw in _unwrap_map(value, path).items():
        if not isinstance(raw, dict):
            raise EventParseError(f"{path}.{position}", "expected an object")
        try:
            index = int(position)
        except ValueError as e:
            raise EventParseError(f"{path}.{position}", "position is not an integer") from e
        elements[index] = Element(
            type=str(raw.get("type", "")),
            properties=_unwrap_map(raw.get("properties"), f"{path}.{position}.properties"),
        )
    return elements


def _parse_blip(context: Context, key: str, raw: Any, path: str) -> None:
    if not isinstance(raw, dict):
        raise EventParseError(path, "expected an object")

    contributor_ids = [str(c) for c in _unwrap_list(raw.get("contributors"), f"{path}.contributors")]
    annotations = [
        _parse_annotation(a, f"{path}.annotations[{i}]")
        for i, a in enumerate(_unwrap_list(raw.get("annotations"), f"{path}.annotations"))
    ]
    try:
        blip = Blip(
            _optional_str(raw, "blipId", path) or key,
            context=context,
            content=_optional_str(raw, "content", path) or "",
            annotations=annotations,
            child_blip_ids=[
                str(c) for c in _unwrap_list(raw.get("childBlipIds"), f"{path}.childBlipIds")
            ],
            contributor_ids=contributor_ids,
            creator_id=_optional_str(raw, "creator", path),
            elements=_parse_elements(raw.get("elements"), f"{path}.elements"),
            last_modified_time=time_from_json(raw.get("lastModifiedTime")),
            parent_blip_id=_optional_str(raw, "parentBlipId", path),
            version=_int(raw.get("version"), -1),
            wave_id=_optional_str(raw, "waveId", path),
            wavelet_id=_optional_str(raw, "waveletId", path),
        )
    except (TypeError, ValueError) as e:
        raise EventParseError(path, str(e)) from e

    context.add_blip(blip)
    for user_id in contributor_ids:
        context.ensure_user(user_id)
    if blip.creator_id:
        context.ensure_user(blip.creator_id)


def _add_virtual_children(context: Context) -> None:
    """Stand in for replies that were referenced but not sent."""
    for blip in list(context.blips.values()):
        for child_id in blip.child_blip_ids:
            if child_id not in context.blips:
                context.add_blip(
                    Blip(
                        child_id,
                        parent_blip_id=blip.id,
                        wave_id=blip.wave_id,
                        wavelet_id=blip.wavelet_id,
                        creation=BlipCreation.VIRTUAL,
                    )
                )


def _parse_event(context: Context, raw: Any, path: str) -> Event | None:
    if not isinstance(raw, dict):
        raise EventParseError(path, "expected an object")

    type_name = _require(raw, "type", path)
    try:
        event_type = EventType(type_name)
    except ValueError:
        logger.warning("Skipping unknown event type: %s", type_name)
        return None

    try:
        timestamp = time_from_json(raw.get("timestamp"))
    except ValueError as e:
        raise EventParseError(f"{path}.timestamp", str(e)) from e

    modified_by_id = _optional_str(raw, "modifiedBy", path)
    if modified_by_id:
        context.ensure_user(modified_by_id)

    properties = _unwrap_map(raw.get("properties"), f"{path}.properties")
    _optional_str(properties, "blipId", f"{path}.properties")

    return Event(
        type=event_type,
        context=context,
        timestamp=timestamp,
        modified_by_id=modified_by_id,
        properties=properties,
    )
