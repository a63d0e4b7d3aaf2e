"""Shared test fixtures for rave."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from rave.ids import IdGenerator
from rave.models import Blip, BlipState, Context, Wave, Wavelet

GOLDEN_DIR = Path(__file__).parent / "golden"

ROBOT_ID = "robot@appspot.com"
WAVE_ID = "example.com!w+1"
WAVELET_ID = "example.com!conv+root"


@pytest.fixture
def golden_dir() -> Path:
    return GOLDEN_DIR


@pytest.fixture
def blip_submitted() -> dict[str, Any]:
    """Event bundle for a BLIP_SUBMITTED event on b+1."""
    data: dict[str, Any] = json.loads((GOLDEN_DIR / "blip_submitted.json").read_text())
    return data


@pytest.fixture
def context() -> Context:
    """Empty context with its own id sequence and a single wavelet."""
    ctx = Context(robot_id=ROBOT_ID, id_generator=IdGenerator())
    ctx.add_wavelet(Wavelet(WAVELET_ID, wave_id=WAVE_ID, root_blip_id="b+0"))
    ctx.add_wave(Wave(WAVE_ID, wavelet_ids=[WAVELET_ID]))
    return ctx


@pytest.fixture
def add_blip(context: Context) -> Callable[..., Blip]:
    """Factory that builds a blip and links it under ``parent`` (or as a root)."""

    def _add(
        blip_id: str,
        parent: Blip | None = None,
        content: str = "",
        state: BlipState | str = BlipState.NORMAL,
    ) -> Blip:
        blip = Blip(
            blip_id,
            content=content,
            contributor_ids=["a@x"],
            parent_blip_id=parent.id if parent else None,
            wave_id=WAVE_ID,
            wavelet_id=WAVELET_ID,
            state=state,
        )
        if parent is None:
            context.add_blip(blip)
        else:
            parent.add_child_blip(blip)
        return blip

    return _add
