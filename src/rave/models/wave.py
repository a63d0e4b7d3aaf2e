"""Waves: the top-level document containing wavelets."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rave.models.component import Component

if TYPE_CHECKING:
    from rave.models.context import Context
    from rave.models.wavelet import Wavelet


class Wave(Component):
    def __init__(
        self,
        id: str,
        *,
        wavelet_ids: list[str] | None = None,
        context: Context | None = None,
    ) -> None:
        super().__init__(id, context)
        self.wavelet_ids: list[str] = list(wavelet_ids or [])

    @property
    def wavelets(self) -> list[Wavelet | None]:
        context = self._require_context()
        return [context.wavelets.get(wavelet_id) for wavelet_id in self.wavelet_ids]
