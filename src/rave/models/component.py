"""Base class for every entity that lives in a Context."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rave.models.context import Context


class Component:
    """An identified entity owned by a Context.

    Two components are equal when they are of the same class and share an id.
    The id cannot change after construction.
    """

    def __init__(self, id: str | None, context: Context | None = None) -> None:
        if not id:
            raise ValueError(f"{type(self).__name__} requires an id")
        self._id = id
        self._context = context

    @property
    def id(self) -> str:
        return self._id

    @property
    def context(self) -> Context | None:
        return self._context

    @context.setter
    def context(self, context: Context | None) -> None:
        self._context = context

    def _require_context(self) -> Context:
        if self._context is None:
            raise RuntimeError(f"{self} is not attached to a context")
        return self._context

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._id == other._id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))

    def __str__(self) -> str:
        return f"{type(self).__name__}:{self._id}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self._id!r}>"
