# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Nullable owned state handle."""

from __future__ import annotations

from typing import Optional

from .base import State, StateSpace


class SafeState:
    """Hold at most one state owned through a :class:`StateSpace`.

    Binding always frees the previous occupant before cloning the new one,
    and clearing is idempotent, so a handle can neither leak nor free twice.
    """

    __slots__ = ("_state",)

    def __init__(self) -> None:
        self._state: Optional[State] = None

    def get(self) -> Optional[State]:
        """Return the held state or ``None``."""

        return self._state

    @property
    def is_null(self) -> bool:
        return self._state is None

    def set(self, state: Optional[State], space: StateSpace) -> None:
        """Replace the held state with an owned clone of ``state``.

        Rebinding the held state itself is a no-op.
        """

        if state is not None and state is self._state:
            return
        self.clear(space)
        if state is not None:
            self._state = space.clone(state)

    def clear(self, space: StateSpace) -> None:
        """Free the held state, if any."""

        if self._state is not None:
            space.free(self._state)
            self._state = None

    def __repr__(self) -> str:
        return f"SafeState({'null' if self._state is None else self._state.tolist()})"


__all__ = ["SafeState"]
