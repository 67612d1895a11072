"""Bounded linear undo/redo history over immutable transcript snapshots.

WHY: Users edit transcripts in many small steps and expect Ctrl+Z /
Ctrl+Shift+Z to walk back and forth without ever corrupting word timing.
Scattering stack pushes and pops across call sites makes it easy to
record an undo as a new edit; an explicit reducer rules that out.

HOW: HistoryState is a frozen (past, present, future, limit) value.
reduce_history() takes a state and an action and returns the next state.
Actions are small frozen dataclasses: SetAction, UndoAction, RedoAction,
ResetAction, ClearHistoryAction. EditHistory is the one mutable holder an
editing session owns; it dispatches actions and exposes the read side.

RULES:
- set: no-op when the snapshot equals present; otherwise push present to
  past (evicting the oldest beyond limit), replace present, clear future
- undo: no-op on empty past; otherwise pop the last past entry into present
  and push the old present onto the FRONT of future
- redo: no-op on empty future; otherwise pop the first future entry into
  present and push the old present onto past (limit respected)
- reset: empty both stacks and replace present (authoritative re-sync)
- clear: empty both stacks, keep present
- undo/redo never go through the set transition, so replaying history can
  never create new history entries
- Stacks are tuples; no state is ever mutated in place
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Generic, Tuple, TypeVar, Union

from caption_editor.config import HISTORY_LIMIT

T = TypeVar("T")


@dataclass(frozen=True)
class HistoryState(Generic[T]):
    """Past/present/future triple with a bounded past.

    RULES:
    - past: oldest first, most recent last
    - future: next redo first
    - limit: maximum len(past); must be >= 1
    """

    present: T
    past: Tuple[T, ...] = field(default_factory=tuple)
    future: Tuple[T, ...] = field(default_factory=tuple)
    limit: int = HISTORY_LIMIT

    @property
    def can_undo(self) -> bool:
        return len(self.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.future) > 0


@dataclass(frozen=True)
class SetAction(Generic[T]):
    snapshot: T


@dataclass(frozen=True)
class UndoAction:
    pass


@dataclass(frozen=True)
class RedoAction:
    pass


@dataclass(frozen=True)
class ResetAction(Generic[T]):
    snapshot: T


@dataclass(frozen=True)
class ClearHistoryAction:
    pass


HistoryAction = Union[SetAction, UndoAction, RedoAction, ResetAction, ClearHistoryAction]


def _push_bounded(stack: Tuple[T, ...], item: T, limit: int) -> Tuple[T, ...]:
    """Append item, dropping the oldest entries beyond limit."""
    pushed = stack + (item,)
    if len(pushed) > limit:
        pushed = pushed[len(pushed) - limit:]
    return pushed


def reduce_history(state: HistoryState[T], action: HistoryAction) -> HistoryState[T]:
    """Return the history state that follows ``action``.

    Unchanged states are returned as the same object so callers can detect
    no-ops with ``is``.

    Raises:
        TypeError: If action is not one of the history action types.
    """
    if isinstance(action, SetAction):
        if action.snapshot == state.present:
            return state
        return HistoryState(
            present=action.snapshot,
            past=_push_bounded(state.past, state.present, state.limit),
            future=(),
            limit=state.limit,
        )

    if isinstance(action, UndoAction):
        if not state.past:
            return state
        return HistoryState(
            present=state.past[-1],
            past=state.past[:-1],
            future=(state.present,) + state.future,
            limit=state.limit,
        )

    if isinstance(action, RedoAction):
        if not state.future:
            return state
        return HistoryState(
            present=state.future[0],
            past=_push_bounded(state.past, state.present, state.limit),
            future=state.future[1:],
            limit=state.limit,
        )

    if isinstance(action, ResetAction):
        return HistoryState(present=action.snapshot, limit=state.limit)

    if isinstance(action, ClearHistoryAction):
        if not state.past and not state.future:
            return state
        return replace(state, past=(), future=())

    raise TypeError("Unknown history action: {!r}".format(action))


class EditHistory(Generic[T]):
    """The mutable cursor an editing session holds over its HistoryState.

    WHY: The editing UI needs a stable object to call set/undo/redo on and
    to read present/can_undo/can_redo from. All transitions still go
    through reduce_history().

    HOW: Holds the current HistoryState and replaces it on every dispatch.

    RULES:
    - Single owner, single thread; no locking
    - limit must be at least 1
    """

    def __init__(self, initial: T, limit: int = HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1, got {}".format(limit))
        self._state: HistoryState[T] = HistoryState(present=initial, limit=limit)

    @property
    def state(self) -> HistoryState[T]:
        return self._state

    def dispatch(self, action: HistoryAction) -> bool:
        """Apply an action. Returns True if the state changed."""
        new_state = reduce_history(self._state, action)
        changed = new_state is not self._state
        self._state = new_state
        return changed

    # -- read side ---------------------------------------------------------

    @property
    def present(self) -> T:
        return self._state.present

    @property
    def past(self) -> Tuple[T, ...]:
        return self._state.past

    @property
    def future(self) -> Tuple[T, ...]:
        return self._state.future

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def can_redo(self) -> bool:
        return self._state.can_redo

    @property
    def history_size(self) -> int:
        return len(self._state.past)

    @property
    def redo_size(self) -> int:
        return len(self._state.future)

    @property
    def limit(self) -> int:
        return self._state.limit

    # -- transitions -------------------------------------------------------

    def set(self, snapshot: T) -> bool:
        return self.dispatch(SetAction(snapshot))

    def undo(self) -> bool:
        return self.dispatch(UndoAction())

    def redo(self) -> bool:
        return self.dispatch(RedoAction())

    def reset(self, snapshot: T) -> bool:
        return self.dispatch(ResetAction(snapshot))

    def clear_history(self) -> bool:
        return self.dispatch(ClearHistoryAction())
