"""Undoable actions and the history that applies, undoes and redoes them."""

from __future__ import annotations

from collections import deque
from typing import Any, Iterator

DEFAULT_LIMIT = 1000


class Action:
    """Base for an undoable edit; subclasses implement :meth:`apply` and :meth:`unapply`."""

    def __init__(self) -> None:
        self._commander: Commander | None = None
        self._applied = False

    def attach(self, commander: Commander) -> None:
        if self.attached():
            raise RuntimeError("action is already attached")
        self._commander = commander

    def _require_commander(self) -> Commander:
        if self._commander is None:
            raise RuntimeError("action is not attached")
        return self._commander

    def prepare_and_apply(self) -> None:
        self._require_commander()
        if self._applied:
            raise RuntimeError("action is already applied")
        self._applied = True
        self.apply()

    def prepare_and_unapply(self) -> None:
        self._require_commander()
        if not self._applied:
            raise RuntimeError("action is not applied")
        self._applied = False
        self.unapply()

    def apply(self) -> None:
        raise NotImplementedError

    def unapply(self) -> None:
        raise NotImplementedError

    def mesher(self) -> Any:
        return self._require_commander().project.mesher()

    def root(self) -> Any:
        return self._require_commander().project.root()

    def attached(self) -> bool:
        return self._commander is not None

    def applied(self) -> bool:
        return self._applied


class ActionStack:
    """Bounded stack of actions, most recent first."""

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        self._data: deque[Action] = deque()
        self._limit = limit

    def pop(self) -> Action:
        if not self._data:
            raise IndexError("pop from an empty action stack")
        return self._data.popleft()

    def push(self, action: Action) -> None:
        self._data.appendleft(action)
        self.keep_latest(self._limit)

    @property
    def limit(self) -> int:
        return self._limit

    @limit.setter
    def limit(self, count: int) -> None:
        self._limit = count
        self.keep_latest(count)

    def remove_oldest(self, count: int) -> None:
        while self._data and count > 0:
            self._data.pop()
            count -= 1

    def keep_latest(self, count: int) -> None:
        while len(self._data) > count:
            self._data.pop()

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._data)


class Commander:
    """Applies actions to a project and keeps undo and redo histories."""

    def __init__(self, project: Any) -> None:
        self.project = project
        self.applied = ActionStack()
        self.unapplied = ActionStack()

    def apply(self, action: Action) -> None:
        action.attach(self)
        self.unapplied.clear()
        action.apply()
        self.applied.push(action)

    def undo(self) -> None:
        if not self.can_undo():
            raise RuntimeError("nothing to undo")
        action = self.applied.pop()
        action.unapply()
        self.unapplied.push(action)

    def redo(self) -> None:
        if not self.can_redo():
            raise RuntimeError("nothing to redo")
        action = self.unapplied.pop()
        action.apply()
        self.applied.push(action)

    def can_undo(self) -> bool:
        return len(self.applied) > 0

    def can_redo(self) -> bool:
        return len(self.unapplied) > 0