"""Actions that hide elements by giving them a delete operation."""

from __future__ import annotations

from typing import Sequence

from hexmesher import dag
from hexmesher.commander import Action


class Delete(Action):
    """Delete one visible element."""

    def __init__(self, element: dag.Element) -> None:
        super().__init__()
        self._element = element
        self._operation = dag.Delete()
        self._operation.handles += 1

    def apply(self) -> None:
        mesher = self.mesher()
        if not mesher.shown(self._element):
            raise RuntimeError("element is not shown")
        self._operation.parents.attach(self._element)
        mesher.show(self._element, False)
        mesher.update_mesh()

    def unapply(self) -> None:
        mesher = self.mesher()
        self._operation.parents.detach_all(False)
        mesher.show(self._element, True)
        mesher.update_mesh()

    def element(self) -> dag.Element:
        return self._element

    def operation(self) -> dag.Delete:
        return self._operation


class DeleteSome(Action):
    """Delete several elements at once."""

    def __init__(self, elements: Sequence[dag.Element]) -> None:
        super().__init__()
        self._operations: list[tuple[dag.Delete, dag.Element]] = []
        for element in elements:
            operation = dag.Delete()
            operation.handles += 1
            self._operations.append((operation, element))

    def apply(self) -> None:
        mesher = self.mesher()
        for operation, element in self._operations:
            operation.parents.attach(element)
            mesher.show(element, False)
        mesher.update_mesh()

    def unapply(self) -> None:
        mesher = self.mesher()
        for operation, element in reversed(self._operations):
            mesher.show(element, True)
            operation.parents.detach_all(False)
        mesher.update_mesh()

    def operations(self) -> list[tuple[dag.Delete, dag.Element]]:
        return list(self._operations)