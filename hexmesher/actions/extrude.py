"""Action that extrudes a new hexahedron from faces of existing elements."""

from __future__ import annotations

from typing import Sequence

from hexmesher import dag
from hexmesher.actions import extrude_utils
from hexmesher.commander import Action
from hexmesher.meshing.mesher import MesherState


class Extrude(Action):
    """Extrude from one, two or three faces."""

    def __init__(self, elements: Sequence[dag.Element], fis: Sequence[int], first_vi: int, clockwise: bool) -> None:
        super().__init__()
        if len(elements) != len(fis):
            raise ValueError("one face index is needed per element")
        if not 0 <= first_vi < 8:
            raise ValueError("first_vi must be in [0, 8)")
        self._elements = tuple(elements)
        self._operation = extrude_utils.prepare(fis, first_vi, clockwise)
        self._operation.handles += 1
        self._old_state = MesherState()

    def apply(self) -> None:
        mesher = self.mesher()
        self._old_state = mesher.state()
        for parent in self._elements:
            self._operation.parents.attach(parent)
        child = self._operation.children.single()
        vids, new_verts = extrude_utils.apply(mesher, self._operation)
        child.vids = vids
        mesher.add([child], new_verts)
        mesher.update_mesh()

    def unapply(self) -> None:
        mesher = self.mesher()
        self._operation.parents.detach_all(False)
        mesher.restore(self._old_state)
        mesher.update_mesh()

    def elements(self) -> tuple[dag.Element, ...]:
        return self._elements

    def operation(self) -> dag.Extrude:
        return self._operation