"""Action that replaces the whole graph and mesh with a new root element."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from hexmesher.commander import Action
from hexmesher.dag import Element
from hexmesher.meshing.mesh_utils import add_tree
from hexmesher.meshing.mesher import MesherState


class Root(Action):
    """Swap in a new root element and vertex set; applying again swaps them back."""

    def __init__(self, root: Element, verts: Sequence[Iterable[float]]) -> None:
        super().__init__()
        self._new_root = root
        self._new_verts = [np.array(v, dtype=float) for v in verts]
        self._other_root: Element | None = root
        self._other_verts = [v.copy() for v in self._new_verts]

    def apply(self) -> None:
        project = self._require_commander().project
        mesher = self.mesher()
        verts = mesher.mesh().vector_verts()
        self._other_root, project.root_element = project.root_element, self._other_root
        self._other_verts, verts = verts, self._other_verts
        mesher.restore(MesherState())
        if project.root_element is not None:
            add_tree(mesher, project.root_element, verts)
        mesher.update_mesh()

    def unapply(self) -> None:
        self.apply()

    def new_root(self) -> Element:
        return self._new_root

    def new_verts(self) -> list[np.ndarray]:
        return [v.copy() for v in self._new_verts]