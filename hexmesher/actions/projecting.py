"""Action that projects the mesh onto a target surface."""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, Sequence

import numpy as np

from hexmesher.commander import Action
from hexmesher.projection.features import EidsPath, Point
from hexmesher.projection.projector import Options, project


class ProjectAction(Action):
    """Project the mesh onto a target surface; applying again swaps the positions back."""

    def __init__(
        self,
        target: Any,
        point_feats: Sequence[Point] = (),
        path_feats: Sequence[EidsPath] = (),
        options: Options | None = None,
    ) -> None:
        super().__init__()
        self._target = copy.deepcopy(target)
        self._point_feats = list(point_feats)
        self._path_feats = list(path_feats)
        self._options = options if options is not None else Options()
        self._prepared = False
        self._other_verts: list[np.ndarray] = []

    def _prepare(self) -> list[np.ndarray]:
        mesh = self.mesher().mesh()
        mask = self._options.vertex_mask
        if mask is not None and len(mask) != mesh.num_verts():
            raise ValueError(f"vertex mask has {len(mask)} entries, the mesh has {mesh.num_verts()} vertices")
        projected = project(mesh, self._target, self._point_feats, self._path_feats, self._options)
        if mask is None:
            return projected
        old = mesh.vector_verts()
        return [new if keep else old[vid] for vid, (new, keep) in enumerate(zip(projected, mask))]

    def apply(self) -> None:
        if not self._prepared:
            self._other_verts = self._prepare()
            self._prepared = True
        mesher = self.mesher()
        old = mesher.mesh().vector_verts()
        for vid, vert in enumerate(self._other_verts):
            mesher.move_vert(vid, vert)
        self._other_verts = old
        mesher.update_mesh()

    def unapply(self) -> None:
        self.apply()

    def target(self) -> Any:
        return self._target

    def options(self) -> Options:
        return dataclasses.replace(self._options)