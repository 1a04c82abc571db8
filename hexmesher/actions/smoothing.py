"""Action that smooths the surface or the interior of the mesh."""

from __future__ import annotations

import numpy as np

from hexmesher.commander import Action
from hexmesher.projection.smooth import smooth, smooth_internal


class Smooth(Action):
    """Laplacian smoothing; applying again swaps the positions back."""

    def __init__(self, surface_iterations: int, internal_iterations: int, surf_vert_weight: float) -> None:
        super().__init__()
        self.surface_iterations = surface_iterations
        self.internal_iterations = internal_iterations
        self.surf_vert_weight = surf_vert_weight
        self._prepared = False
        self._other_verts: list[np.ndarray] = []

    def _prepare(self) -> None:
        mesh = self.mesher().mesh()
        surf, _, surf2vol = mesh.export_surface()
        surf_vids = list(surf2vol.values())
        other = mesh.vector_verts()
        # The surface copy is never moved between passes, so each pass yields the same result.
        if self.surface_iterations > 0:
            for surf_vid, vert in enumerate(smooth(surf)):
                other[surf2vol[surf_vid]] = vert
        # Internal smoothing starts again from the mesh, replacing the surface result.
        if self.internal_iterations > 0:
            other = smooth_internal(mesh, surf_vids, self.surf_vert_weight)
        self._other_verts = other

    def apply(self) -> None:
        if not self._prepared:
            self._prepared = True
            self._prepare()
        mesher = self.mesher()
        mesh = mesher.mesh()
        for vid, vert in enumerate(self._other_verts):
            old = mesh.vert(vid)
            mesher.move_vert(vid, vert)
            self._other_verts[vid] = old
        mesher.update_mesh()

    def unapply(self) -> None:
        self.apply()