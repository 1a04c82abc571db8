"""Action that applies an affine transform to some or all vertices."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from hexmesher.commander import Action


def _transform_point(matrix: np.ndarray, point: np.ndarray) -> np.ndarray:
    h = matrix @ np.append(np.asarray(point, dtype=float), 1.0)
    w = h[3]
    return h[:3] / w if w not in (0.0, 1.0) else h[:3]


class Transform(Action):
    """Transform vertices by a 4x4 matrix; applying again swaps back."""

    def __init__(self, transform, vids: Sequence[int] | None = None) -> None:
        super().__init__()
        self._transform = np.array(transform, dtype=float)
        if self._transform.shape != (4, 4):
            raise ValueError("transform must be a 4x4 matrix")
        self._vids = None if vids is None else list(vids)
        self._other_verts: list[np.ndarray] = []
        self._prepared = False

    def apply(self) -> None:
        mesher = self.mesher()
        mesh = mesher.mesh()
        if not self._prepared:
            self._prepared = True
            sources = mesh.vector_verts() if self._vids is None else [mesh.vert(v) for v in self._vids]
            self._other_verts = [_transform_point(self._transform, v) for v in sources]
        vids = range(len(self._other_verts)) if self._vids is None else self._vids
        for i, vid in enumerate(vids):
            old = mesh.vert(vid)
            mesher.move_vert(vid, self._other_verts[i])
            self._other_verts[i] = old
        mesher.update_mesh()

    def unapply(self) -> None:
        self.apply()

    def transform(self) -> np.ndarray:
        return self._transform.copy()

    def vids(self) -> list[int] | None:
        return None if self._vids is None else list(self._vids)