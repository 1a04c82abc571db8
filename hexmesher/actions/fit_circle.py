"""Action that places a ring of vertices evenly on their best-fit circle."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from hexmesher.commander import Action


def _best_fit_plane(points: Sequence[np.ndarray]) -> tuple[np.ndarray, np.ndarray]:
    data = np.array(points, dtype=float)
    centre = data.mean(axis=0)
    _, _, vh = np.linalg.svd(data - centre)
    return centre, vh[-1]


def _unit(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n == 0.0:
        raise ValueError("vertices do not define a circle")
    return v / n


class FitCircle(Action):
    """Move vertices onto a circle, keeping their angular order; applying again swaps back."""

    def __init__(self, vids: Sequence[int]) -> None:
        super().__init__()
        self._vids = list(vids)
        if len(self._vids) <= 2:
            raise ValueError("at least 3 vertices are needed")
        self._prepared = False
        self._other_verts: list[np.ndarray] = []

    def _fit(self, old_verts: list[np.ndarray]) -> list[np.ndarray]:
        centre, normal = _best_fit_plane(old_verts)
        radius = float(np.mean([np.linalg.norm(v - centre) for v in old_verts]))
        base_y = _unit(np.cross(old_verts[0] - centre, normal))
        base_x = _unit(np.cross(normal, base_y))
        angles = [
            (i, math.atan2(float(base_y @ (v - centre)), float(base_x @ (v - centre))))
            for i, v in enumerate(old_verts)
        ]
        order = [i for i, _ in sorted(angles, key=lambda e: e[1])]
        first = order.index(0)
        order = order[first:] + order[:first]
        count = len(order)
        out: list[np.ndarray] = [np.zeros(3)] * count
        for k, i in enumerate(order):
            angle = 2 * math.pi * k / count
            out[i] = centre + (base_x * math.cos(angle) + base_y * math.sin(angle)) * radius
        return out

    def apply(self) -> None:
        mesher = self.mesher()
        mesh = mesher.mesh()
        old_verts = [mesh.vert(vid) for vid in self._vids]
        if not self._prepared:
            self._prepared = True
            self._other_verts = self._fit(old_verts)
        for vid, pos in zip(self._vids, self._other_verts):
            mesher.move_vert(vid, pos)
        self._other_verts = old_verts
        mesher.update_mesh()

    def unapply(self) -> None:
        self.apply()

    def vids(self) -> list[int]:
        return list(self._vids)