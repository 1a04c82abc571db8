"""Feature correspondences, vertex paths and weight helpers used by projection."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import numpy as np

from hexmesher.meshing.hexmesh import HexMesh


@dataclass
class Point:
    """A source vertex pinned to a target vertex."""

    source_vid: int = 0
    target_vid: int = 0


@dataclass
class EidsPath:
    """A source edge chain matched to a target edge chain."""

    source_eids: list[int] = field(default_factory=list)
    target_eids: list[int] = field(default_factory=list)

    def empty(self, source: bool | None = None) -> bool:
        """Whether both chains are empty, or only the chosen one."""
        if source is None:
            return not self.source_eids and not self.target_eids
        return not self.eids(source)

    def eids(self, source: bool) -> list[int]:
        return self.source_eids if source else self.target_eids


@dataclass
class VidsPath:
    """A source vertex path matched to a target vertex path."""

    source_vids: list[int] = field(default_factory=list)
    target_vids: list[int] = field(default_factory=list)

    def empty(self, source: bool | None = None) -> bool:
        """Whether both paths are empty, or only the chosen one."""
        if source is None:
            return not self.source_vids and not self.target_vids
        return not self.vids(source)

    def vids(self, source: bool) -> list[int]:
        return self.source_vids if source else self.target_vids


class SurfaceExporter:
    """A copy of a volume mesh together with its visible surface and the vertex maps between them."""

    def __init__(self, mesh: HexMesh) -> None:
        self.vol: HexMesh = copy.deepcopy(mesh)
        self.surf, self._v2s, self._s2v = self.vol.export_surface()

    def apply_surf_to_vol(self) -> None:
        """Copy surface positions onto the matching volume vertices."""
        for surf_vid in range(self.surf.num_verts()):
            self.vol.set_vert(self._s2v[surf_vid], self.surf.vert(surf_vid))

    def apply_vol_to_surf(self) -> None:
        """Copy volume positions onto the matching surface vertices."""
        for vol_vid, surf_vid in self._v2s.items():
            self.surf.set_vert(surf_vid, self.vol.vert(vol_vid))

    def to_surf_vid(self, vol_vid: int) -> int:
        return self._v2s[vol_vid]

    def to_vol_vid(self, surf_vid: int) -> int:
        return self._s2v[surf_vid]

    def to_surf_eid(self, vol_eid: int) -> int:
        v0 = self.vol.edge_vert_id(vol_eid, 0)
        v1 = self.vol.edge_vert_id(vol_eid, 1)
        return self.surf.edge_id(self.to_surf_vid(v0), self.to_surf_vid(v1))

    def to_vol_eid(self, surf_eid: int) -> int:
        s0 = self.surf.edge_vert_id(surf_eid, 0)
        s1 = self.surf.edge_vert_id(surf_eid, 1)
        return self.vol.edge_id(self.to_vol_vid(s0), self.to_vol_vid(s1))

    def on_surf_vol_vids(self) -> list[int]:
        """Volume ids of the surface vertices, in surface order."""
        return [self._s2v[surf_vid] for surf_vid in range(self.surf.num_verts())]

    @staticmethod
    def on_surf_vids(mesh: HexMesh) -> list[int]:
        """Ids of the vertices of ``mesh`` that belong to a visible polyhedron."""
        return [vid for vid in range(mesh.num_verts()) if mesh.vert_is_visible(vid)]


@dataclass(frozen=True)
class Tweak:
    """Threshold and exponent reshaping a weight in [0, 1]."""

    min: float = 0.0
    power: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.power <= 10.0:
            raise ValueError("power must lie in [0, 10]")

    def should_skip(self, value: float) -> bool:
        return value < self.min

    def apply(self, value: float) -> float:
        return ((value - self.min) / (1.0 - self.min)) ** self.power


def is_vids_path_closed(vids: Sequence[int]) -> bool:
    return len(vids) >= 2 and vids[0] == vids[-1]


def vids_path_adj_vids_i(vids: Sequence[int], i: int) -> list[int]:
    """Indices of the path positions adjacent to position ``i``."""
    closed = is_vids_path_closed(vids)
    adj: list[int] = []
    if i == 0:
        if closed:
            adj.append(len(vids) - 2)
    else:
        adj.append(i - 1)
    if i == len(vids) - 1:
        if closed:
            adj.append(1)
    else:
        adj.append(i + 1)
    return adj


def vids_path_adj_vids(vids: Sequence[int], i: int) -> list[int]:
    """Vertex ids adjacent to position ``i`` of the path."""
    return [vids[j] for j in vids_path_adj_vids_i(vids, i)]


def eids_to_vids_path(mesh: Any, eids: Sequence[int]) -> list[int]:
    """Turn a chain of consecutive edges into the vertex path it walks.

    A closed chain yields a path whose last vertex repeats the first.
    """
    if not eids:
        return []
    first = [mesh.edge_vert_id(eids[0], 0), mesh.edge_vert_id(eids[0], 1)]
    if len(eids) == 1:
        return first
    second = {mesh.edge_vert_id(eids[1], 0), mesh.edge_vert_id(eids[1], 1)}
    if first[1] in second:
        start = first[0]
    elif first[0] in second:
        start = first[1]
    else:
        raise ValueError("edges are not consecutive")
    path = [start]
    current = start
    for e in eids:
        try:
            current = mesh.vert_opposite_to(e, current)
        except ValueError:
            raise ValueError("edges are not consecutive") from None
        path.append(current)
    return path


def normalize_weights(weights: Iterable[float]) -> list[float]:
    """Divide by the largest weight, unless it is zero."""
    values = [float(w) for w in weights]
    if not values:
        return values
    top = max(values)
    if top == 0.0:
        return values
    return [w / top for w in values]


def invert_and_normalize_distances(distances: Iterable[float]) -> list[float]:
    """Map distances to weights in [0, 1], the closest getting 1."""
    values = [float(d) for d in distances]
    if not values:
        return values
    low = min(values)
    if low != 0.0:
        return [low / d for d in values]
    return [1.0 if d == 0.0 else 0.0 for d in values]


def to_surf_point_feats(feats: Iterable[Point], exporter: SurfaceExporter) -> list[Point]:
    return [Point(exporter.to_surf_vid(p.source_vid), p.target_vid) for p in feats]


def to_surf_path_feats(feats: Iterable[EidsPath], exporter: SurfaceExporter) -> list[EidsPath]:
    return [
        EidsPath([exporter.to_surf_eid(e) for e in path.source_eids], list(path.target_eids))
        for path in feats
    ]


def set_verts(from_verts: Sequence, to_verts: Sequence, vids: Sequence[int]) -> list[np.ndarray]:
    """Copy of ``to_verts`` with position ``vids[k]`` replaced by ``from_verts[k]``."""
    out = [np.array(v, dtype=float) for v in to_verts]
    for vid, vert in zip(vids, from_verts):
        out[vid] = np.array(vert, dtype=float)
    return out


def set_point_feat_verts(source: Sequence, target: Sequence, feats: Iterable[Point]) -> list[np.ndarray]:
    """Copy of ``source`` with each feature's source vertex moved onto its target vertex."""
    out = [np.array(v, dtype=float) for v in source]
    for point in feats:
        out[point.source_vid] = np.array(target[point.target_vid], dtype=float)
    return out


def set_source_verts(from_paths: Sequence[Sequence], to_verts: Sequence, paths: Sequence[VidsPath]) -> list[np.ndarray]:
    """Copy of ``to_verts`` with each path's source vertices set from the matching list."""
    out = [np.array(v, dtype=float) for v in to_verts]
    for path, verts in zip(paths, from_paths):
        out = set_verts(verts, out, path.source_vids)
    return out