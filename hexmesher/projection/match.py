"""Closest-point matching of target vertices onto a source surface or edge path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import numpy as np


@dataclass(eq=False)
class SourceToTargetVid:
    """A target vertex and the closest point found for it on the source."""

    pos: np.ndarray
    target_vid: int


def _vec(v: Iterable[float]) -> np.ndarray:
    return np.asarray(v, dtype=float)


def closest_point_on_segment(point, a, b) -> np.ndarray:
    """Point of segment ``ab`` closest to ``point``."""
    p, a, b = _vec(point), _vec(a), _vec(b)
    ab = b - a
    denom = float(ab @ ab)
    if denom == 0.0:
        return a.copy()
    t = min(max(float((p - a) @ ab) / denom, 0.0), 1.0)
    return a + ab * t


def closest_point_on_triangle(point, a, b, c) -> np.ndarray:
    """Point of triangle ``abc`` closest to ``point``."""
    p, a, b, c = _vec(point), _vec(a), _vec(b), _vec(c)
    ab, ac, ap = b - a, c - a, p - a
    d1, d2 = float(ab @ ap), float(ac @ ap)
    if d1 <= 0.0 and d2 <= 0.0:
        return a.copy()
    bp = p - b
    d3, d4 = float(ab @ bp), float(ac @ bp)
    if d3 >= 0.0 and d4 <= d3:
        return b.copy()
    vc = d1 * d4 - d3 * d2
    if vc <= 0.0 and d1 >= 0.0 and d3 <= 0.0:
        return a + ab * (d1 / (d1 - d3))
    cp = p - c
    d5, d6 = float(ab @ cp), float(ac @ cp)
    if d6 >= 0.0 and d5 <= d6:
        return c.copy()
    vb = d5 * d2 - d1 * d6
    if vb <= 0.0 and d2 >= 0.0 and d6 <= 0.0:
        return a + ac * (d2 / (d2 - d6))
    va = d3 * d6 - d5 * d4
    if va <= 0.0 and (d4 - d3) >= 0.0 and (d5 - d6) >= 0.0:
        return b + (c - b) * ((d4 - d3) / ((d4 - d3) + (d5 - d6)))
    denom = va + vb + vc
    if denom == 0.0:
        # Degenerate triangle: fall back to its edges.
        candidates = [closest_point_on_segment(p, x, y) for x, y in ((a, b), (b, c), (c, a))]
        return min(candidates, key=lambda q: float(np.linalg.norm(q - p)))
    return a + ab * (vb / denom) + ac * (vc / denom)


def _closest_on_surface(source: Any, point: np.ndarray) -> tuple[int, np.ndarray]:
    best_dist = float("inf")
    best: tuple[int, np.ndarray] | None = None
    for pid in range(source.num_polys()):
        for tri in source.poly_triangles(pid):
            q = closest_point_on_triangle(point, *(source.vert(v) for v in tri))
            dist = float(np.linalg.norm(q - point))
            if dist < best_dist:
                best_dist, best = dist, (pid, q)
    if best is None:
        raise ValueError("source mesh has no polygons")
    return best


def _closest_on_path(source: Any, eids: Sequence[int], point: np.ndarray) -> tuple[int, np.ndarray]:
    best_dist = float("inf")
    best: tuple[int, np.ndarray] | None = None
    for eid in eids:
        q = closest_point_on_segment(point, *source.edge_verts(eid))
        dist = float(np.linalg.norm(q - point))
        if dist < best_dist:
            best_dist, best = dist, (eid, q)
    if best is None:
        raise ValueError("source path has no edges")
    return best


def match_surface_fid(source: Any, target: Any) -> list[list[SourceToTargetVid]]:
    """For each source polygon, the target vertices whose closest source point lies on it."""
    matches: list[list[SourceToTargetVid]] = [[] for _ in range(source.num_polys())]
    for target_vid in range(target.num_verts()):
        pid, pos = _closest_on_surface(source, target.vert(target_vid))
        matches[pid].append(SourceToTargetVid(pos, target_vid))
    return matches


def match_path_eid(
    source: Any,
    target: Any,
    source_eids_path: Sequence[int],
    target_vids_path: Sequence[int],
) -> dict[int, list[SourceToTargetVid]]:
    """For each source path edge, the target path vertices whose closest path point lies on it."""
    matches: dict[int, list[SourceToTargetVid]] = {eid: [] for eid in source_eids_path}
    for target_vid in target_vids_path:
        eid, pos = _closest_on_path(source, source_eids_path, target.vert(target_vid))
        matches[eid].append(SourceToTargetVid(pos, target_vid))
    return matches