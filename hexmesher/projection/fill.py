"""Filling in positions that projection left unset, from their neighbours."""

from __future__ import annotations

import heapq
from typing import Any, Sequence

import numpy as np

from hexmesher.projection.features import Tweak, invert_and_normalize_distances, vids_path_adj_vids_i


class _CountQueue:
    """Max-priority queue of keys whose priorities can be raised."""

    def __init__(self) -> None:
        self._priorities: dict[int, int] = {}
        self._heap: list[tuple[int, int]] = []

    def push(self, key: int, priority: int) -> None:
        self._priorities[key] = priority
        heapq.heappush(self._heap, (-priority, key))

    def priority(self, key: int) -> int:
        return self._priorities[key]

    def __bool__(self) -> bool:
        return bool(self._priorities)

    def pop(self) -> int:
        while True:
            neg, key = heapq.heappop(self._heap)
            if self._priorities.get(key) == -neg:
                del self._priorities[key]
                return key


def _filled(
    count: int,
    adjacent,
    original: Sequence,
    fallback,
    tweak: Tweak,
) -> list[np.ndarray]:
    """Set every missing position, most-constrained first."""
    queue = _CountQueue()
    for i in range(count):
        if original[i] is None:
            queue.push(i, sum(1 for a in adjacent(i) if original[a] is not None))
    current: list = [None if v is None else np.asarray(v, dtype=float) for v in original]
    while queue:
        i = queue.pop()
        vert = fallback(i)
        adj = adjacent(i)
        base_weights = invert_and_normalize_distances(
            float(np.linalg.norm(vert - (fallback(a) if original[a] is None else np.asarray(original[a], dtype=float))))
            for a in adj
        )
        total = np.zeros(3)
        weight_sum = 0.0
        for a, base in zip(adj, base_weights):
            if tweak.should_skip(base):
                continue
            weight = tweak.apply(base)
            pos = current[a] if current[a] is not None else fallback(a)
            weight_sum += weight
            total += pos * weight
        current[i] = total / weight_sum if weight_sum != 0.0 else vert
        for a in adj:
            if current[a] is None:
                queue.push(a, queue.priority(a) + 1)
    return current


def fill(mesh: Any, new_verts: Sequence, dist_weight_tweak: Tweak) -> list[np.ndarray]:
    """Complete ``new_verts`` (one entry per vertex, None where unset) over the mesh."""
    return _filled(len(new_verts), mesh.adj_v2v, new_verts, mesh.vert, dist_weight_tweak)


def fill_path(mesh: Any, new_path_verts: Sequence, dist_weight_tweak: Tweak, vids_path: Sequence[int]) -> list[np.ndarray]:
    """Complete ``new_path_verts`` (one entry per path position) along the path."""
    return _filled(
        len(new_path_verts),
        lambda i: vids_path_adj_vids_i(vids_path, i),
        new_path_verts,
        lambda i: mesh.vert(vids_path[i]),
        dist_weight_tweak,
    )