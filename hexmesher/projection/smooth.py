"""Laplacian smoothing of surfaces, vertex paths and volume interiors."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from hexmesher.meshing.hexmesh import HexMesh
from hexmesher.projection.features import SurfaceExporter, vids_path_adj_vids


def smooth(mesh: Any) -> list[np.ndarray]:
    """Each vertex moved to the mean of its neighbours; isolated vertices stay put."""
    out = []
    for vid in range(mesh.num_verts()):
        adj = mesh.adj_v2v(vid)
        if adj:
            out.append(np.mean([mesh.vert(a) for a in adj], axis=0))
        else:
            out.append(mesh.vert(vid))
    return out


def smooth_path(mesh: Any, vids: Sequence[int]) -> list[np.ndarray]:
    """Each path vertex moved to the mean of its neighbours along the path."""
    out = []
    for i, vid in enumerate(vids):
        adj = vids_path_adj_vids(vids, i)
        if adj:
            out.append(np.mean([mesh.vert(a) for a in adj], axis=0))
        else:
            out.append(mesh.vert(vid))
    return out


def is_vid_hidden(mesh: HexMesh, vid: int) -> bool:
    """True when every polyhedron around the vertex is hidden."""
    return all(mesh.poly_hidden(pid) for pid in mesh.adj_v2p(vid))


def smooth_internal(mesh: HexMesh, surface_vids: Sequence[int] | None, done_weight: float) -> list[np.ndarray]:
    """Smooth the inner vertices layer by layer, moving inwards from the surface.

    Neighbours already smoothed count with ``done_weight``; surface vertices keep
    their positions. Without ``surface_vids`` the visible vertices are used.
    """
    if surface_vids is None:
        surface_vids = SurfaceExporter.on_surf_vids(mesh)
    out = mesh.vector_verts()
    done = [False] * mesh.num_verts()
    hidden = [is_vid_hidden(mesh, vid) for vid in range(mesh.num_verts())]
    next_vids = list(dict.fromkeys(surface_vids))
    while next_vids:
        current = next_vids
        updates = {}
        for vid in current:
            total = np.zeros(3)
            weight_sum = 0.0
            for adj in mesh.adj_v2v(vid):
                if hidden[adj]:
                    continue
                if done[adj]:
                    total += out[adj] * done_weight
                    weight_sum += done_weight
                else:
                    total += mesh.vert(adj)
                    weight_sum += 1.0
            if weight_sum != 0.0:
                updates[vid] = total / weight_sum
        for vid, pos in updates.items():
            out[vid] = pos
        for vid in current:
            done[vid] = True
        next_vids = list(dict.fromkeys(
            adj
            for vid in current
            for adj in mesh.adj_v2v(vid)
            if not done[adj] and not hidden[adj]
        ))
    for vid in surface_vids:
        out[vid] = mesh.vert(vid)
    return out