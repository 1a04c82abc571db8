"""Advancing vertices towards new positions without inverting hexahedra."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

import numpy as np

from hexmesher.meshing.hexmesh import HexMesh

logger = logging.getLogger(__name__)


class JacobianAdvanceMode(Enum):
    """How a displacement is shortened for a given progress."""

    LENGTH = "length"
    LERP = "lerp"


def _unit(v: np.ndarray) -> np.ndarray | None:
    n = float(np.linalg.norm(v))
    return v / n if n > 0.0 else None


def hex_scaled_jacobian(verts: Sequence) -> float:
    """Minimum corner determinant of normalised edge vectors; 1 for a perfect cube, negative when inverted."""
    if len(verts) != 8:
        raise ValueError("a hexahedron has 8 vertices")
    p = [np.asarray(v, dtype=float) for v in verts]
    raw = [
        p[1] - p[0], p[2] - p[1], p[3] - p[2], p[3] - p[0],
        p[4] - p[0], p[5] - p[1], p[6] - p[2], p[7] - p[3],
        p[5] - p[4], p[6] - p[5], p[7] - p[6], p[7] - p[4],
        (p[1] - p[0]) + (p[2] - p[3]) + (p[5] - p[4]) + (p[6] - p[7]),
        (p[3] - p[0]) + (p[2] - p[1]) + (p[7] - p[4]) + (p[6] - p[5]),
        (p[4] - p[0]) + (p[5] - p[1]) + (p[6] - p[2]) + (p[7] - p[3]),
    ]
    units = [_unit(v) for v in raw]
    if any(u is None for u in units):
        return -1.0
    L = units
    corners = [
        (L[0], L[3], L[4]),
        (L[1], -L[0], L[5]),
        (L[2], -L[1], L[6]),
        (-L[3], -L[2], L[7]),
        (L[11], L[8], -L[4]),
        (-L[8], L[9], -L[5]),
        (-L[9], L[10], -L[6]),
        (-L[10], -L[11], -L[7]),
        (L[12], L[13], L[14]),
    ]
    msj = min(float(np.linalg.det(np.array(c))) for c in corners)
    return -1.0 if msj > 1.0001 else msj


def displace(origin, offset, length: float, max_length: float, mode: JacobianAdvanceMode, progress: float) -> np.ndarray:
    """Position reached from ``origin`` along ``offset`` at the given progress."""
    origin = np.asarray(origin, dtype=float)
    offset = np.asarray(offset, dtype=float)
    if length == 0.0:
        return origin.copy()
    if mode is JacobianAdvanceMode.LENGTH:
        max_progress_length = max_length * progress
        if length <= max_progress_length:
            return origin + offset
        return origin + offset * max_progress_length / length
    if mode is JacobianAdvanceMode.LERP:
        return origin + progress * offset / length
    raise ValueError(f"unknown mode {mode!r}")


def _is_ok(mesh: HexMesh, pid: int) -> bool:
    return hex_scaled_jacobian(mesh.poly_verts(pid)) >= 0.0


def jacobian_advance(
    mesh: HexMesh,
    from_verts: Sequence,
    mode: JacobianAdvanceMode,
    max_tests: int,
    stop_threshold: float,
    vids: Sequence[int] | None = None,
) -> None:
    """Pull vertices back from their current positions towards ``from_verts`` until no hexahedron is inverted.

    The mesh holds the wanted positions on entry and the accepted ones on return.
    With ``vids``, ``from_verts`` gives one start per listed vertex and only the
    visible polyhedra around them are checked; otherwise every vertex and
    polyhedron is involved.
    """
    if vids is None:
        vid_list = list(range(mesh.num_verts()))
        index_of = {vid: vid for vid in vid_list}
        pids = list(range(mesh.num_polys()))
    else:
        vid_list = list(vids)
        index_of = {}
        for i, vid in enumerate(vid_list):
            index_of.setdefault(vid, i)
        pids = list(dict.fromkeys(
            pid for vid in vid_list for pid in mesh.adj_v2p(vid) if not mesh.poly_hidden(pid)
        ))
    starts = [np.asarray(v, dtype=float) for v in from_verts]
    offsets = [mesh.vert(vid) - start for vid, start in zip(vid_list, starts)]
    lengths = [float(np.linalg.norm(o)) for o in offsets]
    max_len = max(lengths, default=0.0)

    def place(vid: int, progress: float) -> None:
        i = index_of[vid]
        mesh.set_vert(vid, displace(starts[i], offsets[i], lengths[i], max_len, mode, progress))

    min_prog, max_prog = 0.0, 1.0
    failure: int | None = None
    tests = 0
    while True:
        prog = (max_prog + min_prog) / 2.0 if tests > 0 else 1.0
        if failure is not None:
            for vid in mesh.adj_p2v(failure):
                if vid in index_of:
                    place(vid, prog)
            if _is_ok(mesh, failure):
                failure = None
        if failure is None:
            for vid in vid_list[:len(starts)]:
                place(vid, prog)
            failure = next((pid for pid in pids if not mesh.poly_hidden(pid) and not _is_ok(mesh, pid)), None)
        if failure is None:
            min_prog = prog
        elif tests > 0:
            max_prog = prog
        logger.debug("pass %d: prog=%s failure=%s range=[%s,%s]", tests, prog, failure, min_prog, max_prog)
        if not max_prog - min_prog > stop_threshold:
            break
        tests += 1
        if tests >= max_tests:
            break
    if failure is not None:
        logger.debug("falling back to prog=%s", min_prog)
        for vid in vid_list[:len(starts)]:
            place(vid, min_prog)