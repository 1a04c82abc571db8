"""Keeps a hexahedral mesh in step with the elements of the graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

import numpy as np

from hexmesher.dag import NO_ID, Element
from hexmesher.meshing.hexmesh import HexMesh
from hexmesher.meshing.mesh_utils import (
    centroid,
    closest_eid_vid,
    closest_fid_eid,
    closest_fid_eid_by_vid,
    closest_fid_vid,
    eid_vids,
    verts,
)

_EPS = 1e-12


@dataclass(frozen=True)
class MesherState:
    """Element counts of the mesh at some point in time."""

    pids: int = 0
    fids: int = 0
    eids: int = 0
    vids: int = 0

    def last_pid(self) -> int:
        return self.pids - 1

    def last_fid(self) -> int:
        return self.fids - 1

    def last_eid(self) -> int:
        return self.eids - 1

    def last_vid(self) -> int:
        return self.vids - 1


@dataclass(frozen=True)
class PickResult:
    """The polyhedron, face, edge and vertex hit by a pick."""

    pid: int
    fid: int
    eid: int
    vid: int


def _intersect(origin: np.ndarray, direction: np.ndarray, a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float | None:
    """Line parameter of the hit between a line and a triangle, or None."""
    e1 = b - a
    e2 = c - a
    h = np.cross(direction, e2)
    det = e1 @ h
    if abs(det) < _EPS:
        return None
    inv = 1.0 / det
    s = origin - a
    u = inv * (s @ h)
    if u < 0.0 or u > 1.0:
        return None
    q = np.cross(s, e1)
    v = inv * (direction @ q)
    if v < 0.0 or u + v > 1.0:
        return None
    return float(inv * (e2 @ q))


class Mesher:
    """Owns the mesh, maps its polyhedra to graph elements and tracks visibility."""

    def __init__(self) -> None:
        self._mesh = HexMesh()
        self._elements: list[Element] = []
        self._triangles: list[tuple[int, np.ndarray, np.ndarray, np.ndarray]] = []
        self._dirty = False
        self.on_updated: list[Callable[[], None]] = []
        self.on_added: list[Callable[[MesherState], None]] = []
        self.on_restored: list[Callable[[MesherState], None]] = []
        self.on_element_visibility_changed: list[Callable[[Element, bool], None]] = []

    def mesh(self) -> HexMesh:
        return self._mesh

    def element(self, pid: int) -> Element:
        return self._elements[pid]

    def move_vert(self, vid: int, position: Iterable[float]) -> None:
        position = np.asarray(position, dtype=float)
        if not np.array_equal(self._mesh.vert(vid), position):
            self._mesh.set_vert(vid, position)
            self._dirty = True

    def update_mesh(self) -> None:
        """Refresh the picking structure if anything changed since the last update."""
        if not self._dirty:
            return
        self._rebuild_triangles()
        self._dirty = False
        for callback in self.on_updated:
            callback()

    def _rebuild_triangles(self) -> None:
        mesh = self._mesh
        triangles = []
        for fid in range(mesh.num_faces()):
            pid = mesh.face_is_visible(fid)
            if pid is None:
                continue
            vids = mesh.adj_f2v(fid)
            if not mesh.poly_face_winding(pid, fid):
                vids = vids[::-1]
            p = [mesh.vert(v) for v in vids]
            triangles.append((fid, p[0], p[1], p[2]))
            triangles.append((fid, p[0], p[2], p[3]))
        self._triangles = triangles

    def add(self, elements: Sequence[Element], verts: Sequence[Iterable[float]]) -> None:
        """Append new vertices, then one polyhedron per element."""
        if not elements and not verts:
            return
        old_state = self.state()
        for vert in verts:
            self._mesh.vert_add(vert)
        for element in elements:
            expected = self._mesh.num_polys()
            if element.pid not in (NO_ID, expected):
                raise ValueError(f"element has pid {element.pid}, expected {expected}")
            self._mesh.poly_add(element.vids)
            element.pid = expected
            self._elements.append(element)
        self._dirty = True
        for callback in self.on_added:
            callback(old_state)

    def restore(self, state: MesherState) -> None:
        """Drop everything added after ``state`` was taken."""
        old_state = self.state()
        if state == old_state:
            return
        if state == MesherState():
            self._mesh.clear()
        else:
            self._mesh.truncate(state.pids, state.fids, state.eids, state.vids)
        del self._elements[state.pids:]
        self._dirty = True
        for callback in self.on_restored:
            callback(old_state)

    def state(self) -> MesherState:
        m = self._mesh
        return MesherState(m.num_polys(), m.num_faces(), m.num_edges(), m.num_verts())

    @staticmethod
    def _pid(target: int | Element) -> int:
        return target.pid if isinstance(target, Element) else int(target)

    def show(self, target: int | Element, visible: bool) -> None:
        """Show or hide the polyhedron of a pid or element."""
        pid = self._pid(target)
        if self._mesh.poly_hidden(pid) != (not visible):
            self._mesh.set_poly_hidden(pid, not visible)
            self._dirty = True
            for callback in self.on_element_visibility_changed:
                callback(self.element(pid), visible)

    def shown(self, target: int | Element) -> bool:
        return not self._mesh.poly_hidden(self._pid(target))

    def vid_shown(self, vid: int) -> bool:
        return any(self.shown(pid) for pid in self._mesh.adj_v2p(vid))

    def pick(self, origin: Iterable[float], direction: Iterable[float], allow_behind: bool = False) -> PickResult | None:
        """Find the visible face hit by a ray, or by a line when ``allow_behind`` is set."""
        o = np.asarray(origin, dtype=float)
        d = np.asarray(direction, dtype=float)
        best_t = float("inf")
        best_fid = None
        for fid, a, b, c in self._triangles:
            t = _intersect(o, d, a, b, c)
            if t is None or (not allow_behind and t < 0.0):
                continue
            if abs(t) < abs(best_t):
                best_t, best_fid = t, fid
        if best_fid is None:
            return None
        mesh = self._mesh
        point = o + d * best_t
        pid = mesh.face_is_visible(best_fid)
        if pid is None:
            raise RuntimeError("picking structure is out of date; call update_mesh first")
        eid = closest_fid_eid(mesh, best_fid, point)
        vid = closest_fid_vid(mesh, best_fid, point)
        if not mesh.edge_contains_vert(eid, vid):
            edge_centroid = centroid(verts(mesh, eid_vids(mesh, eid)))
            if np.linalg.norm(point - mesh.vert(vid)) < np.linalg.norm(point - edge_centroid):
                eid = closest_fid_eid_by_vid(mesh, best_fid, vid, point)
            else:
                vid = closest_eid_vid(mesh, eid, point)
        return PickResult(pid, best_fid, eid, vid)