"""Hexahedral volume mesh and polygonal surface mesh with full adjacency."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from hexmesher.dag import NO_ID

HEX_FACE_VIS: tuple[tuple[int, int, int, int], ...] = (
    (0, 3, 2, 1),
    (1, 2, 6, 5),
    (4, 5, 6, 7),
    (3, 0, 4, 7),
    (0, 1, 5, 4),
    (2, 3, 7, 6),
)
HEX_EDGE_VIS: tuple[tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
)


def polygon_normal(points: Sequence[np.ndarray]) -> np.ndarray:
    """Unit normal of a planar polygon (Newell's method); zero if degenerate."""
    n = np.zeros(3)
    count = len(points)
    for i, a in enumerate(points):
        b = points[(i + 1) % count]
        n += np.array([
            (a[1] - b[1]) * (a[2] + b[2]),
            (a[2] - b[2]) * (a[0] + b[0]),
            (a[0] - b[0]) * (a[1] + b[1]),
        ])
    norm = np.linalg.norm(n)
    return n / norm if norm > 0 else n


def _same_cycle_direction(stored: Sequence[int], candidate: Sequence[int]) -> bool:
    i = list(stored).index(candidate[0])
    return stored[(i + 1) % len(stored)] == candidate[1]


class HexMesh:
    """A mesh of hexahedra whose ids grow in insertion order."""

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        """Remove every vertex, edge, face and polyhedron."""
        self._verts: list[np.ndarray] = []
        self._polys: list[list[int]] = []
        self._hidden: list[bool] = []
        self._edges: list[tuple[int, int]] = []
        self._edge_map: dict[frozenset, int] = {}
        self._faces: list[list[int]] = []
        self._face_map: dict[frozenset, int] = {}
        self._p2f: list[list[int]] = []
        self._p2e: list[list[int]] = []
        self._winding: list[list[bool]] = []
        self._v2e: list[list[int]] = []
        self._v2f: list[list[int]] = []
        self._v2p: list[list[int]] = []
        self._e2f: list[list[int]] = []
        self._e2p: list[list[int]] = []
        self._f2e: list[list[int]] = []
        self._f2p: list[list[int]] = []

    # construction

    def vert_add(self, pos: Iterable[float]) -> int:
        self._verts.append(np.array(pos, dtype=float))
        self._v2e.append([])
        self._v2f.append([])
        self._v2p.append([])
        return len(self._verts) - 1

    def _edge(self, a: int, b: int) -> int:
        key = frozenset((a, b))
        eid = self._edge_map.get(key)
        if eid is None:
            eid = len(self._edges)
            self._edges.append((a, b))
            self._edge_map[key] = eid
            self._e2f.append([])
            self._e2p.append([])
            self._v2e[a].append(eid)
            self._v2e[b].append(eid)
        return eid

    def poly_add(self, vids: Sequence[int]) -> int:
        """Add a hexahedron given its 8 vertex ids and return its id."""
        vids = [int(v) for v in vids]
        if len(vids) != 8 or len(set(vids)) != 8:
            raise ValueError("a hexahedron needs 8 distinct vertex ids")
        if any(not 0 <= v < len(self._verts) for v in vids):
            raise IndexError("vertex id out of range")
        pid = len(self._polys)
        self._polys.append(vids)
        self._hidden.append(False)
        for v in vids:
            self._v2p[v].append(pid)
        eids = []
        for a, b in HEX_EDGE_VIS:
            eid = self._edge(vids[a], vids[b])
            eids.append(eid)
            self._e2p[eid].append(pid)
        self._p2e.append(eids)
        fids, windings = [], []
        for fvis in HEX_FACE_VIS:
            face = [vids[i] for i in fvis]
            key = frozenset(face)
            fid = self._face_map.get(key)
            if fid is None:
                fid = len(self._faces)
                self._faces.append(face)
                self._face_map[key] = fid
                self._f2p.append([])
                f_eids = [self._edge(face[i], face[(i + 1) % 4]) for i in range(4)]
                self._f2e.append(f_eids)
                for e in f_eids:
                    self._e2f[e].append(fid)
                for v in face:
                    self._v2f[v].append(fid)
                windings.append(True)
            else:
                windings.append(_same_cycle_direction(self._faces[fid], face))
            self._f2p[fid].append(pid)
            fids.append(fid)
        self._p2f.append(fids)
        self._winding.append(windings)
        return pid

    def truncate(self, num_polys: int, num_faces: int, num_edges: int, num_verts: int) -> None:
        """Drop the newest elements so that exactly the given counts remain."""
        if (num_polys > self.num_polys() or num_faces > self.num_faces()
                or num_edges > self.num_edges() or num_verts > self.num_verts()):
            raise ValueError("cannot truncate to larger counts")
        verts = self._verts[:num_verts]
        polys = self._polys[:num_polys]
        hidden = self._hidden[:num_polys]
        self.clear()
        for v in verts:
            self.vert_add(v)
        for poly, h in zip(polys, hidden):
            pid = self.poly_add(poly)
            self._hidden[pid] = h
        if self.num_faces() != num_faces or self.num_edges() != num_edges:
            raise ValueError("counts do not describe an earlier state of the mesh")

    # counts and positions

    def num_verts(self) -> int:
        return len(self._verts)

    def num_edges(self) -> int:
        return len(self._edges)

    def num_faces(self) -> int:
        return len(self._faces)

    def num_polys(self) -> int:
        return len(self._polys)

    def vert(self, vid: int) -> np.ndarray:
        return self._verts[vid].copy()

    def set_vert(self, vid: int, pos: Iterable[float]) -> None:
        self._verts[vid] = np.array(pos, dtype=float)

    def vector_verts(self) -> list[np.ndarray]:
        return [v.copy() for v in self._verts]

    def set_vector_verts(self, verts: Sequence[Iterable[float]]) -> None:
        if len(verts) != len(self._verts):
            raise ValueError("vertex count mismatch")
        self._verts = [np.array(v, dtype=float) for v in verts]

    # adjacency

    def adj_v2v(self, vid: int) -> list[int]:
        return [self.vert_opposite_to(e, vid) for e in self._v2e[vid]]

    def adj_v2e(self, vid: int) -> list[int]:
        return list(self._v2e[vid])

    def adj_v2f(self, vid: int) -> list[int]:
        return list(self._v2f[vid])

    def adj_v2p(self, vid: int) -> list[int]:
        return list(self._v2p[vid])

    def adj_e2v(self, eid: int) -> list[int]:
        return list(self._edges[eid])

    def adj_e2f(self, eid: int) -> list[int]:
        return list(self._e2f[eid])

    def adj_e2p(self, eid: int) -> list[int]:
        return list(self._e2p[eid])

    def adj_f2v(self, fid: int) -> list[int]:
        return list(self._faces[fid])

    def adj_f2e(self, fid: int) -> list[int]:
        return list(self._f2e[fid])

    def adj_f2p(self, fid: int) -> list[int]:
        return list(self._f2p[fid])

    def adj_p2v(self, pid: int) -> list[int]:
        return list(self._polys[pid])

    def adj_p2e(self, pid: int) -> list[int]:
        return list(self._p2e[pid])

    def adj_p2f(self, pid: int) -> list[int]:
        return list(self._p2f[pid])

    # lookups

    def edge_id(self, vid0: int, vid1: int) -> int:
        return self._edge_map.get(frozenset((vid0, vid1)), NO_ID)

    def face_id(self, vids: Iterable[int]) -> int:
        return self._face_map.get(frozenset(vids), NO_ID)

    def edge_vert_id(self, eid: int, index: int) -> int:
        return self._edges[eid][index]

    def face_edge_id(self, fid: int, index: int) -> int:
        return self._f2e[fid][index]

    def poly_verts(self, pid: int) -> list[np.ndarray]:
        return [self.vert(v) for v in self._polys[pid]]

    def poly_vert_offset(self, pid: int, vid: int) -> int:
        try:
            return self._polys[pid].index(vid)
        except ValueError:
            raise ValueError(f"vertex {vid} is not in polyhedron {pid}") from None

    def poly_face_opposite_to(self, pid: int, fid: int) -> int:
        face = set(self._faces[fid])
        for other in self._p2f[pid]:
            if not face & set(self._faces[other]):
                return other
        raise ValueError(f"face {fid} is not in polyhedron {pid}")

    def poly_face_winding(self, pid: int, fid: int) -> bool:
        """True when the stored face order faces outward from ``pid``."""
        try:
            return self._winding[pid][self._p2f[pid].index(fid)]
        except ValueError:
            raise ValueError(f"face {fid} is not in polyhedron {pid}") from None

    def poly_face_normal(self, pid: int, fid: int) -> np.ndarray:
        n = polygon_normal([self._verts[v] for v in self._faces[fid]])
        return n if self.poly_face_winding(pid, fid) else -n

    def poly_shared_face(self, pid0: int, pid1: int) -> int:
        for fid in self._p2f[pid0]:
            if fid in self._p2f[pid1]:
                return fid
        return NO_ID

    def poly_contains_face(self, pid: int, fid: int) -> bool:
        return fid in self._p2f[pid]

    def poly_contains_edge(self, pid: int, eid: int) -> bool:
        return eid in self._p2e[pid]

    # visibility

    def set_poly_hidden(self, pid: int, hidden: bool) -> None:
        self._hidden[pid] = bool(hidden)

    def poly_hidden(self, pid: int) -> bool:
        return self._hidden[pid]

    def face_is_visible(self, fid: int) -> int | None:
        """The single visible polyhedron bounding ``fid``, or None if the face is not visible."""
        visible = [p for p in self._f2p[fid] if not self._hidden[p]]
        return visible[0] if len(visible) == 1 else None

    def face_is_on_srf(self, fid: int) -> bool:
        return len(self._f2p[fid]) == 1

    def vert_is_visible(self, vid: int) -> bool:
        return any(not self._hidden[p] for p in self._v2p[vid])

    def vert_is_on_srf(self, vid: int) -> bool:
        return any(self.face_is_on_srf(f) for f in self._v2f[vid])

    # topology predicates

    def faces_are_adjacent(self, fid0: int, fid1: int) -> bool:
        return fid0 != fid1 and self.face_shared_edge(fid0, fid1) != NO_ID

    def face_shared_edge(self, fid0: int, fid1: int) -> int:
        for eid in self._f2e[fid0]:
            if eid in self._f2e[fid1]:
                return eid
        return NO_ID

    def face_contains_vert(self, fid: int, vid: int) -> bool:
        return vid in self._faces[fid]

    def face_contains_edge(self, fid: int, eid: int) -> bool:
        return eid in self._f2e[fid]

    def edge_contains_vert(self, eid: int, vid: int) -> bool:
        return vid in self._edges[eid]

    def edges_are_adjacent(self, eid0: int, eid1: int) -> bool:
        return eid0 != eid1 and bool(set(self._edges[eid0]) & set(self._edges[eid1]))

    def vert_opposite_to(self, eid: int, vid: int) -> int:
        a, b = self._edges[eid]
        if vid == a:
            return b
        if vid == b:
            return a
        raise ValueError(f"vertex {vid} is not on edge {eid}")

    def export_surface(self) -> tuple[PolygonMesh, dict[int, int], dict[int, int]]:
        """Visible boundary as a quad mesh, with volume-to-surface and surface-to-volume vertex maps."""
        vol2surf: dict[int, int] = {}
        surf2vol: dict[int, int] = {}
        verts: list[np.ndarray] = []
        quads: list[list[int]] = []
        for fid, face in enumerate(self._faces):
            pid = self.face_is_visible(fid)
            if pid is None:
                continue
            ordered = face if self.poly_face_winding(pid, fid) else face[::-1]
            quad = []
            for vid in ordered:
                if vid not in vol2surf:
                    vol2surf[vid] = len(verts)
                    surf2vol[len(verts)] = vid
                    verts.append(self._verts[vid])
                quad.append(vol2surf[vid])
            quads.append(quad)
        return PolygonMesh(verts, quads), vol2surf, surf2vol


class PolygonMesh:
    """A surface mesh of polygons with per-vertex normals."""

    def __init__(self, verts: Sequence[Iterable[float]], polys: Sequence[Sequence[int]]) -> None:
        self._verts = [np.array(v, dtype=float) for v in verts]
        self._polys = [list(p) for p in polys]
        self._edges: list[tuple[int, int]] = []
        self._edge_map: dict[frozenset, int] = {}
        self._v2e: list[list[int]] = [[] for _ in self._verts]
        self._v2p: list[list[int]] = [[] for _ in self._verts]
        for pid, poly in enumerate(self._polys):
            if any(not 0 <= v < len(self._verts) for v in poly):
                raise IndexError("vertex id out of range")
            for i, a in enumerate(poly):
                self._v2p[a].append(pid)
                b = poly[(i + 1) % len(poly)]
                key = frozenset((a, b))
                if key not in self._edge_map:
                    self._edge_map[key] = len(self._edges)
                    self._v2e[a].append(len(self._edges))
                    self._v2e[b].append(len(self._edges))
                    self._edges.append((a, b))
        self._normals: list[np.ndarray] = []
        self.update_normals()

    def num_verts(self) -> int:
        return len(self._verts)

    def num_edges(self) -> int:
        return len(self._edges)

    def num_polys(self) -> int:
        return len(self._polys)

    def vert(self, vid: int) -> np.ndarray:
        return self._verts[vid].copy()

    def set_vert(self, vid: int, pos: Iterable[float]) -> None:
        self._verts[vid] = np.array(pos, dtype=float)

    def vector_verts(self) -> list[np.ndarray]:
        return [v.copy() for v in self._verts]

    def set_vector_verts(self, verts: Sequence[Iterable[float]]) -> None:
        if len(verts) != len(self._verts):
            raise ValueError("vertex count mismatch")
        self._verts = [np.array(v, dtype=float) for v in verts]

    def adj_v2v(self, vid: int) -> list[int]:
        return [self.vert_opposite_to(e, vid) for e in self._v2e[vid]]

    def adj_v2p(self, vid: int) -> list[int]:
        return list(self._v2p[vid])

    def poly_verts(self, pid: int) -> list[np.ndarray]:
        return [self.vert(v) for v in self._polys[pid]]

    def poly_vids(self, pid: int) -> list[int]:
        return list(self._polys[pid])

    def poly_vert_offset(self, pid: int, vid: int) -> int:
        try:
            return self._polys[pid].index(vid)
        except ValueError:
            raise ValueError(f"vertex {vid} is not in polygon {pid}") from None

    def poly_triangles(self, pid: int) -> list[tuple[int, int, int]]:
        """Fan triangulation of a polygon, as vertex id triples."""
        p = self._polys[pid]
        return [(p[0], p[i], p[i + 1]) for i in range(1, len(p) - 1)]

    def edge_id(self, vid0: int, vid1: int) -> int:
        return self._edge_map.get(frozenset((vid0, vid1)), NO_ID)

    def edge_vert_id(self, eid: int, index: int) -> int:
        return self._edges[eid][index]

    def edge_verts(self, eid: int) -> tuple[np.ndarray, np.ndarray]:
        a, b = self._edges[eid]
        return self.vert(a), self.vert(b)

    def vert_opposite_to(self, eid: int, vid: int) -> int:
        a, b = self._edges[eid]
        if vid == a:
            return b
        if vid == b:
            return a
        raise ValueError(f"vertex {vid} is not on edge {eid}")

    def vert_normal(self, vid: int) -> np.ndarray:
        return self._normals[vid].copy()

    def update_normals(self) -> None:
        """Recompute vertex normals from the current positions."""
        poly_normals = [polygon_normal([self._verts[v] for v in p]) for p in self._polys]
        self._normals = []
        for vid in range(len(self._verts)):
            n = sum((poly_normals[p] for p in self._v2p[vid]), np.zeros(3))
            norm = np.linalg.norm(n)
            self._normals.append(n / norm if norm > 0 else n)