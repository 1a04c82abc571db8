"""Index conventions and topological helpers for hexahedral meshes."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from hexmesher.dag import NO_ID, Element, Node, Primitive
from hexmesher.dag_utils import descendants
from hexmesher.meshing.hexmesh import HEX_EDGE_VIS, HEX_FACE_VIS, HexMesh, polygon_normal

EPS = 1e-9

HEX_FI_VIS = HEX_FACE_VIS
HEX_EI_VIS = HEX_EDGE_VIS
HEX_FI_OPP_FIS: tuple[int, ...] = (2, 3, 0, 1, 5, 4)
QUAD_EI_VIS: tuple[tuple[int, int], ...] = ((0, 1), (1, 2), (2, 3), (3, 0))


def vert_less(a: Sequence[float], b: Sequence[float]) -> bool:
    """Lexicographic ordering of points with tolerance ``EPS``."""
    for x, y in zip(a, b):
        diff = x - y
        if diff < 0 and abs(diff) > EPS:
            return True
        if not abs(diff) < EPS:
            return False
    return False


def _rotated_until(vids: list[int], done) -> list[int]:
    for _ in range(len(vids)):
        if done(vids):
            return vids
        vids = vids[1:] + vids[:1]
    raise ValueError("no rotation satisfies the requested alignment")


def adj_fid_in_pid_by_fid_and_eid(mesh: HexMesh, pid: int, fid: int, eid: int) -> int:
    if not mesh.poly_contains_face(pid, fid) or not mesh.face_contains_edge(fid, eid):
        raise ValueError("face must belong to the polyhedron and contain the edge")
    for other in mesh.adj_p2f(pid):
        if other != fid and mesh.face_shared_edge(other, fid) == eid:
            return other
    raise ValueError("no adjacent face found")


def any_adj_fid_in_pid_by_fid(mesh: HexMesh, pid: int, fid: int) -> int:
    return adj_fid_in_pid_by_fid_and_eid(mesh, pid, fid, mesh.adj_f2e(fid)[0])


def adj_fid_in_pid_by_vid_and_fids(mesh: HexMesh, pid: int, vid: int, fid1: int, fid2: int) -> int:
    found = [
        f for f in mesh.adj_p2f(pid)
        if f not in (fid1, fid2)
        and mesh.faces_are_adjacent(f, fid1)
        and mesh.faces_are_adjacent(f, fid2)
        and mesh.face_contains_vert(f, vid)
    ]
    if len(found) != 1:
        raise ValueError(f"expected one matching face, found {len(found)}")
    return found[0]


def any_adj_fid_in_pid_by_fids(mesh: HexMesh, pid: int, fid1: int, fid2: int) -> int:
    shared = mesh.face_shared_edge(fid1, fid2)
    return adj_fid_in_pid_by_vid_and_fids(mesh, pid, mesh.edge_vert_id(shared, 0), fid1, fid2)


def any_adj_fid_in_pid_by_eid(mesh: HexMesh, pid: int, eid: int) -> int:
    if not mesh.poly_contains_edge(pid, eid):
        raise ValueError("edge is not in the polyhedron")
    for f in mesh.adj_e2f(eid):
        if mesh.poly_contains_face(pid, f):
            return f
    raise ValueError("no face found")


def shared_eid(mesh: HexMesh, pid1: int, pid2: int) -> int:
    for e in mesh.adj_p2e(pid1):
        if pid2 in mesh.adj_e2p(e):
            return e
    raise ValueError("polyhedra share no edge")


def next_vid_in_fid(vids: Sequence[int], vid: int, backwards: bool = False) -> int:
    index = list(vids).index(vid)
    return vids[(index + (-1 if backwards else 1)) % 4]


def edge_hex_vert_offsets(mesh: HexMesh, eid: int, pid: int) -> list[int]:
    return [mesh.poly_vert_offset(pid, v) for v in eid_vids(mesh, eid)]


def pid_fid_vids(mesh: HexMesh, pid: int, fid: int, cw: bool = False) -> list[int]:
    if not mesh.poly_contains_face(pid, fid):
        raise ValueError("face is not in the polyhedron")
    vids = fid_vids(mesh, fid)
    if cw == mesh.poly_face_winding(pid, fid):
        vids.reverse()
    return vids


def pid_fid_vids_by_first_eid(mesh: HexMesh, pid: int, fid: int, first_eid: int, cw: bool = False) -> list[int]:
    if not mesh.face_contains_edge(fid, first_eid):
        raise ValueError("face does not contain the edge")
    return _rotated_until(pid_fid_vids(mesh, pid, fid, cw), lambda v: mesh.edge_id(v[0], v[1]) == first_eid)


def pid_fid_vids_by_first_vid(mesh: HexMesh, pid: int, fid: int, first_vid: int, cw: bool = False) -> list[int]:
    if not mesh.face_contains_vert(fid, first_vid):
        raise ValueError("face does not contain the vertex")
    return _rotated_until(pid_fid_vids(mesh, pid, fid, cw), lambda v: v[0] == first_vid)


def is_edge_forward(vids: Sequence[int], vid0: int, vid1: int) -> bool:
    index = list(vids).index(vid0)
    return vids[(index + 1) % 4] == vid1


def are_vids_cw(mesh: HexMesh, pid: int, fid: int, vid0: int, vid1: int) -> bool:
    return not is_edge_forward(pid_fid_vids(mesh, pid, fid), vid0, vid1)


def is_edge_cw(mesh: HexMesh, pid: int, fid: int, first_vid: int, eid: int) -> bool:
    return are_vids_cw(mesh, pid, fid, first_vid, mesh.vert_opposite_to(eid, first_vid))


def _with_back_face(mesh: HexMesh, forward: list[int], back: list[int]) -> list[int]:
    back = _rotated_until(back, lambda b: mesh.edge_id(forward[0], b[0]) != NO_ID)
    return forward + back


def pid_vids_by_forward_fid_and_first_eid(mesh: HexMesh, pid: int, forward_fid: int, forward_up_eid: int) -> list[int]:
    forward = pid_fid_vids_by_first_eid(mesh, pid, forward_fid, forward_up_eid, True)
    back = pid_fid_vids(mesh, pid, mesh.poly_face_opposite_to(pid, forward_fid), False)
    return _with_back_face(mesh, forward, back)


def pid_vids_by_forward_fid_and_first_vid(mesh: HexMesh, pid: int, forward_fid: int, first_vid: int) -> list[int]:
    forward = pid_fid_vids_by_first_vid(mesh, pid, forward_fid, first_vid)
    back = pid_fid_vids(mesh, pid, mesh.poly_face_opposite_to(pid, forward_fid), True)
    return _with_back_face(mesh, forward, back)


def _dist(a, b) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def _closest(candidates, key) -> int:
    best, best_dist = NO_ID, float("inf")
    for c in candidates:
        d = key(c)
        if d < best_dist:
            best, best_dist = c, d
    return best


def _edge_midpoint(mesh: HexMesh, eid: int) -> np.ndarray:
    return centroid(verts(mesh, eid_vids(mesh, eid)))


def closest_eid_vid(mesh: HexMesh, eid: int, position) -> int:
    return _closest(eid_vids(mesh, eid), lambda v: _dist(position, mesh.vert(v)))


def closest_fid_eid_by_vid(mesh: HexMesh, fid: int, vid: int, midpoint) -> int:
    eids = [e for e in mesh.adj_f2e(fid) if mesh.edge_contains_vert(e, vid)]
    return _closest(eids, lambda e: _dist(midpoint, _edge_midpoint(mesh, e)))


def closest_fid_vid(mesh: HexMesh, fid: int, position) -> int:
    return _closest(fid_vids(mesh, fid), lambda v: _dist(position, mesh.vert(v)))


def closest_fid_eid(mesh: HexMesh, fid: int, midpoint) -> int:
    return _closest(mesh.adj_f2e(fid), lambda e: _dist(midpoint, _edge_midpoint(mesh, e)))


def fi_vids(hex_vids: Sequence[int], fi: int) -> list[int]:
    return [hex_vids[i] for i in HEX_FI_VIS[fi]]


def reverse(vids: Sequence[int]) -> list[int]:
    """Reverse the winding of an edge, quad or hexahedron keeping the first vertex."""
    v = list(vids)
    if len(v) == 2:
        return [v[1], v[0]]
    if len(v) == 4:
        return [v[0], v[3], v[2], v[1]]
    if len(v) == 8:
        return [v[0], v[3], v[2], v[1], v[4], v[7], v[6], v[5]]
    raise ValueError("expected 2, 4 or 8 vertex ids")


def align(vids: Sequence[int], first_vid: int, reverse: bool = False) -> list[int]:
    """Rotate ``vids`` so that ``first_vid`` comes first, then optionally reverse."""
    v = list(vids)
    if len(v) == 2:
        flip = reverse != (v[0] != first_vid)
        return [v[1], v[0]] if flip else v
    if len(v) == 4:
        v = _rotated_until(v, lambda q: q[0] == first_vid)
    elif len(v) == 8:
        for _ in range(4):
            if v[0] == first_vid:
                break
            v = v[1:4] + v[:1] + v[5:8] + v[4:5]
        if v[0] != first_vid:
            raise ValueError("vertex not on the first face")
    else:
        raise ValueError("expected 2, 4 or 8 vertex ids")
    return _reverse(v) if reverse else v


_reverse = reverse


def rotate(vids: Sequence[int], forward_fi: int) -> list[int]:
    return fi_vids(vids, forward_fi) + reverse(fi_vids(vids, HEX_FI_OPP_FIS[forward_fi]))


def vi(hex_vids: Sequence[int], vid: int) -> int:
    try:
        return list(hex_vids).index(vid)
    except ValueError:
        raise ValueError(f"vertex {vid} is not in the hexahedron") from None


def fi(hex_vids: Sequence[int], vids: Sequence[int]) -> int:
    wanted = sorted(vids)
    for index in range(6):
        if sorted(fi_vids(hex_vids, index)) == wanted:
            return index
    raise ValueError("face is not in the hexahedron")


def is_i_forward(fi_vis: Sequence[int], vi0: int, vi1: int) -> bool:
    index = list(fi_vis).index(vi0)
    return fi_vis[(index + 1) % 4] == vi1


def first_fi_vi(fi: int, ei: int) -> int:
    a, b = HEX_EI_VIS[ei]
    return a if is_i_forward(HEX_FI_VIS[fi], a, b) else b


def ei_vids(hex_vids: Sequence[int], ei: int) -> list[int]:
    return [hex_vids[i] for i in HEX_EI_VIS[ei]]


def ei(hex_vids: Sequence[int], vids: Sequence[int]) -> int:
    wanted = sorted(vids)
    for index in range(12):
        if sorted(ei_vids(hex_vids, index)) == wanted:
            return index
    raise ValueError("edge is not in the hexahedron")


def eid(mesh: HexMesh, hex_vids: Sequence[int], ei: int) -> int:
    found = mesh.edge_id(*ei_vids(hex_vids, ei))
    if found == NO_ID:
        raise ValueError("edge not found in mesh")
    return found


def fid(mesh: HexMesh, hex_vids: Sequence[int], fi: int) -> int:
    found = mesh.face_id(fi_vids(hex_vids, fi))
    if found == NO_ID:
        raise ValueError("face not found in mesh")
    return found


def normal(verts: Sequence) -> np.ndarray:
    return polygon_normal([np.asarray(v, dtype=float) for v in verts])


def avg_edge_length(verts: Sequence) -> float:
    """Mean edge length of a quad (4 points) or hexahedron (8 points)."""
    pairs = {4: QUAD_EI_VIS, 8: HEX_EI_VIS}.get(len(verts))
    if pairs is None:
        raise ValueError("expected 4 or 8 points")
    return sum(_dist(verts[a], verts[b]) for a, b in pairs) / len(pairs)


def centroid(verts: Sequence) -> np.ndarray:
    return np.mean([np.asarray(v, dtype=float) for v in verts], axis=0)


def verts(mesh: HexMesh, vids: Sequence[int], new_verts: Sequence = ()) -> list[np.ndarray]:
    """Positions of ``vids``; ids past the mesh index into ``new_verts``."""
    n = mesh.num_verts()
    return [mesh.vert(v) if v < n else np.asarray(new_verts[v - n], dtype=float) for v in vids]


def is_shown(node: Node) -> bool:
    return node.is_element() and all(c.primitive == Primitive.EXTRUDE for c in node.children)


def eid_vids(mesh: HexMesh, eid: int) -> list[int]:
    return mesh.adj_e2v(eid)


def fid_vids(mesh: HexMesh, fid: int) -> list[int]:
    return mesh.adj_f2v(fid)


def pid_vids(mesh: HexMesh, pid: int) -> list[int]:
    return mesh.adj_p2v(pid)


def add_tree(mesher: Any, root: Node, new_verts: Sequence = ()) -> None:
    """Add every element below ``root`` to the mesher, hiding those that are not leaves."""
    elements = sorted((n for n in descendants(root) if isinstance(n, Element)), key=lambda e: e.pid)
    mesher.add(elements, list(new_verts))
    for element in elements:
        if not is_shown(element):
            mesher.show(element, False)