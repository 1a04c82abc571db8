"""Geometry of extruding a new hexahedron from one, two or three faces."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from hexmesher.dag import Element, Extrude, ExtrudeSource
from hexmesher.meshing.hexmesh import HexMesh
from hexmesher.meshing.mesh_utils import align, avg_edge_length, fi_vids, normal, verts

_PARENT_COUNTS = {ExtrudeSource.FACE: 1, ExtrudeSource.EDGE: 2, ExtrudeSource.VERTEX: 3}


def prepare(fis: Sequence[int], first_vi: int, clockwise: bool) -> Extrude:
    """Create an extrude operation with a single, not yet placed, child element."""
    extrude = Extrude(
        fis=fis,
        first_vi=first_vi,
        clockwise=clockwise,
        source=Extrude.source_by_parent_count(len(fis)),
    )
    extrude.children.attach(Element())
    return extrude


def extrude_face(mesh: HexMesh, vids: Sequence[int]) -> list[np.ndarray]:
    """Offset a quad along its normal by its mean edge length."""
    in_verts = verts(mesh, vids)
    length = avg_edge_length(in_verts)
    face_normal = normal(in_verts)
    return [v + face_normal * length for v in in_verts]


def _aligned_faces(elements: Sequence[Element], fis: Sequence[int], first_vid: int) -> list[list[int]]:
    return [align(fi_vids(el.vids, f), first_vid) for el, f in zip(elements, fis)]


def _check_count(elements: Sequence[Element], fis: Sequence[int], count: int) -> None:
    if len(elements) != count or len(fis) != count:
        raise ValueError(f"expected {count} elements and face indices")


def apply_face_extrude(
    mesh: HexMesh, element: Element, fi: int, first_vid: int, first_new_vid: int
) -> tuple[list[int], list[np.ndarray]]:
    """Hexahedron vertex ids and new vertices for an extrusion from one face."""
    face_vids = align(fi_vids(element.vids, fi), first_vid)
    new_verts = extrude_face(mesh, face_vids)
    return face_vids + [first_new_vid + i for i in range(4)], new_verts


def apply_edge_extrude(
    mesh: HexMesh,
    elements: Sequence[Element],
    fis: Sequence[int],
    first_vid: int,
    clockwise: bool,
    first_new_vid: int,
) -> tuple[list[int], list[np.ndarray]]:
    """Hexahedron vertex ids and new vertices for an extrusion from two faces sharing an edge."""
    _check_count(elements, fis, 2)
    f0, f1 = _aligned_faces(elements, fis, first_vid)
    q0, q1 = extrude_face(mesh, f0), extrude_face(mesh, f1)
    if clockwise:
        new_verts = [(q0[1] + q1[3]) / 2, (q0[2] + q1[2]) / 2]
        vids = [*f0, f1[3], first_new_vid, first_new_vid + 1, f1[2]]
    else:
        new_verts = [(q0[2] + q1[2]) / 2, (q0[3] + q1[1]) / 2]
        vids = [*f0, f1[1], f1[2], first_new_vid, first_new_vid + 1]
    return vids, new_verts


def apply_vertex_extrude(
    mesh: HexMesh,
    elements: Sequence[Element],
    fis: Sequence[int],
    first_vid: int,
    clockwise: bool,
    first_new_vid: int,
) -> tuple[list[int], list[np.ndarray]]:
    """Hexahedron vertex ids and the new vertex for an extrusion from three faces sharing a vertex."""
    _check_count(elements, fis, 3)
    f0, f1, f2 = _aligned_faces(elements, fis, first_vid)
    q0, q1, q2 = (extrude_face(mesh, f) for f in (f0, f1, f2))
    new_verts = [(q0[2] + q1[2] + q2[2]) / 3]
    if clockwise:
        vids = [*f0, f2[1], f2[2], first_new_vid, f1[2]]
    else:
        vids = [*f0, f1[1], f1[2], first_new_vid, f2[2]]
    return vids, new_verts


def apply(mesher, extrude: Extrude) -> tuple[list[int], list[np.ndarray]]:
    """Vertex ids of the extruded hexahedron and the vertices it adds to the mesh."""
    mesh = mesher.mesh()
    parents = list(extrude.parents)
    count = _PARENT_COUNTS[ExtrudeSource(extrude.source)]
    _check_count(parents, extrude.fis, count)
    first_vid = parents[0].vids[extrude.first_vi]
    first_new_vid = mesh.num_verts()
    if count == 1:
        return apply_face_extrude(mesh, parents[0], extrude.fis[0], first_vid, first_new_vid)
    if count == 2:
        return apply_edge_extrude(mesh, parents, extrude.fis, first_vid, extrude.clockwise, first_new_vid)
    return apply_vertex_extrude(mesh, parents, extrude.fis, first_vid, extrude.clockwise, first_new_vid)