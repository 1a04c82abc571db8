import numpy as np
import pytest

from hexmesher.actions.extrude_utils import (
    apply,
    apply_edge_extrude,
    apply_face_extrude,
    apply_vertex_extrude,
    extrude_face,
    prepare,
)
from hexmesher.dag import NO_ID, Element, ExtrudeSource
from hexmesher.meshing.mesh_utils import align, fi_vids
from hexmesher.meshing.mesher import Mesher

CUBE = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)]


@pytest.fixture
def cube():
    mesher = Mesher()
    element = Element(vids=range(8))
    mesher.add([element], CUBE)
    return mesher, element


def test_prepare_builds_single_child():
    extrude = prepare([0, 1], 3, True)
    assert extrude.source == ExtrudeSource.EDGE
    assert extrude.fis == [0, 1]
    assert extrude.first_vi == 3
    assert extrude.clockwise is True
    assert extrude.children.single().vids == [NO_ID] * 8


def test_prepare_rejects_bad_count():
    with pytest.raises(ValueError):
        prepare([0, 1, 2, 3], 0, False)


def test_extrude_face_moves_out_of_the_cube(cube):
    mesher, element = cube
    face = fi_vids(element.vids, 0)
    out = extrude_face(mesher.mesh(), face)
    assert len(out) == 4
    for vid, vert in zip(face, out):
        original = mesher.mesh().vert(vid)
        assert np.allclose(vert[:2], original[:2])
        assert vert[2] == pytest.approx(-1.0)


def test_apply_face_extrude(cube):
    mesher, element = cube
    vids, new_verts = apply_face_extrude(mesher.mesh(), element, 0, 0, 8)
    assert vids[:4] == align(fi_vids(element.vids, 0), 0)
    assert vids[4:] == [8, 9, 10, 11]
    assert len(new_verts) == 4


def test_apply_edge_extrude_structure(cube):
    mesher, element = cube
    face0 = align(fi_vids(element.vids, 0), 0)
    ccw, ccw_new = apply_edge_extrude(mesher.mesh(), [element, element], [0, 4], 0, False, 8)
    cw, cw_new = apply_edge_extrude(mesher.mesh(), [element, element], [0, 4], 0, True, 8)
    assert ccw[:4] == face0 and cw[:4] == face0
    assert ccw[6:] == [8, 9]
    assert cw[5:7] == [8, 9]
    assert len(ccw_new) == 2 and len(cw_new) == 2


def test_apply_vertex_extrude_structure(cube):
    mesher, element = cube
    for clockwise in (False, True):
        vids, new_verts = apply_vertex_extrude(mesher.mesh(), [element] * 3, [0, 4, 3], 0, clockwise, 8)
        assert vids[:4] == align(fi_vids(element.vids, 0), 0)
        assert vids[6] == 8
        assert len(new_verts) == 1


def test_edge_extrude_needs_two_elements(cube):
    mesher, element = cube
    with pytest.raises(ValueError):
        apply_edge_extrude(mesher.mesh(), [element], [0], 0, False, 8)


def test_apply_dispatches_on_source(cube):
    mesher, element = cube
    extrude = prepare([0], 0, False)
    extrude.parents.attach(element)
    vids, new_verts = apply(mesher, extrude)
    assert vids[4:] == [8, 9, 10, 11]
    assert len(new_verts) == 4


def test_apply_rejects_mismatched_parents(cube):
    mesher, element = cube
    extrude = prepare([0, 4], 0, False)
    extrude.parents.attach(element)
    with pytest.raises(ValueError):
        apply(mesher, extrude)