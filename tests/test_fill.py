import numpy as np
import pytest

from hexmesher.meshing.hexmesh import PolygonMesh
from hexmesher.projection.features import Tweak
from hexmesher.projection.fill import fill, fill_path


@pytest.fixture
def square():
    return PolygonMesh([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)], [[0, 1, 2, 3]])


def test_fill_all_set_is_identity(square):
    given = [np.array(p, dtype=float) + 0.1 for p in square.vector_verts()]
    out = fill(square, given, Tweak(0.0, 1.0))
    assert len(out) == len(given)
    for a, b in zip(out, given):
        assert np.allclose(a, b)


def test_fill_single_missing_uses_equidistant_neighbours(square):
    a = np.array([1.0, 0.0, 0.0])
    c = np.array([0.0, 1.0, 0.0])
    given = [square.vert(0), a, None, c]
    out = fill(square, given, Tweak(0.0, 1.0))
    assert np.allclose(out[2], (a + c) / 2)
    assert np.allclose(out[0], given[0])


def test_fill_all_skipped_keeps_mesh_position(square):
    given = [square.vert(0) + 5.0, square.vert(1) + 5.0, None, square.vert(3) + 5.0]
    out = fill(square, given, Tweak(2.0, 1.0))
    assert np.allclose(out[2], square.vert(2))


def test_fill_everything_missing_stays_in_hull(square):
    out = fill(square, [None] * 4, Tweak(0.0, 1.0))
    assert len(out) == 4
    for p in out:
        assert np.all(p >= -1e-12) and np.all(p <= 1.0 + 1e-12)


def test_fill_path_middle(square):
    a = np.array([0.0, 0.0, 0.0])
    c = np.array([1.0, 1.0, 0.0])
    out = fill_path(square, [a, None, c], Tweak(0.0, 1.0), [0, 1, 2])
    assert np.allclose(out[1], (a + c) / 2)
    assert np.allclose(out[0], a)
    assert np.allclose(out[2], c)


def test_fill_path_skipped_keeps_mesh_position(square):
    out = fill_path(square, [square.vert(0) + 3.0, None], Tweak(2.0, 1.0), [0, 1])
    assert np.allclose(out[1], square.vert(1))