import numpy as np
import pytest

from hexmesher.meshing.hexmesh import HexMesh, PolygonMesh
from hexmesher.projection.smooth import is_vid_hidden, smooth, smooth_internal, smooth_path

CUBE = [
    (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
    (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1),
]


def _grid():
    """2x2x2 block of unit hexahedra with one interior vertex."""
    mesh = HexMesh()
    for k in range(3):
        for j in range(3):
            for i in range(3):
                mesh.vert_add((i, j, k))

    def v(i, j, k):
        return i + 3 * j + 9 * k

    for k in range(2):
        for j in range(2):
            for i in range(2):
                mesh.poly_add([
                    v(i, j, k), v(i + 1, j, k), v(i + 1, j + 1, k), v(i, j + 1, k),
                    v(i, j, k + 1), v(i + 1, j, k + 1), v(i + 1, j + 1, k + 1), v(i, j + 1, k + 1),
                ])
    return mesh, v(1, 1, 1)


@pytest.fixture
def cube():
    mesh = HexMesh()
    for p in CUBE:
        mesh.vert_add(p)
    mesh.poly_add(range(8))
    return mesh


def test_smooth_symmetric_square_collapses_to_centre():
    square = PolygonMesh([(1, 1, 0), (-1, 1, 0), (-1, -1, 0), (1, -1, 0)], [[0, 1, 2, 3]])
    out = smooth(square)
    assert len(out) == 4
    for p in out:
        assert np.allclose(p, np.zeros(3))


def test_smooth_keeps_isolated_vertex():
    mesh = PolygonMesh([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (9, 9, 9)], [[0, 1, 2, 3]])
    out = smooth(mesh)
    assert np.allclose(out[4], mesh.vert(4))


def test_smooth_path_endpoints_and_middle():
    mesh = PolygonMesh([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)], [[0, 1, 2, 3]])
    path = [0, 1, 2]
    out = smooth_path(mesh, path)
    assert len(out) == len(path)
    assert np.allclose(out[0], mesh.vert(1))
    assert np.allclose(out[2], mesh.vert(1))
    assert np.allclose(out[1], (mesh.vert(0) + mesh.vert(2)) / 2)


def test_smooth_path_empty():
    mesh = PolygonMesh([(0, 0, 0), (1, 0, 0), (1, 1, 0)], [[0, 1, 2]])
    assert smooth_path(mesh, []) == []


def test_is_vid_hidden(cube):
    assert not is_vid_hidden(cube, 0)
    cube.set_poly_hidden(0, True)
    assert is_vid_hidden(cube, 0)


def test_smooth_internal_recentres_interior_vertex():
    mesh, centre = _grid()
    original = mesh.vert(centre)
    mesh.set_vert(centre, (1.3, 0.8, 1.2))
    surface = [vid for vid in range(mesh.num_verts()) if mesh.vert_is_on_srf(vid)]
    assert centre not in surface
    out = smooth_internal(mesh, surface, 1.0)
    assert np.allclose(out[centre], original)
    for vid in surface:
        assert np.allclose(out[vid], mesh.vert(vid))


def test_smooth_internal_default_surface_keeps_visible(cube):
    out = smooth_internal(cube, None, 0.5)
    for vid in range(cube.num_verts()):
        assert np.allclose(out[vid], cube.vert(vid))