import numpy as np
import pytest

from hexmesher.meshing.hexmesh import HexMesh
from hexmesher.projection.jacobian import (
    JacobianAdvanceMode,
    displace,
    hex_scaled_jacobian,
    jacobian_advance,
)

CUBE = [
    [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
    [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1],
]


def cube_mesh():
    mesh = HexMesh()
    for v in CUBE:
        mesh.vert_add(v)
    mesh.poly_add(range(8))
    return mesh


def test_unit_cube_is_perfect():
    assert hex_scaled_jacobian(CUBE) == pytest.approx(1.0)


def test_scaled_cube_is_still_perfect():
    assert hex_scaled_jacobian([np.array(v) * 3 + 2 for v in CUBE]) == pytest.approx(1.0)


def test_inverted_cube_is_negative():
    flipped = CUBE[4:] + CUBE[:4]
    assert hex_scaled_jacobian(flipped) < 0


def test_wrong_vertex_count():
    with pytest.raises(ValueError):
        hex_scaled_jacobian(CUBE[:7])


def test_displace_zero_length_stays():
    assert np.allclose(displace([1, 2, 3], [0, 0, 0], 0.0, 5.0, JacobianAdvanceMode.LENGTH, 1.0), [1, 2, 3])


def test_displace_length_mode_caps():
    origin = np.array([1.0, 1.0, 1.0])
    offset = np.array([4.0, 0.0, 0.0])
    short = displace(origin, offset, 4.0, 10.0, JacobianAdvanceMode.LENGTH, 1.0)
    assert np.allclose(short, origin + offset)
    capped = displace(origin, offset, 4.0, 4.0, JacobianAdvanceMode.LENGTH, 0.5)
    assert np.linalg.norm(capped - origin) == pytest.approx(2.0)


def test_displace_lerp_uses_unit_direction():
    assert np.allclose(displace([0, 0, 0], [3, 0, 0], 3.0, 3.0, JacobianAdvanceMode.LERP, 0.5), [0.5, 0, 0])


def test_valid_motion_is_kept_whole():
    mesh = cube_mesh()
    start = mesh.vector_verts()
    moved = [v + np.array([2.0, 0.0, 0.0]) for v in start]
    mesh.set_vector_verts(moved)
    jacobian_advance(mesh, start, JacobianAdvanceMode.LENGTH, 10, 0.01)
    assert all(np.allclose(a, b) for a, b in zip(mesh.vector_verts(), moved))


@pytest.mark.parametrize("subset", [False, True])
def test_inverting_motion_is_shortened(subset):
    mesh = cube_mesh()
    start = mesh.vector_verts()
    target = np.array([-1.0, -1.0, -1.0])
    mesh.set_vert(6, target)
    assert hex_scaled_jacobian(mesh.poly_verts(0)) < 0
    if subset:
        jacobian_advance(mesh, [start[6]], JacobianAdvanceMode.LENGTH, 10, 0.01, vids=[6])
    else:
        jacobian_advance(mesh, start, JacobianAdvanceMode.LENGTH, 10, 0.01)
    assert hex_scaled_jacobian(mesh.poly_verts(0)) >= 0
    v6 = mesh.vert(6)
    assert np.linalg.norm(v6 - target) > 0
    direction = target - start[6]
    assert np.allclose(np.cross(v6 - start[6], direction), 0)
    for vid in range(6):
        assert np.allclose(mesh.vert(vid), start[vid])