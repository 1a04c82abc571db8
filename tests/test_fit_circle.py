import numpy as np
import pytest

from hexmesher.actions.fit_circle import FitCircle
from hexmesher.actions.root import Root
from hexmesher.dag import Element
from hexmesher.project import Project

CUBE = [
    [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
    [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1],
]
TOP = [4, 5, 6, 7]


def make_project():
    project = Project()
    root = Element()
    root.vids = list(range(8))
    project.commander().apply(Root(root, CUBE))
    return project


def test_needs_three_vertices():
    with pytest.raises(ValueError):
        FitCircle([1, 2])


def test_square_corners_stay_in_place():
    project = make_project()
    project.commander().apply(FitCircle(TOP))
    mesh = project.mesher().mesh()
    for vid in TOP:
        assert np.allclose(mesh.vert(vid), CUBE[vid])


def test_perturbed_ring_becomes_circle_and_undo_restores():
    project = make_project()
    mesher = project.mesher()
    moved = np.array([1.5, -0.2, 1.0])
    mesher.move_vert(5, moved)
    mesher.update_mesh()
    action = FitCircle(TOP)
    assert action.vids() == TOP
    project.commander().apply(action)
    mesh = mesher.mesh()
    points = [mesh.vert(v) for v in TOP]
    centre = np.mean(points, axis=0)
    dists = [np.linalg.norm(p - centre) for p in points]
    assert max(dists) - min(dists) == pytest.approx(0.0, abs=1e-9)
    for p in points:
        assert p[2] == pytest.approx(1.0)
    assert np.allclose(mesh.vert(0), CUBE[0])
    project.commander().undo()
    assert np.allclose(mesh.vert(5), moved)
    project.commander().redo()
    after = [mesh.vert(v) for v in TOP]
    assert all(np.allclose(a, b) for a, b in zip(after, points))