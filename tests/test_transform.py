import numpy as np
import pytest

from hexmesher.actions.root import Root
from hexmesher.actions.transform import Transform
from hexmesher.dag import Element
from hexmesher.project import Project

CUBE = [
    [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
    [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1],
]


def make_project():
    project = Project()
    root = Element()
    root.vids = list(range(8))
    project.commander().apply(Root(root, CUBE))
    return project


def translation(offset):
    m = np.eye(4)
    m[:3, 3] = offset
    return m


def test_rejects_bad_matrix():
    with pytest.raises(ValueError):
        Transform(np.eye(3))


def test_translate_all_and_undo_redo():
    project = make_project()
    offset = np.array([1.0, -2.0, 0.5])
    action = Transform(translation(offset))
    assert action.vids() is None
    assert np.allclose(action.transform(), translation(offset))
    project.commander().apply(action)
    mesh = project.mesher().mesh()
    for vid, v in enumerate(CUBE):
        assert np.allclose(mesh.vert(vid), np.array(v) + offset)
    project.commander().undo()
    for vid, v in enumerate(CUBE):
        assert np.allclose(mesh.vert(vid), v)
    project.commander().redo()
    for vid, v in enumerate(CUBE):
        assert np.allclose(mesh.vert(vid), np.array(v) + offset)


def test_transform_subset_only():
    project = make_project()
    scale = np.diag([2.0, 2.0, 2.0, 1.0])
    project.commander().apply(Transform(scale, [6, 7]))
    mesh = project.mesher().mesh()
    assert np.allclose(mesh.vert(6), np.array(CUBE[6]) * 2)
    assert np.allclose(mesh.vert(7), np.array(CUBE[7]) * 2)
    for vid in range(6):
        assert np.allclose(mesh.vert(vid), CUBE[vid])
    project.commander().undo()
    assert np.allclose(mesh.vert(6), CUBE[6])