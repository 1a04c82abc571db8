import numpy as np

from hexmesher import dag
from hexmesher.actions.root import Root
from hexmesher.project import Project

CUBE = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)]


def test_root_apply_undo_redo():
    project = Project()
    element = dag.Element(vids=range(8))
    action = Root(element, CUBE)
    commander = project.commander()
    commander.apply(action)
    mesh = project.mesher().mesh()
    assert project.root() is element
    assert element.pid == 0
    assert np.allclose(mesh.vector_verts(), CUBE)
    commander.undo()
    assert project.root() is None
    assert mesh.num_verts() == 0
    commander.redo()
    assert project.root() is element
    assert mesh.num_polys() == 1


def test_root_accessors():
    element = dag.Element(vids=range(8))
    action = Root(element, CUBE)
    assert action.new_root() is element
    assert np.allclose(action.new_verts(), CUBE)


def test_root_hides_deleted_elements():
    project = Project()
    element = dag.Element(vids=range(8))
    element.children.attach(dag.Delete())
    project.commander().apply(Root(element, CUBE))
    assert not project.mesher().shown(element)


def test_root_replaces_previous_root():
    project = Project()
    first = dag.Element(vids=range(8))
    second = dag.Element(vids=range(8))
    commander = project.commander()
    commander.apply(Root(first, CUBE))
    commander.apply(Root(second, CUBE))
    assert project.root() is second
    assert project.mesher().element(0) is second
    commander.undo()
    assert project.root() is first
    assert project.mesher().element(0) is first