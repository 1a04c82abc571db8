import pytest

from hexmesher.actions.delete import Delete, DeleteSome
from hexmesher.actions.extrude import Extrude
from hexmesher.actions.root import Root
from hexmesher.dag import Element, Primitive
from hexmesher.project import Project

CUBE = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)]


def make_project():
    project = Project()
    root = Element(vids=range(8))
    project.commander().apply(Root(root, CUBE))
    return project, root


def test_delete_and_undo():
    project, root = make_project()
    action = Delete(root)
    project.commander().apply(action)
    assert not project.mesher().shown(root)
    assert action.element() is root
    assert action.operation().parents.single() is root
    assert action.operation().primitive == Primitive.DELETE
    project.commander().undo()
    assert project.mesher().shown(root)
    assert len(root.children) == 0
    project.commander().redo()
    assert not project.mesher().shown(root)


def test_delete_hidden_element_fails():
    project, root = make_project()
    project.commander().apply(Delete(root))
    with pytest.raises(RuntimeError):
        project.commander().apply(Delete(root))


def test_delete_some():
    project, root = make_project()
    project.commander().apply(Extrude([root], [0], 0, False))
    child = project.mesher().element(1)
    action = DeleteSome([root, child])
    project.commander().apply(action)
    assert not project.mesher().shown(root)
    assert not project.mesher().shown(child)
    pairs = action.operations()
    assert [element for _, element in pairs] == [root, child]
    assert all(op.parents.single() is element for op, element in pairs)
    project.commander().undo()
    assert project.mesher().shown(root)
    assert project.mesher().shown(child)
    assert all(len(op.parents) == 0 for op, _ in pairs)