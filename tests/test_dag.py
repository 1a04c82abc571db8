import pytest

from hexmesher.dag import (
    NO_ID,
    Delete,
    Element,
    Extrude,
    ExtrudeSource,
    NodeType,
    Primitive,
    Refine,
)


def test_element_defaults():
    element = Element()
    assert element.vids == [NO_ID] * 8
    assert element.pid == NO_ID
    assert element.is_element() and not element.is_operation()
    assert element.type == NodeType.ELEMENT


def test_element_rejects_wrong_vid_count():
    with pytest.raises(ValueError):
        Element(vids=[1, 2, 3])


def test_operation_primitives():
    assert Delete().primitive == Primitive.DELETE
    assert Extrude().primitive == Primitive.EXTRUDE
    assert Refine().primitive == Primitive.REFINE
    assert Delete().is_operation()


def test_attach_is_symmetric():
    element = Element()
    op = Delete()
    assert op.parents.attach(element) is True
    assert element in op.parents
    assert op in element.children
    assert op.parents.attach(element) is False
    assert len(op.parents) == 1
    assert not op.is_root() and not element.is_leaf()
    assert element.is_root() and op.is_leaf()


def test_attach_same_kind_raises():
    with pytest.raises(TypeError):
        Element().children.attach(Element())
    with pytest.raises(TypeError):
        Delete().children.attach(Refine())


def test_forward_and_back():
    element = Element()
    assert element.forward(True) is element.children
    assert element.forward(False) is element.parents
    assert element.back(True) is element.parents
    assert element.back(False) is element.children


def test_detach_without_deleting_keeps_children():
    root = Element()
    op = Refine()
    child = Element()
    op.parents.attach(root)
    op.children.attach(child)
    assert root.children.detach(op, False) is True
    assert op.is_root()
    assert child in op.children
    assert root.children.detach(op, False) is False


def test_detach_deletes_dangling_cascade():
    root = Element()
    op = Refine()
    child = Element()
    grand_op = Delete()
    op.parents.attach(root)
    op.children.attach(child)
    grand_op.parents.attach(child)
    root.children.detach(op)
    assert len(op.children) == 0
    assert child.is_root()
    assert len(child.children) == 0
    assert grand_op.is_root()


def test_cascade_stops_at_shared_child():
    a, b = Element(), Element()
    op_a, op_b = Refine(), Refine()
    shared = Element()
    op_a.parents.attach(a)
    op_b.parents.attach(b)
    op_a.children.attach(shared)
    op_b.children.attach(shared)
    a.children.detach(op_a)
    assert list(shared.parents) == [op_b]


def test_cascade_stops_at_handled_node():
    root = Element()
    op = Refine()
    child = Element()
    grand_op = Delete()
    op.parents.attach(root)
    op.children.attach(child)
    grand_op.parents.attach(child)
    child.handles = 1
    root.children.detach(op)
    assert child.is_root()
    assert grand_op in child.children


def test_detach_all_reports_emptiness():
    op = Extrude()
    parents = [Element(), Element()]
    for parent in parents:
        op.parents.attach(parent)
    assert op.parents.detach_all(False) is True
    assert len(op.parents) == 0
    assert all(parent.is_leaf() for parent in parents)
    assert op.parents.detach_all(False) is False


def test_order_indexing_first_single():
    op = Extrude()
    parents = [Element(), Element(), Element()]
    for parent in parents:
        op.parents.attach(parent)
    assert list(op.parents) == parents
    assert op.parents[1] is parents[1]
    assert op.parents[-1] is parents[2]
    assert op.parents.first() is parents[0]
    with pytest.raises(ValueError):
        op.parents.single()


def test_first_and_single_on_empty():
    op = Delete()
    with pytest.raises(IndexError):
        op.parents.first()
    with pytest.raises(ValueError):
        op.children.single()


def test_source_by_parent_count():
    assert Extrude.source_by_parent_count(1) == ExtrudeSource.FACE
    assert Extrude.source_by_parent_count(2) == ExtrudeSource.EDGE
    assert Extrude.source_by_parent_count(3) == ExtrudeSource.VERTEX
    for bad in (0, 4, -1):
        with pytest.raises(ValueError):
            Extrude.source_by_parent_count(bad)