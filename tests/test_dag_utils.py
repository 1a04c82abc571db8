import pytest

from hexmesher.dag import NO_ID, Delete, Element, Extrude, ExtrudeSource, Refine
from hexmesher.dag_utils import clone, descendants, deserialize, serialize


def _build():
    root = Element(vids=range(8), pid=0)
    refine = Refine(scheme=2, forward_fi=1, first_vi=3, surf_vids=[4, 5])
    refine.parents.attach(root)
    left = Element(vids=range(10, 18), pid=1)
    right = Element(vids=range(20, 28), pid=2)
    refine.children.attach(left)
    refine.children.attach(right)
    extrude = Extrude(fis=[0, 2], first_vi=4, clockwise=True, source=ExtrudeSource.EDGE)
    extrude.parents.attach(left)
    extrude.parents.attach(right)
    top = Element(vids=range(30, 38))
    extrude.children.attach(top)
    delete = Delete()
    delete.parents.attach(top)
    return root, refine, left, right, extrude, top, delete


def test_descendants_breadth_first_without_duplicates():
    root, refine, left, right, extrude, top, delete = _build()
    assert descendants(root) == [root, refine, left, right, extrude, top, delete]


def test_descendants_with_selector():
    root, refine, left, right, extrude, top, delete = _build()
    result = descendants(root, lambda node: node is not right)
    assert right not in result
    assert result[:3] == [root, refine, left]
    assert descendants(root, lambda node: False) == []


def test_serialize_single_element():
    assert serialize(Element()) == [1, 0] + [NO_ID] * 8 + [0]


def test_round_trip_preserves_structure_and_data():
    root = _build()[0]
    values = serialize(root)
    copy = deserialize(values)
    assert serialize(copy) == values
    nodes = descendants(copy)
    assert [type(node) for node in nodes] == [Element, Refine, Element, Element, Extrude, Element, Delete]
    assert nodes[1].surf_vids == [4, 5]
    assert nodes[4].fis == [0, 2]
    assert nodes[4].clockwise is True
    assert nodes[4].source == ExtrudeSource.EDGE
    assert list(nodes[4].parents) == [nodes[2], nodes[3]]
    assert nodes[5].vids == list(range(30, 38))


def test_deserialize_errors():
    with pytest.raises(ValueError):
        deserialize([0])
    with pytest.raises(ValueError):
        deserialize(serialize(_build()[0])[:-1])


def test_clone_copies_data_not_links():
    root, refine, left, right, extrude, top, delete = _build()
    element_copy = clone(left)
    assert element_copy.vids == left.vids and element_copy.pid == left.pid
    assert element_copy.vids is not left.vids
    assert element_copy.is_root() and element_copy.is_leaf()
    extrude_copy = clone(extrude)
    assert (extrude_copy.fis, extrude_copy.first_vi, extrude_copy.clockwise, extrude_copy.source) == (
        extrude.fis, extrude.first_vi, extrude.clockwise, extrude.source)
    assert len(extrude_copy.parents) == 0
    refine_copy = clone(refine)
    assert (refine_copy.scheme, refine_copy.forward_fi, refine_copy.first_vi, refine_copy.surf_vids) == (
        refine.scheme, refine.forward_fi, refine.first_vi, refine.surf_vids)
    assert isinstance(clone(delete), Delete) and clone(delete) is not delete