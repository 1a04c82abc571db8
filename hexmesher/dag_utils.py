"""Traversal, serialization and cloning of graph nodes."""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable, Iterator

from hexmesher.dag import (
    Delete,
    Element,
    Extrude,
    ExtrudeSource,
    Node,
    NodeType,
    Operation,
    Primitive,
    Refine,
)


def descendants(node: Node, branch_selector: Callable[[Node], bool] | None = None) -> list[Node]:
    """Breadth-first list of ``node`` and the nodes below it that the selector accepts."""
    select = branch_selector if branch_selector is not None else (lambda _node: True)
    nodes: list[Node] = []
    visited: set[Node] = set()
    to_visit: deque[Node] = deque()
    if select(node):
        nodes.append(node)
        visited.add(node)
        to_visit.append(node)
    while to_visit:
        current = to_visit.popleft()
        for child in current.children:
            if select(child) and child not in visited:
                visited.add(child)
                nodes.append(child)
                to_visit.append(child)
    return nodes


def serialize(root: Node) -> list:
    """Flatten the graph below ``root`` into a list of plain values."""
    nodes = descendants(root)
    out: list = [len(nodes)]
    for node in nodes:
        out.append(int(node.type))
        if isinstance(node, Element):
            out.extend(node.vids)
        elif isinstance(node, Operation):
            out.append(int(node.primitive))
            if isinstance(node, Extrude):
                out.extend((int(node.source), node.first_vi, bool(node.clockwise), len(node.fis)))
                out.extend(node.fis)
            elif isinstance(node, Refine):
                out.extend((node.forward_fi, node.first_vi, node.scheme, len(node.surf_vids)))
                out.extend(node.surf_vids)
    index = {node: i for i, node in enumerate(nodes)}
    for node in nodes:
        out.append(len(node.parents))
        out.extend(index[parent] for parent in node.parents)
    return out


def _reader(values: Iterable) -> Callable[[], object]:
    it: Iterator = iter(values)

    def read():
        try:
            return next(it)
        except StopIteration:
            raise ValueError("serialized graph is truncated") from None

    return read


def deserialize(values: Iterable) -> Node:
    """Rebuild a graph from :func:`serialize` output and return its first node."""
    read = _reader(values)
    nodes: list[Node] = []
    for _ in range(int(read())):
        node_type = NodeType(read())
        if node_type == NodeType.ELEMENT:
            nodes.append(Element(vids=[read() for _ in range(8)]))
            continue
        primitive = Primitive(read())
        if primitive == Primitive.DELETE:
            nodes.append(Delete())
        elif primitive == Primitive.EXTRUDE:
            source = ExtrudeSource(read())
            first_vi = read()
            clockwise = bool(read())
            fis = [read() for _ in range(int(read()))]
            nodes.append(Extrude(fis=fis, first_vi=first_vi, clockwise=clockwise, source=source))
        else:
            forward_fi = read()
            first_vi = read()
            scheme = read()
            surf_vids = [read() for _ in range(int(read()))]
            nodes.append(Refine(scheme=scheme, forward_fi=forward_fi, first_vi=first_vi, surf_vids=surf_vids))
    for node in nodes:
        for _ in range(int(read())):
            parent_index = int(read())
            if not 0 <= parent_index < len(nodes):
                raise ValueError(f"parent index {parent_index} out of range")
            node.parents.attach(nodes[parent_index])
    if not nodes:
        raise ValueError("serialized graph has no nodes")
    return nodes[0]


def clone(node: Node) -> Node:
    """Copy a single node's data, without any links."""
    if isinstance(node, Element):
        return Element(vids=node.vids, pid=node.pid)
    if isinstance(node, Delete):
        return Delete()
    if isinstance(node, Extrude):
        return Extrude(fis=node.fis, first_vi=node.first_vi, clockwise=node.clockwise, source=node.source)
    if isinstance(node, Refine):
        return Refine(scheme=node.scheme, forward_fi=node.forward_fi, first_vi=node.first_vi, surf_vids=node.surf_vids)
    raise TypeError(f"cannot clone {type(node).__name__}")