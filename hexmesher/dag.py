"""Directed acyclic graph of hexahedral elements and the operations that produce them."""

from __future__ import annotations

import enum
from collections import deque
from typing import Iterable, Iterator

NO_ID = -1


class NodeType(enum.IntEnum):
    """Kind of a graph node."""

    ELEMENT = 0
    OPERATION = 1


class Primitive(enum.IntEnum):
    """Kind of an operation node."""

    EXTRUDE = 0
    REFINE = 1
    DELETE = 2


class ExtrudeSource(enum.IntEnum):
    """What an extrusion starts from, given by the number of parents."""

    FACE = 0
    EDGE = 1
    VERTEX = 2


def _delete_dangling(dangling: deque, descending: bool) -> None:
    """Unlink dangling nodes, cascading to nodes left without links and handles."""
    while dangling:
        node = dangling.popleft()
        forward = node.forward(descending)
        for nxt in forward:
            back = nxt.back(descending)
            del back._nodes[node]
            if not back and not nxt.handles:
                dangling.append(nxt)
        forward._nodes.clear()


class NodeSet:
    """Ordered set of a node's parents or children.

    Links are kept symmetric: attaching a child to a node also adds the node
    to the child's parents.
    """

    def __init__(self, owner: Node, descending: bool) -> None:
        self._owner = owner
        self._descending = descending
        self._nodes: dict[Node, None] = {}

    def attach(self, node: Node) -> bool:
        """Link ``node``; return False if it was already linked."""
        self._owner._check_link(node)
        if node in self._nodes:
            return False
        self._nodes[node] = None
        node.back(self._descending)._nodes[self._owner] = None
        return True

    def detach(self, node: Node, delete_dangling: bool = True) -> bool:
        """Unlink ``node``; return False if it was not linked."""
        if node not in self._nodes:
            return False
        del self._nodes[node]
        back = node.back(self._descending)
        del back._nodes[self._owner]
        if delete_dangling and not back:
            _delete_dangling(deque([node]), self._descending)
        return True

    def detach_all(self, delete_dangling: bool = True) -> bool:
        """Unlink every node; return False if the set was already empty."""
        was_empty = not self._nodes
        dangling: deque = deque()
        for node in self._nodes:
            back = node.back(self._descending)
            del back._nodes[self._owner]
            if delete_dangling and not back:
                dangling.append(node)
        self._nodes.clear()
        _delete_dangling(dangling, self._descending)
        return not was_empty

    def first(self) -> Node:
        """Return the first linked node."""
        for node in self._nodes:
            return node
        raise IndexError("node set is empty")

    def single(self) -> Node:
        """Return the only linked node."""
        if len(self._nodes) != 1:
            raise ValueError(f"expected exactly one node, found {len(self._nodes)}")
        return self.first()

    def __getitem__(self, index: int) -> Node:
        return list(self._nodes)[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))

    def __contains__(self, node: object) -> bool:
        return node in self._nodes


class Node:
    """A graph node; elements and operations alternate along every path."""

    def __init__(self, node_type: NodeType) -> None:
        self.type = node_type
        self.parents = NodeSet(self, False)
        self.children = NodeSet(self, True)
        self.handles = 0

    def _check_link(self, other: Node) -> None:
        if other.type == self.type:
            raise TypeError("elements may only be linked to operations and vice versa")

    def is_element(self) -> bool:
        return self.type == NodeType.ELEMENT

    def is_operation(self) -> bool:
        return self.type == NodeType.OPERATION

    def is_root(self) -> bool:
        return not self.parents

    def is_leaf(self) -> bool:
        return not self.children

    def forward(self, descending: bool) -> NodeSet:
        """Children when descending, parents otherwise."""
        return self.children if descending else self.parents

    def back(self, descending: bool) -> NodeSet:
        """Parents when descending, children otherwise."""
        return self.forward(not descending)


class Element(Node):
    """A hexahedron: eight vertex ids and the id of its polyhedron in the mesh."""

    def __init__(self, vids: Iterable[int] | None = None, pid: int = NO_ID) -> None:
        super().__init__(NodeType.ELEMENT)
        self.vids: list[int] = list(vids) if vids is not None else [NO_ID] * 8
        if len(self.vids) != 8:
            raise ValueError("an element has exactly 8 vertex ids")
        self.pid = pid


class Operation(Node):
    """An operation turning parent elements into child elements."""

    def __init__(self, primitive: Primitive) -> None:
        super().__init__(NodeType.OPERATION)
        self.primitive = primitive


class Delete(Operation):
    """Removal of an element."""

    def __init__(self) -> None:
        super().__init__(Primitive.DELETE)


class Extrude(Operation):
    """Extrusion of a new element from one, two or three faces."""

    def __init__(
        self,
        fis: Iterable[int] = (),
        first_vi: int = 0,
        clockwise: bool = False,
        source: ExtrudeSource = ExtrudeSource.FACE,
    ) -> None:
        super().__init__(Primitive.EXTRUDE)
        self.fis: list[int] = list(fis)
        self.first_vi = first_vi
        self.clockwise = clockwise
        self.source = source

    @staticmethod
    def source_by_parent_count(parent_count: int) -> ExtrudeSource:
        """Map the number of parent elements to the extrusion source."""
        try:
            return (ExtrudeSource.FACE, ExtrudeSource.EDGE, ExtrudeSource.VERTEX)[parent_count - 1] if parent_count >= 1 else _bad_count(parent_count)
        except IndexError:
            return _bad_count(parent_count)


def _bad_count(parent_count: int) -> ExtrudeSource:
    raise ValueError(f"an extrusion has 1 to 3 parents, not {parent_count}")


class Refine(Operation):
    """Refinement of an element according to a scheme."""

    def __init__(
        self,
        scheme: int = 0,
        forward_fi: int = 0,
        first_vi: int = 0,
        surf_vids: Iterable[int] = (),
    ) -> None:
        super().__init__(Primitive.REFINE)
        self.scheme = scheme
        self.forward_fi = forward_fi
        self.first_vi = first_vi
        self.surf_vids: list[int] = list(surf_vids)