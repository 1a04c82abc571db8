"""A modelling session: the mesh, the graph root and the edit history."""

from __future__ import annotations

from hexmesher.commander import Commander
from hexmesher.dag import Element
from hexmesher.meshing.mesher import Mesher


class Project:
    """Ties together a mesher, the root element of the graph and a commander."""

    def __init__(self) -> None:
        self._mesher = Mesher()
        self._commander = Commander(self)
        self.root_element: Element | None = None

    def commander(self) -> Commander:
        return self._commander

    def root(self) -> Element | None:
        return self.root_element

    def mesher(self) -> Mesher:
        return self._mesher