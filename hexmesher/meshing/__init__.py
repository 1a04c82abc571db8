"""Hexahedral and polygon meshes, mesh utilities and the mesher that ties them to the graph."""