"""Hexahedral mesh modelling with an operation graph, undoable actions and surface projection."""

__version__ = "0.1.0"