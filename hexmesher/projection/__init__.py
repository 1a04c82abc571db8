"""Projection of a hexahedral mesh surface onto a target surface, with its supporting steps."""