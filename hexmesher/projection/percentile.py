"""Limiting how far vertices move in one step."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def percentile_advance(from_verts: Sequence, to_verts: Sequence, percentile: float) -> list[np.ndarray]:
    """Move from ``from_verts`` towards ``to_verts``, capping each displacement.

    The cap is the displacement length at the given percentile of all lengths.
    """
    starts = [np.asarray(v, dtype=float) for v in from_verts]
    offsets = [np.asarray(t, dtype=float) - s for s, t in zip(starts, to_verts)]
    lengths = sorted(float(np.linalg.norm(o)) for o in offsets)
    index = math.floor((len(lengths) - 1) * percentile + 0.5) if lengths else -1
    max_length = lengths[index] if 0 <= index < len(lengths) else math.inf
    out = []
    for start, offset in zip(starts, offsets):
        norm = float(np.linalg.norm(offset))
        if norm > max_length:
            offset = offset / norm * max_length
        out.append(start + offset)
    return out