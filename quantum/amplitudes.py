# quantum/amplitudes.py
from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence

from .config import Config


def probability(amp: float) -> float:
    return amp * amp


def normalize(amps: Sequence[float], *, signed: bool = True) -> List[float]:
    """
    Scale amplitudes so that sum(a^2) == 1.

    If everything vanished (sum of squares below NORMALIZE_EPS) fall back to
    a uniform 1/sqrt(n) instead of dividing by zero. signed=False returns
    magnitudes only, for display.
    """
    n = len(amps)
    if n == 0:
        return []

    total = sum(probability(a) for a in amps)
    if total < Config.NORMALIZE_EPS:
        return [1.0 / math.sqrt(n)] * n

    scale = 1.0 / math.sqrt(total)
    out = [a * scale for a in amps]
    return out if signed else [abs(a) for a in out]


def pick_collapse_index(amps: Sequence[float], rng: Optional[random.Random] = None) -> int:
    """
    Weighted random branch index, P(i) = a_i^2.

    Falls back to 0 when the cumulative sum never reaches the draw
    (floating error on a slightly unnormalized vector).
    """
    draw = rng.random() if rng is not None else random.random()
    cum = 0.0
    for i, a in enumerate(amps):
        cum += probability(a)
        if cum >= draw:
            return i
    return 0
