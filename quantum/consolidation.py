# quantum/consolidation.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import chess

from qcc.rules import Rules

from .amplitudes import normalize, probability
from .config import Config
from .correlation import detect_entanglements
from .state import Branch, Interference, QuantumState

logger = logging.getLogger(__name__)

RawBranch = Tuple[chess.Board, float]


def classify_interference(merged_amp: float, naive_prob: float) -> Interference:
    """
    Compare the real probability of a merged group with the phase-blind sum
    of its members' probabilities.
    """
    real = probability(merged_amp)
    if real > naive_prob * (1.0 + Config.INTERFERENCE_MARGIN):
        return Interference.CONSTRUCTIVE
    if real < naive_prob * (1.0 - Config.INTERFERENCE_MARGIN):
        return Interference.DESTRUCTIVE
    return Interference.NONE


def consolidate(raw: Sequence[RawBranch]) -> Optional[QuantumState]:
    """
    Merge branches with identical positions and renormalize.

    Signed amplitudes of a group are summed, so opposite phases cancel. A
    group whose merged amplitude is below CANCEL_EPS is dropped. Returns None
    if nothing survives.
    """
    amp_by_key: Dict[str, float] = {}
    naive_by_key: Dict[str, float] = {}
    keep_board: Dict[str, chess.Board] = {}

    for board, amp in raw:
        key = Rules.serialize(board)
        if key not in keep_board:
            keep_board[key] = board
            amp_by_key[key] = 0.0
            naive_by_key[key] = 0.0
        amp_by_key[key] += amp
        naive_by_key[key] += probability(amp)

    boards: List[chess.Board] = []
    amps: List[float] = []
    tags: List[Interference] = []
    for key, amp in amp_by_key.items():
        if abs(amp) < Config.CANCEL_EPS:
            logger.debug("branch cancelled by interference: %s", key)
            continue
        boards.append(keep_board[key])
        amps.append(amp)
        tags.append(classify_interference(amp, naive_by_key[key]))

    if not boards:
        return None

    # a lone branch carries no relative phase
    amps = normalize(amps) if len(amps) > 1 else [1.0]
    branches = tuple(Branch(b, a) for b, a in zip(boards, amps))
    logger.debug("consolidated %d raw branches into %d", len(raw), len(branches))

    return QuantumState(
        branches=branches,
        interference=tuple(tags),
        entanglements=tuple(detect_entanglements(branches, amps)),
    )
