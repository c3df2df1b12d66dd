# quantum/views.py
"""
Read-only projections of a QuantumState for a host / renderer.

Every function here flattens the ensemble by weighting each branch with
amp^2; none of them change the state.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import chess

from .config import Config
from .correlation import piece_locations
from .state import EntangledPair, Interference, QuantumCheckInfo, QuantumState

_TAG_RANK = {
    Interference.NONE: 0,
    Interference.DESTRUCTIVE: 1,
    Interference.CONSTRUCTIVE: 2,
}


@dataclass
class PieceShare:
    probability: float
    interference: Interference = Interference.NONE


def most_likely_board(state: QuantumState) -> chess.Board:
    return max(state.branches, key=lambda br: br.amp * br.amp).board


def square_distribution(state: QuantumState, square: chess.Square) -> Dict[Optional[chess.Piece], float]:
    """
    Returns {piece or None: probability} for one square. None = empty.
    """
    dist: Dict[Optional[chess.Piece], float] = defaultdict(float)
    for br in state.branches:
        dist[br.board.piece_at(square)] += br.amp * br.amp
    return dict(dist)


def occupancy(state: QuantumState) -> Tuple[List[float], Dict[chess.Color, List[float]]]:
    """
    Per-square probability of being occupied, overall and per color.
    """
    occupied = [0.0] * 64
    by_color = {chess.WHITE: [0.0] * 64, chess.BLACK: [0.0] * 64}
    for br in state.branches:
        p = br.amp * br.amp
        for sq, piece in br.board.piece_map().items():
            occupied[sq] += p
            by_color[piece.color][sq] += p
    return occupied, by_color


def aggregate(state: QuantumState) -> Dict[chess.Square, Dict[chess.Piece, PieceShare]]:
    """
    square -> {piece: PieceShare}. When a square/piece pair is fed by several
    branches with different tags, constructive wins over destructive, and
    destructive over none.
    """
    out: Dict[chess.Square, Dict[chess.Piece, PieceShare]] = {}
    for br, tag in zip(state.branches, state.interference):
        p = br.amp * br.amp
        for sq, piece in br.board.piece_map().items():
            share = out.setdefault(sq, {}).setdefault(piece, PieceShare(0.0))
            share.probability += p
            if _TAG_RANK[tag] > _TAG_RANK[share.interference]:
                share.interference = tag
    return out


def entanglements(state: QuantumState) -> List[EntangledPair]:
    return list(state.entanglements)


def piece_probability(state: QuantumState, piece: chess.Piece) -> float:
    """Total probability mass of `piece` over all squares."""
    total = 0.0
    for br in state.branches:
        n = len(br.board.pieces(piece.piece_type, piece.color))
        total += n * br.amp * br.amp
    return total


def king_survival_probability(state: QuantumState, color: chess.Color) -> float:
    return sum(br.amp * br.amp for br in state.branches if br.board.king(color) is not None)


def is_eliminated(state: QuantumState, color: chess.Color) -> bool:
    return king_survival_probability(state, color) <= Config.ELIMINATION_PROBABILITY


def is_piece_in_superposition(state: QuantumState, piece: chess.Piece) -> bool:
    if len(state) <= 1:
        return False
    p = piece_probability(state, piece)
    return Config.EMPTY_PROBABILITY < p < Config.CERTAIN_PROBABILITY


def is_square_superposed(state: QuantumState, square: chess.Square) -> bool:
    # piece on this square exists only in some realities
    dist = square_distribution(state, square)
    return any(
        piece is not None and Config.EMPTY_PROBABILITY < p < Config.CERTAIN_PROBABILITY
        for piece, p in dist.items()
    )


def detect_quantum_check(state: QuantumState, color: chess.Color) -> Optional[QuantumCheckInfo]:
    """
    A superposed enemy piece attacking a king that is almost surely there.

    The king's most probable square must carry more than
    QUANTUM_CHECK_KING_PROBABILITY; the attacker must exist in some but not
    all branches and attack that square in at least one of them.
    """
    king = chess.Piece(chess.KING, color)
    king_probs: Dict[chess.Square, float] = defaultdict(float)
    for br in state.branches:
        sq = br.board.king(color)
        if sq is not None:
            king_probs[sq] += br.amp * br.amp
    if not king_probs:
        return None

    king_sq, king_p = max(king_probs.items(), key=lambda kv: kv[1])
    if king_p <= Config.QUANTUM_CHECK_KING_PROBABILITY:
        return None

    total = len(state)
    for loc, idx in piece_locations(state.branches):
        if loc.piece.color == color or len(idx) >= total:
            continue

        threat = 0.0
        for i in idx:
            board = state.branches[i].board
            if board.piece_at(king_sq) == king and king_sq in board.attacks(loc.square):
                threat += state.branches[i].amp ** 2
        if threat > 0.0:
            return QuantumCheckInfo(
                king_square=king_sq,
                king_color=color,
                king_probability=king_p,
                attacker_square=loc.square,
                attacker=loc.piece,
                threat_probability=threat,
            )
    return None
