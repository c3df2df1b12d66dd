# quantum/correlation.py
"""
Copy counting and entanglement detection.

Everything here is derived from branch-index sets: for every (square, piece)
seen anywhere in the ensemble we record the branches in which it holds, and
compare those sets. Nothing is tracked incrementally.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

import chess

from .config import Config
from .state import Branch, Correlation, EntangledPair, PieceLocation

LocationIndex = List[Tuple[PieceLocation, List[int]]]


def piece_locations(branches: Sequence[Branch]) -> LocationIndex:
    """
    Every distinct (square, piece) in discovery order with the indices of the
    branches holding it. Squares are scanned a8..h8, a7..h7, ..., a1..h1.
    """
    index: Dict[PieceLocation, List[int]] = {}
    for i, br in enumerate(branches):
        for sq in chess.SQUARES_180:
            piece = br.board.piece_at(sq)
            if piece is None:
                continue
            index.setdefault(PieceLocation(sq, piece), []).append(i)
    return list(index.items())


def count_piece_copies_at_location(branches: Sequence[Branch], square: chess.Square) -> int:
    """Number of branches with any piece on `square`."""
    return sum(1 for br in branches if br.board.piece_at(square) is not None)


def _copy_cluster(locations: LocationIndex, source: PieceLocation, source_idx: Set[int]) -> FrozenSet[PieceLocation]:
    # same piece identity, disjoint realities
    return frozenset(
        loc
        for loc, idx in locations
        if loc.piece == source.piece and (loc == source or source_idx.isdisjoint(idx))
    )


def identify_piece_copies(branches: Sequence[Branch], square: chess.Square) -> int:
    """
    How many mutually exclusive copies exist of the piece standing on
    `square`: the location itself plus every location of the same piece whose
    branch set does not overlap it. At least 1.
    """
    locations = piece_locations(branches)
    source: Optional[Tuple[PieceLocation, List[int]]] = next(
        ((loc, idx) for loc, idx in locations if loc.square == square), None
    )
    if source is None:
        return 1

    loc, idx = source
    return max(1, len(_copy_cluster(locations, loc, set(idx))))


def superposed_piece_count(branches: Sequence[Branch], color: chess.Color) -> int:
    """
    Distinct superposed pieces of `color`. Locations that hold in every
    branch are classical. For each piece identity, the number of superposed
    pieces is the most non-classical locations any single branch holds at
    once: copies of one piece never share a branch.
    """
    total = len(branches)
    per_branch: Dict[chess.Piece, List[int]] = {}
    for loc, idx in piece_locations(branches):
        if loc.piece.color != color or len(idx) >= total:
            continue
        counts = per_branch.setdefault(loc.piece, [0] * total)
        for i in idx:
            counts[i] += 1
    return sum(max(counts) for counts in per_branch.values())


def detect_entanglements(
    branches: Sequence[Branch],
    amplitudes: Optional[Sequence[float]] = None,
) -> List[EntangledPair]:
    """
    Pairs of piece locations whose existence is correlated across branches.

    - positive: they mostly appear together (Jaccard > POSITIVE_JACCARD) but
      not in literally every branch;
    - negative: they never appear together and each is a sizeable share of
      the ensemble.

    `amplitudes` is accepted for interface parity; correlation is measured
    on branch membership only. Truncated to MAX_ENTANGLEMENTS in discovery
    order.
    """
    total = len(branches)
    if total <= 1:
        return []

    locations = [(loc, set(idx)) for loc, idx in piece_locations(branches)]
    pairs: List[EntangledPair] = []

    for i, (loc1, idx1) in enumerate(locations):
        for loc2, idx2 in locations[i + 1:]:
            inter = len(idx1 & idx2)
            union = len(idx1 | idx2)

            if inter > 0:
                if inter / union > Config.POSITIVE_JACCARD and inter < total:
                    pairs.append(EntangledPair(loc1, loc2, Correlation.POSITIVE))
                continue

            ratio1 = len(idx1) / total
            ratio2 = len(idx2) / total
            if (
                ratio1 > Config.NEGATIVE_MIN_COVERAGE
                and ratio2 > Config.NEGATIVE_MIN_COVERAGE
                and ratio1 + ratio2 > Config.NEGATIVE_MIN_COMBINED
            ):
                pairs.append(EntangledPair(loc1, loc2, Correlation.NEGATIVE))

    return pairs[: Config.MAX_ENTANGLEMENTS]
