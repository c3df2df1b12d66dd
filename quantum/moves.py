# quantum/moves.py
"""
Quantum move engine.

- Classical legality per branch comes from the python-chess oracle (Rules).
- Ghosting: when the oracle rejects a move only because a piece stands in
  the way, and that piece is uncertain across the ensemble, the move is
  played by hand in that branch.
- Every operation ends with consolidation: identical positions merge, signed
  amplitudes interfere, the result is renormalized.

Boards inside a QuantumState are never mutated; anything that changes a
position works on a copy.
"""
from __future__ import annotations

import logging
import math
import random
from typing import Dict, List, Optional, Sequence

import chess  # python-chess

from qcc.rules import Rules

from .amplitudes import pick_collapse_index
from .config import Config
from .consolidation import RawBranch, consolidate
from .state import Phase, PhaseSplitConfig, QuantumState
from .views import most_likely_board, occupancy, square_distribution

logger = logging.getLogger(__name__)

INV_SQRT2 = 1.0 / math.sqrt(2.0)

SLIDERS = (chess.BISHOP, chess.ROOK, chess.QUEEN)
_DIAGONALS = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
_STRAIGHTS = [(1, 0), (-1, 0), (0, 1), (0, -1)]


def _directions(piece_type: chess.PieceType):
    if piece_type == chess.BISHOP:
        return _DIAGONALS
    if piece_type == chess.ROOK:
        return _STRAIGHTS
    return _DIAGONALS + _STRAIGHTS


def _pawn_step(color: chess.Color) -> int:
    return 8 if color == chess.WHITE else -8


def _pawn_start_rank(color: chess.Color) -> int:
    return 1 if color == chess.WHITE else 6


def _geometry_ok(piece: chess.Piece, from_sq: chess.Square, to_sq: chess.Square) -> bool:
    """
    Could `piece` reach to_sq from from_sq on an empty board?
    Pawns: forward moves only, diagonals are never ghosted.
    """
    if piece.piece_type == chess.PAWN:
        step = _pawn_step(piece.color)
        if to_sq == from_sq + step:
            return True
        return chess.square_rank(from_sq) == _pawn_start_rank(piece.color) and to_sq == from_sq + 2 * step

    empty = chess.Board(None)
    empty.set_piece_at(from_sq, piece)
    return to_sq in empty.attacks(from_sq)


def _ghost_move(
    board: chess.Board,
    from_sq: chess.Square,
    to_sq: chess.Square,
    occupied: Sequence[float],
    promotion: Optional[chess.PieceType] = None,
) -> Optional[chess.Board]:
    """
    Play from->to by hand in a branch where the oracle refused it, if the
    refusal comes from uncertain blockers only. Returns None otherwise.
    """
    piece = board.piece_at(from_sq)
    if piece is None or piece.color != board.turn:
        return None
    if not _geometry_ok(piece, from_sq, to_sq):
        return None

    target = board.piece_at(to_sq)
    if target is not None and target.color == piece.color:
        # own piece in this reality -> branch can't host the move
        return None

    blockers = [sq for sq in chess.SquareSet(chess.between(from_sq, to_sq)) if board.piece_at(sq) is not None]
    if piece.piece_type == chess.PAWN and target is not None:
        blockers.append(to_sq)
    if not blockers:
        # refusal is not about blockers (check, castling, ...)
        return None
    if any(occupied[sq] >= Config.CERTAIN_PROBABILITY for sq in blockers):
        return None

    nb = board.copy(stack=False)
    captured = nb.remove_piece_at(to_sq) is not None
    nb.remove_piece_at(from_sq)

    placed = piece
    if piece.piece_type == chess.PAWN and chess.square_rank(to_sq) in (0, 7):
        placed = chess.Piece(promotion or chess.QUEEN, piece.color)
    nb.set_piece_at(to_sq, placed)

    nb.castling_rights &= ~chess.BB_SQUARES[from_sq] & ~chess.BB_SQUARES[to_sq]
    if piece.piece_type == chess.KING:
        nb.castling_rights &= ~(chess.BB_RANK_1 if piece.color == chess.WHITE else chess.BB_RANK_8)

    double_step = piece.piece_type == chess.PAWN and abs(to_sq - from_sq) == 16
    nb.ep_square = (from_sq + to_sq) // 2 if double_step else None
    nb.halfmove_clock = 0 if (captured or piece.piece_type == chess.PAWN) else nb.halfmove_clock + 1
    if piece.color == chess.BLACK:
        nb.fullmove_number += 1
    nb.turn = not piece.color

    if nb.was_into_check():
        return None
    return nb


def _advance(
    board: chess.Board,
    from_sq: chess.Square,
    to_sq: chess.Square,
    occupied: Sequence[float],
    promotion: Optional[chess.PieceType] = None,
) -> Optional[chess.Board]:
    moved = Rules.apply_move(board, from_sq, to_sq, promotion)
    if moved is not None:
        return moved
    return _ghost_move(board, from_sq, to_sq, occupied, promotion)


def _play_everywhere(
    state: QuantumState,
    from_sq: chess.Square,
    to_sq: chess.Square,
    promotion: Optional[chess.PieceType] = None,
) -> List[RawBranch]:
    occupied, _ = occupancy(state)
    raw: List[RawBranch] = []
    for br in state.branches:
        nb = _advance(br.board, from_sq, to_sq, occupied, promotion)
        if nb is not None:
            raw.append((nb, br.amp))
    return raw


def playable_branch_count(
    state: QuantumState,
    from_sq: chess.Square,
    to_sq: chess.Square,
    *,
    promotion: Optional[chess.PieceType] = None,
) -> int:
    """Number of branches that can host from->to, before any merging."""
    return len(_play_everywhere(state, from_sq, to_sq, promotion))


def apply_move(
    state: QuantumState,
    from_sq: chess.Square,
    to_sq: chess.Square,
    *,
    promotion: Optional[chess.PieceType] = None,
) -> Optional[QuantumState]:
    """
    Play from->to in every branch.

    Branches where the move is impossible (classically and by ghosting) are
    dropped. Returns None if the move is illegal everywhere; the input state
    is left untouched either way.
    """
    raw = _play_everywhere(state, from_sq, to_sq, promotion)
    if not raw:
        logger.debug("move %s%s illegal in every branch",
                     chess.square_name(from_sq), chess.square_name(to_sq))
        return None

    if len(raw) < len(state):
        logger.debug("move %s%s dropped %d of %d branches",
                     chess.square_name(from_sq), chess.square_name(to_sq),
                     len(state) - len(raw), len(state))
    return consolidate(raw)


def apply_split(
    state: QuantumState,
    from_sq: chess.Square,
    target1: chess.Square,
    target2: chess.Square,
    *,
    phases: Optional[Dict[chess.Square, Phase]] = None,
    rng: Optional[random.Random] = None,
    max_branches: int = Config.MAX_BRANCHES,
) -> Optional[QuantumState]:
    """
    Split move: the piece goes to target1 with amplitude a/sqrt(2) and to
    target2 with -a/sqrt(2). The minus sign is the relative phase that lets
    the two children cancel if they ever meet again. `phases` overrides the
    sign per target.

    - If doubling would exceed max_branches the state is measured first.
    - A branch where neither sub-move works is carried through unchanged
      (a null move keeps the side to move in step with its siblings).
    - Returns None if no branch produced a child.
    """
    phases = phases or {}
    s1 = phases.get(target1, Phase.POSITIVE).sign
    s2 = phases.get(target2, Phase.NEGATIVE).sign

    work = state
    if len(work) * 2 > max_branches:
        logger.debug("split would make %d branches (cap %d), forcing collapse", len(work) * 2, max_branches)
        work = measure(work, rng)

    occupied, _ = occupancy(work)

    raw: List[RawBranch] = []
    children = 0
    for br in work.branches:
        nb_a = _advance(br.board, from_sq, target1, occupied)
        nb_b = _advance(br.board, from_sq, target2, occupied)

        if nb_a is None and nb_b is None:
            carried = br.board.copy(stack=False)
            carried.push(chess.Move.null())
            raw.append((carried, br.amp))
            continue

        if nb_a is not None:
            raw.append((nb_a, s1 * br.amp * INV_SQRT2))
            children += 1
        if nb_b is not None:
            raw.append((nb_b, s2 * br.amp * INV_SQRT2))
            children += 1

    if children == 0:
        logger.debug("split from %s produced no children", chess.square_name(from_sq))
        return None
    return consolidate(raw)


def split_from_config(
    state: QuantumState,
    config: PhaseSplitConfig,
    *,
    rng: Optional[random.Random] = None,
    max_branches: int = Config.MAX_BRANCHES,
) -> Optional[QuantumState]:
    phases = {
        config.target1: config.phase(config.target1),
        config.target2: config.phase(config.target2),
    }
    return apply_split(
        state, config.source, config.target1, config.target2,
        phases=phases, rng=rng, max_branches=max_branches,
    )


def flip_phase(state: QuantumState, square: chess.Square, piece: chess.Piece) -> QuantumState:
    """
    Negate the amplitude of every branch where `piece` stands on `square`.

    The caller decides whether the piece may be flipped (3 copies); this
    function only keeps the state normalized.
    """
    raw = [
        (br.board, -br.amp if br.board.piece_at(square) == piece else br.amp)
        for br in state.branches
    ]
    flipped = consolidate(raw)
    return flipped if flipped is not None else state


def measure(state: QuantumState, rng: Optional[random.Random] = None) -> QuantumState:
    """Collapse to one branch drawn with probability amp^2."""
    idx = pick_collapse_index(state.amplitudes, rng)
    logger.debug("measured branch %d of %d", idx, len(state))
    return QuantumState.single(state.branches[idx].board)


def merge_most_likely(state: QuantumState) -> QuantumState:
    """Collapse to the most probable branch, no randomness."""
    return QuantumState.single(most_likely_board(state))


def _quantum_geometry(
    piece: chess.Piece,
    square: chess.Square,
    occupied: Sequence[float],
    own: Sequence[float],
) -> List[chess.Square]:
    def certain(sq):
        return occupied[sq] >= Config.CERTAIN_PROBABILITY

    def landable(sq):
        # uncertain, or certainly an enemy (capture)
        return not certain(sq) or own[sq] <= Config.EMPTY_PROBABILITY

    file, rank = chess.square_file(square), chess.square_rank(square)
    out: List[chess.Square] = []

    if piece.piece_type == chess.PAWN:
        step = _pawn_step(piece.color)
        fwd = square + step
        if not 0 <= fwd < 64:
            return out
        if not certain(fwd):
            out.append(fwd)
            dbl = fwd + step
            if rank == _pawn_start_rank(piece.color) and not certain(dbl):
                out.append(dbl)
        for df in (-1, 1):
            f = file + df
            if not 0 <= f < 8:
                continue
            diag = chess.square(f, chess.square_rank(fwd))
            if occupied[diag] > Config.EMPTY_PROBABILITY and own[diag] < Config.CERTAIN_PROBABILITY:
                out.append(diag)
        return out

    if piece.piece_type in SLIDERS:
        for df, dr in _directions(piece.piece_type):
            f, r = file + df, rank + dr
            while 0 <= f < 8 and 0 <= r < 8:
                sq = chess.square(f, r)
                if certain(sq):
                    if landable(sq):
                        out.append(sq)
                    break
                out.append(sq)
                f += df
                r += dr
        return out

    attacks = chess.BB_KNIGHT_ATTACKS if piece.piece_type == chess.KNIGHT else chess.BB_KING_ATTACKS
    return [sq for sq in chess.SquareSet(attacks[square]) if landable(sq)]


def quantum_legal_destinations(state: QuantumState, square: chess.Square) -> List[chess.Square]:
    """
    Destinations for the most probable piece on `square`: the classical
    legal moves of every branch holding it, plus squares reachable when
    only uncertain occupants (aggregate probability below
    CERTAIN_PROBABILITY) block or get captured. A ghost square is kept only
    if some branch holding the piece can actually play it.
    """
    dist = {p: v for p, v in square_distribution(state, square).items() if p is not None}
    if not dist:
        return []
    piece = max(dist, key=dist.get)

    holding = [br.board for br in state.branches
               if br.board.piece_at(square) == piece and br.board.turn == piece.color]
    if not holding:
        return []

    dest = set()
    for board in holding:
        dest.update(Rules.legal_destinations(board, square))

    occupied, by_color = occupancy(state)
    for sq in _quantum_geometry(piece, square, occupied, by_color[piece.color]):
        if sq in dest:
            continue
        if any(_ghost_move(board, square, sq, occupied) is not None for board in holding):
            dest.add(sq)
    return sorted(dest)
