# app/game.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

import chess

from qcc.board import SquareLike, color_name, parse_square, random_position
from qcc.rules import Rules
from quantum.config import Config
from quantum.correlation import (
    count_piece_copies_at_location,
    identify_piece_copies,
    superposed_piece_count,
)
from quantum.moves import (
    apply_move,
    apply_split,
    flip_phase,
    measure,
    merge_most_likely,
    playable_branch_count,
    quantum_legal_destinations,
)
from quantum.state import Phase, QuantumCheckInfo, QuantumState
from quantum.views import (
    PieceShare,
    aggregate,
    detect_quantum_check,
    is_eliminated,
    is_square_superposed,
    most_likely_board,
    square_distribution,
)

logger = logging.getLogger(__name__)


@dataclass
class GameStatus:
    in_check: bool = False
    winner: Optional[str] = None  # 'w' | 'b'
    reason: Optional[str] = None  # 'checkmate' | 'elimination'


class QuantumGame:
    """
    Headless host around the quantum engine.

    Keeps the current QuantumState, the seeded RNG used for measurement and a
    human-readable move_log, and performs the rule checks the engine leaves
    to its caller (split limits, phase-flip copy count).
    """

    def __init__(
        self,
        fen: Optional[str] = None,
        *,
        seed: Optional[int] = None,
        max_branches: int = Config.MAX_BRANCHES,
        random_start: bool = False,
    ):
        self.rng = random.Random(seed)
        self.max_branches = int(max_branches)
        self.random_start = random_start
        self.move_log: List[str] = []
        self.state: QuantumState
        self.reset(fen)

    def reset(self, fen: Optional[str] = None) -> None:
        if fen is None and self.random_start:
            fen = random_position(self.rng)
        self.state = QuantumState.initial(fen)
        self.move_log = []
        logger.info("new game: %s", self.state.branches[0].board.fen())

    # API buat UI / host
    @property
    def turn(self) -> chess.Color:
        # Pake cabang paling mungkin buat turn
        return Rules.side_to_move(most_likely_board(self.state))

    @property
    def turn_color(self) -> str:
        return color_name(self.turn)

    def squares(self) -> Dict[chess.Square, Dict[chess.Piece, PieceShare]]:
        return aggregate(self.state)

    def legal_destinations(self, square: SquareLike) -> List[chess.Square]:
        return quantum_legal_destinations(self.state, parse_square(square))

    def _piece_at(self, square: chess.Square) -> Optional[chess.Piece]:
        dist = {p: v for p, v in square_distribution(self.state, square).items() if p is not None}
        if not dist:
            return None
        return max(dist, key=dist.get)

    def _own_piece_at(self, square: chess.Square) -> Optional[chess.Piece]:
        piece = self._piece_at(square)
        if piece is None or piece.color != self.turn:
            return None
        return piece

    # Moves
    def move(self, from_sq: SquareLike, to_sq: SquareLike) -> str:
        src, dst = parse_square(from_sq), parse_square(to_sq)
        new_state = apply_move(self.state, src, dst)
        if new_state is None:
            return "illegal"

        # collapse = realities where the move was impossible, not merges
        playable = playable_branch_count(self.state, src, dst)
        if playable < len(self.state):
            self.move_log.append(f"COLLAPSE {len(self.state)} -> {len(new_state)} realities")
        self.state = new_state
        self.move_log.append(f"{chess.square_name(src)}->{chess.square_name(dst)}")
        return "ok"

    def can_split(self, square: SquareLike) -> bool:
        sq = parse_square(square)
        piece = self._own_piece_at(sq)
        if piece is None or piece.piece_type == chess.PAWN:
            return False

        branches = self.state.branches
        if count_piece_copies_at_location(branches, sq) > Config.MAX_OCCUPANTS_BEFORE_SPLIT:
            return False
        if identify_piece_copies(branches, sq) >= Config.MAX_PIECE_COPIES:
            return False
        if not is_square_superposed(self.state, sq):
            # splitting a classical piece creates a new superposed piece
            if superposed_piece_count(branches, piece.color) >= Config.MAX_QUANTUM_PIECES_PER_SIDE:
                return False
        return True

    def split(
        self,
        from_sq: SquareLike,
        target1: SquareLike,
        target2: SquareLike,
        phases: Optional[Dict[chess.Square, Phase]] = None,
    ) -> bool:
        src = parse_square(from_sq)
        t1, t2 = parse_square(target1), parse_square(target2)
        if t1 == t2 or src in (t1, t2) or not self.can_split(src):
            return False

        before = len(self.state)
        new_state = apply_split(
            self.state, src, t1, t2,
            phases=phases, rng=self.rng, max_branches=self.max_branches,
        )
        if new_state is None:
            return False

        if before * 2 > self.max_branches:
            self.move_log.append("FORCED COLLAPSE")
        self.state = new_state
        self.move_log.append(
            f"SPLIT {chess.square_name(src)}->{chess.square_name(t1)} | {chess.square_name(t2)}"
        )
        return True

    def can_toggle_phase(self, square: SquareLike) -> bool:
        sq = parse_square(square)
        if self._own_piece_at(sq) is None:
            return False
        return identify_piece_copies(self.state.branches, sq) == Config.MAX_PIECE_COPIES

    def toggle_phase(self, square: SquareLike) -> bool:
        sq = parse_square(square)
        if not self.can_toggle_phase(sq):
            return False
        piece = self._piece_at(sq)
        self.state = flip_phase(self.state, sq, piece)
        self.move_log.append(f"PHASE {piece.symbol()}@{chess.square_name(sq)}")
        return True

    # Measurement
    def can_merge(self, square: SquareLike) -> bool:
        sq = parse_square(square)
        return self._own_piece_at(sq) is not None and is_square_superposed(self.state, sq)

    def merge(self) -> bool:
        if len(self.state) <= 1:
            return False
        self.state = merge_most_likely(self.state)
        self.move_log.append("MERGE")
        return True

    def measure(self) -> chess.Board:
        self.state = measure(self.state, self.rng)
        board = self.state.branches[0].board.copy(stack=False)
        self.move_log.append(f"MEASURE {board.fen()}")
        logger.info("measured: %s", board.fen())
        return board

    # Status
    def quantum_check(self) -> Optional[QuantumCheckInfo]:
        return detect_quantum_check(self.state, self.turn)

    def status(self) -> GameStatus:
        for color in (chess.WHITE, chess.BLACK):
            if is_eliminated(self.state, color):
                return GameStatus(winner=color_name(not color), reason="elimination")

        board = most_likely_board(self.state)
        in_check = Rules.is_in_check(board)
        if in_check and Rules.is_game_over(board):
            return GameStatus(in_check=True, winner=color_name(not board.turn), reason="checkmate")
        return GameStatus(in_check=in_check)
