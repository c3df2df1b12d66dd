# qcc/rules.py
"""
Classical rules oracle using python-chess.

The quantum engine asks this oracle once per branch and never reimplements
classical legality (check rules, castling, en passant, promotion).
"""
from __future__ import annotations

from typing import List, Optional

import chess


class Rules:
    @staticmethod
    def apply_move(
        board: chess.Board,
        from_sq: chess.Square,
        to_sq: chess.Square,
        promotion: Optional[chess.PieceType] = None,
    ) -> Optional[chess.Board]:
        """
        Return a copy of `board` with from->to played, or None if illegal.
        find_move() promotes to queen by default for backrank pawn moves.
        """
        try:
            mv = board.find_move(from_sq, to_sq, promotion=promotion)
        except ValueError:
            # chess.IllegalMoveError subclasses ValueError
            return None

        nb = board.copy(stack=False)
        nb.push(mv)
        return nb

    @staticmethod
    def is_in_check(board: chess.Board) -> bool:
        return board.is_check()

    @staticmethod
    def is_game_over(board: chess.Board) -> bool:
        return board.is_game_over()

    @staticmethod
    def side_to_move(board: chess.Board) -> chess.Color:
        return board.turn

    @staticmethod
    def legal_destinations(board: chess.Board, square: chess.Square) -> List[chess.Square]:
        p = board.piece_at(square)
        if p is None or p.color != board.turn:
            return []
        return sorted({mv.to_square for mv in board.legal_moves if mv.from_square == square})

    @staticmethod
    def serialize(board: chess.Board) -> str:
        return board.fen()

    @staticmethod
    def deserialize(fen: str) -> chess.Board:
        return chess.Board(fen)

    @staticmethod
    def piece_at(board: chess.Board, square: chess.Square) -> Optional[chess.Piece]:
        return board.piece_at(square)
