import random

import chess
import pytest

from qcc.board import BALANCED_POSITIONS, board_from_fen, color_name, parse_square, random_position
from qcc.rules import Rules

MATED = "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1"


def test_apply_move_returns_new_board():
    board = chess.Board()
    nb = Rules.apply_move(board, chess.E2, chess.E4)

    assert nb is not board
    assert board.fen() == chess.STARTING_FEN
    assert nb.piece_at(chess.E4) == chess.Piece(chess.PAWN, chess.WHITE)
    assert Rules.side_to_move(nb) == chess.BLACK


def test_apply_move_illegal_returns_none():
    board = chess.Board()
    assert Rules.apply_move(board, chess.E2, chess.E5) is None
    assert Rules.apply_move(board, chess.E4, chess.E5) is None


def test_promotion_defaults_to_queen():
    board = chess.Board("7k/P7/8/8/8/8/8/7K w - - 0 1")
    assert Rules.apply_move(board, chess.A7, chess.A8).piece_at(chess.A8) == chess.Piece(chess.QUEEN, chess.WHITE)

    knight = Rules.apply_move(board, chess.A7, chess.A8, promotion=chess.KNIGHT)
    assert knight.piece_at(chess.A8) == chess.Piece(chess.KNIGHT, chess.WHITE)


def test_legal_destinations():
    board = chess.Board()
    assert Rules.legal_destinations(board, chess.E2) == [chess.E3, chess.E4]
    assert Rules.legal_destinations(board, chess.G1) == [chess.F3, chess.H3]
    # not the side to move / empty square
    assert Rules.legal_destinations(board, chess.E7) == []
    assert Rules.legal_destinations(board, chess.E4) == []


def test_check_and_game_over():
    start = chess.Board()
    assert not Rules.is_in_check(start)
    assert not Rules.is_game_over(start)

    mated = Rules.deserialize(MATED)
    assert Rules.is_in_check(mated)
    assert Rules.is_game_over(mated)


def test_serialize_round_trip():
    fen = "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"
    board = Rules.deserialize(fen)
    assert Rules.serialize(board) == fen
    assert Rules.piece_at(board, chess.E2) == chess.Piece(chess.PAWN, chess.WHITE)
    assert Rules.piece_at(board, chess.E4) is None


def test_parse_square():
    assert parse_square("e4") == chess.E4
    assert parse_square(chess.H8) == chess.H8
    for bad in ("z9", 64, -1, None):
        with pytest.raises(ValueError):
            parse_square(bad)


def test_board_helpers():
    assert board_from_fen().fen() == chess.STARTING_FEN
    assert board_from_fen(MATED).fen() == MATED
    assert random_position(random.Random(3)) in BALANCED_POSITIONS
    assert color_name(chess.WHITE) == "w"
    assert color_name(chess.BLACK) == "b"


def test_balanced_positions_are_valid():
    for fen in BALANCED_POSITIONS:
        board = chess.Board(fen)
        assert board.is_valid()
        assert board.turn == chess.WHITE
