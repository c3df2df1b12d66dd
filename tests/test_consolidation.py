import math

import chess
import pytest

from quantum.consolidation import classify_interference, consolidate
from quantum.state import Correlation, Interference

from conftest import KING_AND_PAWN

KING_D1 = "4k3/8/8/8/8/8/4P3/3K4 b - - 1 1"
KING_F1 = "4k3/8/8/8/8/8/4P3/5K2 b - - 1 1"


def test_classify_interference_thresholds():
    assert classify_interference(1.0, 0.5) is Interference.CONSTRUCTIVE
    assert classify_interference(0.5, 0.5) is Interference.DESTRUCTIVE
    assert classify_interference(math.sqrt(0.5), 0.5) is Interference.NONE
    # within the 5% band
    assert classify_interference(math.sqrt(0.52), 0.5) is Interference.NONE


def test_same_sign_duplicates_merge_constructively():
    board = chess.Board(KING_AND_PAWN)
    state = consolidate([(board, 0.5), (board.copy(), 0.5)])

    assert len(state) == 1
    assert state.amplitudes == pytest.approx([1.0])
    assert state.interference == (Interference.CONSTRUCTIVE,)


def test_opposite_sign_duplicates_cancel_and_disappear():
    a = chess.Board(KING_D1)
    b = chess.Board(KING_F1)
    state = consolidate([(a, 0.5), (a.copy(), -0.5), (b, 1 / math.sqrt(2))])

    assert len(state) == 1
    assert state.branches[0].board.fen() == KING_F1
    assert state.amplitudes == pytest.approx([1.0])
    assert state.interference == (Interference.NONE,)


def test_total_cancellation_returns_none():
    a = chess.Board(KING_D1)
    assert consolidate([(a, 0.3), (a.copy(), -0.3)]) is None


def test_result_is_normalized_and_deduplicated():
    a, b = chess.Board(KING_D1), chess.Board(KING_F1)
    state = consolidate([(a, 0.2), (b, 0.9), (a.copy(), 0.4), (b.copy(), -0.1)])

    fens = [br.board.fen() for br in state.branches]
    assert len(fens) == len(set(fens)) == 2
    assert state.is_settled()
    # first-seen order is kept
    assert fens == [KING_D1, KING_F1]


def test_entanglements_are_recomputed_on_the_merged_set():
    state = consolidate([(chess.Board(KING_D1), 1.0), (chess.Board(KING_F1), -1.0)])

    assert len(state.entanglements) == 1
    pair = state.entanglements[0]
    assert pair.correlation is Correlation.NEGATIVE
    assert {pair.first.square, pair.second.square} == {chess.D1, chess.F1}
