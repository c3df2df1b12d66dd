from __future__ import annotations

from typing import Sequence, Tuple

import chess
import pytest

from quantum.consolidation import consolidate
from quantum.state import QuantumState

KING_AND_PAWN = "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"


class FixedDraw:
    """Stand-in for random.Random whose random() always returns `value`."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_draw():
    return FixedDraw


@pytest.fixture
def kp_state() -> QuantumState:
    return QuantumState.initial(KING_AND_PAWN)


@pytest.fixture
def build_state():
    """(fen, amplitude) pairs -> consolidated QuantumState."""

    def _build(pairs: Sequence[Tuple[str, float]]) -> QuantumState:
        state = consolidate([(chess.Board(fen), amp) for fen, amp in pairs])
        assert state is not None
        return state

    return _build


@pytest.fixture
def three_knights(build_state) -> QuantumState:
    # one white knight in three exclusive realities: b1 / a3 / c3
    return build_state([
        ("7k/8/8/8/8/8/8/1N5K w - - 0 1", 1.0),
        ("7k/8/8/8/8/N7/8/7K w - - 0 1", 1.0),
        ("7k/8/8/8/8/2N5/8/7K w - - 0 1", 1.0),
    ])
