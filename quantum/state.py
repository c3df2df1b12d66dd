# quantum/state.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

import chess  # python-chess

from qcc.board import board_from_fen


class Interference(Enum):
    CONSTRUCTIVE = "constructive"
    DESTRUCTIVE = "destructive"
    NONE = "none"


class Correlation(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class Phase(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"

    @property
    def sign(self) -> float:
        return 1.0 if self is Phase.POSITIVE else -1.0

    def flipped(self) -> "Phase":
        return Phase.NEGATIVE if self is Phase.POSITIVE else Phase.POSITIVE


# chess.Board is unhashable: branches compare and hash by identity
@dataclass(frozen=True, eq=False)
class Branch:
    board: chess.Board
    amp: float  # signed amplitude. Probability = amp^2


@dataclass(frozen=True)
class PieceLocation:
    square: chess.Square
    piece: chess.Piece

    def __str__(self) -> str:
        return f"{self.piece.symbol()}@{chess.square_name(self.square)}"


@dataclass(frozen=True)
class EntangledPair:
    first: PieceLocation
    second: PieceLocation
    correlation: Correlation


@dataclass(frozen=True)
class QuantumState:
    """
    Ensemble of classical boards with signed real amplitudes.

    `interference` and `entanglements` are derived from `branches` by the
    last consolidation; they are never edited on their own. A state is never
    mutated: every engine operation builds a new one.
    """

    branches: Tuple[Branch, ...]
    interference: Tuple[Interference, ...] = ()
    entanglements: Tuple[EntangledPair, ...] = ()

    def __post_init__(self):
        if not self.interference:
            object.__setattr__(self, "interference", (Interference.NONE,) * len(self.branches))
        if len(self.interference) != len(self.branches):
            raise ValueError("one interference tag per branch required")

    @classmethod
    def initial(cls, fen: Optional[str] = None) -> "QuantumState":
        return cls.single(board_from_fen(fen))

    @classmethod
    def single(cls, board: chess.Board) -> "QuantumState":
        return cls((Branch(board.copy(stack=False), 1.0),))

    def __len__(self) -> int:
        return len(self.branches)

    @property
    def amplitudes(self) -> List[float]:
        return [br.amp for br in self.branches]

    @property
    def boards(self) -> List[chess.Board]:
        return [br.board for br in self.branches]

    @property
    def probabilities(self) -> List[float]:
        return [br.amp * br.amp for br in self.branches]

    def is_settled(self, tol: float = 1e-6) -> bool:
        return abs(sum(self.probabilities) - 1.0) <= tol

    def snapshot(self) -> List[Tuple[str, float]]:
        # buat host yang mau simpan state: (fen, amplitude)
        return [(br.board.fen(), br.amp) for br in self.branches]


@dataclass(frozen=True)
class PhaseSplitConfig:
    """
    A two-target split the user is still configuring, with the phase chosen
    for each target. Input to a single split; not part of QuantumState.
    """

    source: chess.Square
    target1: chess.Square
    target2: chess.Square
    phases: Dict[chess.Square, Phase] = field(default_factory=dict)

    def phase(self, square: chess.Square) -> Phase:
        if square in self.phases:
            return self.phases[square]
        return Phase.POSITIVE if square == self.target1 else Phase.NEGATIVE

    def sign(self, square: chess.Square) -> float:
        return self.phase(square).sign

    def toggle(self, square: chess.Square) -> "PhaseSplitConfig":
        if square not in (self.target1, self.target2):
            raise ValueError(f"{chess.square_name(square)} is not a split target")
        phases = dict(self.phases)
        phases[square] = self.phase(square).flipped()
        return replace(self, phases=phases)


@dataclass(frozen=True)
class QuantumCheckInfo:
    king_square: chess.Square
    king_color: chess.Color
    king_probability: float
    attacker_square: chess.Square
    attacker: chess.Piece
    threat_probability: float
