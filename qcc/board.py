"""
Classical board helpers backed by python-chess.

- Squares are python-chess square indices (chess.A1 == 0 ... chess.H8 == 63).
- Host code may pass algebraic names ("e4"); parse_square() accepts both.
- Starting positions come from a small pool of balanced endgame-ish FENs so a
  game does not open with 32 pieces on the board.
"""
from __future__ import annotations

import random
from typing import Optional, Union

import chess

SquareLike = Union[int, str]

BALANCED_POSITIONS = [
    "8/5k2/3ppp2/8/8/3PPP2/5K2/8 w - - 0 1",
    "2b1kb2/4p3/8/8/8/8/4P3/2B1KB2 w - - 0 1",
    "n1n3k1/p7/8/8/8/8/P7/N1N3K1 w - - 0 1",
    "r6k/ppp5/8/8/8/8/5PPP/K6R w - - 0 1",
    "5k2/2pppp2/8/8/8/8/2PPPP2/2B1KB2 w - - 0 1",
    "1nb1kbn1/4p3/8/8/8/8/4P3/1NB1KBN1 w - - 0 1",
    "rn4k1/p7/8/8/8/8/P7/RN4K1 w - - 0 1",
    "b1b3k1/p1p5/8/8/8/8/5P1P/1K3B1B w - - 0 1",
    "nn4k1/p7/8/8/8/8/P7/NN4K1 w - - 0 1",
    "r1r3k1/p1p5/8/8/8/8/5P1P/1K3R1R w - - 0 1",
    "rb4k1/p7/8/8/8/8/P7/RB4K1 w - - 0 1",
    "6k1/ppppp3/8/8/8/8/3PPPPP/1K6 w - - 0 1",
]


def parse_square(sq: SquareLike) -> chess.Square:
    """
    Accept a python-chess square index or an algebraic name.
    Raises ValueError for anything that is not a square.
    """
    if isinstance(sq, str):
        return chess.parse_square(sq)
    if isinstance(sq, int) and 0 <= sq < 64:
        return sq
    raise ValueError(f"not a square: {sq!r}")


def board_from_fen(fen: Optional[str] = None) -> chess.Board:
    # fen=None -> standard starting position
    return chess.Board(fen) if fen else chess.Board()


def random_position(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return rng.choice(BALANCED_POSITIONS)


def color_name(color: chess.Color) -> str:
    # chess.WHITE == True, chess.BLACK == False
    return "w" if color == chess.WHITE else "b"
