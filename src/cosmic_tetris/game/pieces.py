from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


def _frozen(rows: List[List[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    arr.setflags(write=False)
    return arr


BASE_SHAPES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: _frozen([[1, 1, 1, 1]]),
    TetrominoType.O: _frozen([[1, 1], [1, 1]]),
    TetrominoType.T: _frozen([[0, 1, 0], [1, 1, 1]]),
    TetrominoType.S: _frozen([[0, 1, 1], [1, 1, 0]]),
    TetrominoType.Z: _frozen([[1, 1, 0], [0, 1, 1]]),
    TetrominoType.J: _frozen([[1, 0, 0], [1, 1, 1]]),
    TetrominoType.L: _frozen([[0, 0, 1], [1, 1, 1]]),
}

# Color ids stored in board cells; 0 is reserved for empty.
PIECE_COLORS: Dict[TetrominoType, int] = {kind: int(kind) for kind in TetrominoType}

COLOR_HEX: Dict[int, str] = {
    1: "#0EA5E9",  # I
    2: "#F97316",  # O
    3: "#8B5CF6",  # T
    4: "#D946EF",  # S
    5: "#1EAEDB",  # Z
    6: "#33C3F0",  # J
    7: "#EA384C",  # L
}


def rotate_shape(shape: Shape) -> Shape:
    """Return ``shape`` rotated 90 degrees clockwise as a new array.

    Row ``i`` of the result is column ``i`` of the input read bottom-to-top.
    """
    return np.rot90(shape, 1, axes=(1, 0)).astype(np.int8, copy=True)


@dataclass
class ActivePiece:
    kind: TetrominoType
    shape: Shape
    color: int
    x: int
    y: int

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y

    def cells_at(self, dx: int = 0, dy: int = 0) -> List[Tuple[int, int]]:
        """Absolute (x, y) board coordinates of the occupied cells."""
        ys, xs = np.nonzero(self.shape)
        return [(self.x + int(cx) + dx, self.y + int(cy) + dy) for cy, cx in zip(ys, xs)]

    def copy(self) -> "ActivePiece":
        return ActivePiece(self.kind, self.shape.copy(), self.color, self.x, self.y)


def spawn_piece(kind: TetrominoType, board_width: int = 10) -> ActivePiece:
    return ActivePiece(
        kind=kind,
        shape=BASE_SHAPES[kind].copy(),
        color=PIECE_COLORS[kind],
        x=board_width // 2 - 1,
        y=0,
    )


def pick_next_type(rng: random.Random) -> TetrominoType:
    # Uniform and memoryless; repeats are allowed.
    return rng.choice(list(TetrominoType))
