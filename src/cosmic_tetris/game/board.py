from __future__ import annotations

from typing import Tuple

import numpy as np

from .pieces import ActivePiece


Board = np.ndarray
Offset = Tuple[int, int]

EMPTY = 0


def empty_board(width: int = 10, height: int = 20) -> Board:
    return np.zeros((int(height), int(width)), dtype=np.int8)


def check_collision(piece: ActivePiece, board: Board, offset: Offset = (0, 0)) -> bool:
    """Return True if ``piece`` shifted by ``offset`` would collide.

    Cells left/right of the board or below its floor collide. Cells above the
    top edge (negative y) never collide, which lets pieces spawn and rotate
    partially off-screen.
    """
    height, width = board.shape
    for x, y in piece.cells_at(*offset):
        if x < 0 or x >= width or y >= height:
            return True
        if y >= 0 and board[y, x] != EMPTY:
            return True
    return False


def is_legal_placement(piece: ActivePiece, board: Board, offset: Offset = (0, 0)) -> bool:
    return not check_collision(piece, board, offset)


def merge_into_board(piece: ActivePiece, board: Board) -> Board:
    """Return a copy of ``board`` with the piece written in its color."""
    height, width = board.shape
    merged = board.copy()
    for x, y in piece.cells_at():
        if 0 <= y < height and 0 <= x < width:
            merged[y, x] = piece.color
    return merged


def clear_full_lines(board: Board) -> Tuple[Board, int]:
    """Drop every full row at once and pad the top with empty rows.

    Returns ``(new_board, lines_cleared)``; the input is left untouched.
    """
    full = np.all(board != EMPTY, axis=1)
    lines = int(np.count_nonzero(full))
    if lines == 0:
        return board.copy(), 0
    kept = board[~full]
    padding = np.zeros((lines, board.shape[1]), dtype=board.dtype)
    return np.vstack((padding, kept)), lines

