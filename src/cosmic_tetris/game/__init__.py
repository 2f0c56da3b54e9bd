"""Game module for Cosmic Tetris.

Exports the core game engine and supporting classes:
- TetrominoType / ActivePiece: piece catalog and the falling piece
- Board helpers: collision checks, merging and line clearing
- ScoringRules: scoring, leveling and fall cadence
- TetrisEngine: session state and the command API
- GameLoop: serializes gravity ticks and player commands
"""

from .pieces import ActivePiece, TetrominoType, BASE_SHAPES, COLOR_HEX, rotate_shape, spawn_piece, pick_next_type
from .board import (
    Board,
    empty_board,
    check_collision,
    is_legal_placement,
    merge_into_board,
    clear_full_lines,
)
from .rules import ScoringRules
from .core import (
    Action,
    Direction,
    GameConfig,
    GameResult,
    GameSnapshot,
    GameStatus,
    MoveResult,
    TetrisEngine,
)
from .loop import Command, GameLoop

__all__ = [
    "ActivePiece",
    "TetrominoType",
    "BASE_SHAPES",
    "COLOR_HEX",
    "rotate_shape",
    "spawn_piece",
    "pick_next_type",
    "Board",
    "empty_board",
    "check_collision",
    "is_legal_placement",
    "merge_into_board",
    "clear_full_lines",
    "ScoringRules",
    "Action",
    "Direction",
    "GameConfig",
    "GameResult",
    "GameSnapshot",
    "GameStatus",
    "MoveResult",
    "TetrisEngine",
    "Command",
    "GameLoop",
]
