from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Dict, Optional, Tuple

from .board import Board, check_collision, clear_full_lines, empty_board, merge_into_board
from .pieces import ActivePiece, TetrominoType, pick_next_type, rotate_shape, spawn_piece
from .rules import ScoringRules


logger = logging.getLogger(__name__)


class GameStatus(IntEnum):
    IDLE = 0
    RUNNING = 1
    PAUSED = 2
    GAME_OVER = 3


class Direction(IntEnum):
    LEFT = 0
    RIGHT = 1
    DOWN = 2


class MoveResult(IntEnum):
    IGNORED = 0  # engine not running
    BLOCKED = 1  # sideways move into a wall or settled cell
    MOVED = 2
    LOCKED = 3


class Action(IntEnum):
    NONE = 0
    LEFT = 1
    RIGHT = 2
    DOWN = 3
    ROTATE = 4
    HARD_DROP = 5
    PAUSE = 6
    START = 7


OFFSETS: Dict[Direction, Tuple[int, int]] = {
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
}


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        # the I piece spawns at width // 2 - 1 and needs four columns from there
        if self.width < 5:
            raise ValueError(f"board width must be at least 5, got {self.width}")
        if self.height < 2:
            raise ValueError(f"board height must be at least 2, got {self.height}")


@dataclass(frozen=True)
class GameResult:
    score: int
    level: int
    lines: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of the engine state for renderers and agents."""

    board: Board
    active: Optional[ActivePiece]
    next_piece: Optional[TetrominoType]
    score: int
    level: int
    lines: int
    status: GameStatus
    fall_interval_ms: int

    @property
    def game_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.status == GameStatus.PAUSED

    @property
    def is_playing(self) -> bool:
        return self.status in (GameStatus.RUNNING, GameStatus.PAUSED)

    def composite(self) -> Board:
        """Board with the falling piece drawn on top of the settled cells."""
        state = self.board.copy()
        if self.active is not None:
            h, w = state.shape
            for x, y in self.active.cells_at():
                if 0 <= y < h and 0 <= x < w:
                    state[y, x] = self.active.color
        return state


class TetrisEngine:
    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        self.board: Board = empty_board(self.config.width, self.config.height)
        self.active: Optional[ActivePiece] = None
        self.next_piece: Optional[TetrominoType] = None
        self.score = 0
        self.level = 1
        self.lines = 0
        self.status = GameStatus.IDLE

    # ---------- Session state ----------
    @property
    def game_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.status == GameStatus.PAUSED

    @property
    def is_playing(self) -> bool:
        return self.status in (GameStatus.RUNNING, GameStatus.PAUSED)

    @property
    def is_running(self) -> bool:
        return self.status == GameStatus.RUNNING

    @property
    def fall_interval_ms(self) -> int:
        return self.rules.fall_interval_ms(self.level)

    def result(self) -> GameResult:
        return GameResult(score=self.score, level=self.level, lines=self.lines)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            board=self.board.copy(),
            active=self.active.copy() if self.active is not None else None,
            next_piece=self.next_piece,
            score=self.score,
            level=self.level,
            lines=self.lines,
            status=self.status,
            fall_interval_ms=self.fall_interval_ms,
        )

    # ---------- Commands ----------
    def start_game(self) -> None:
        self.board = empty_board(self.config.width, self.config.height)
        self.score = 0
        self.level = 1
        self.lines = 0
        first = pick_next_type(self.rng)
        self.next_piece = pick_next_type(self.rng)
        self.active = spawn_piece(first, self.config.width)
        self.status = GameStatus.RUNNING
        logger.info("game started: active=%s next=%s", first.name, self.next_piece.name)

    def toggle_pause(self) -> None:
        if self.status == GameStatus.RUNNING:
            self.status = GameStatus.PAUSED
        elif self.status == GameStatus.PAUSED:
            self.status = GameStatus.RUNNING

    def can_move(self, direction: Direction) -> bool:
        if not self.is_running or self.active is None:
            return False
        return not check_collision(self.active, self.board, OFFSETS[direction])

    def can_rotate(self) -> bool:
        if not self.is_running or self.active is None:
            return False
        return not check_collision(self._rotated(), self.board)

    def attempt_move(self, direction: Direction) -> MoveResult:
        if not self.is_running or self.active is None:
            return MoveResult.IGNORED
        offset = OFFSETS[direction]
        if not check_collision(self.active, self.board, offset):
            self.active.x += offset[0]
            self.active.y += offset[1]
            return MoveResult.MOVED
        if direction == Direction.DOWN:
            self._lock_piece()
            return MoveResult.LOCKED
        return MoveResult.BLOCKED

    def move(self, direction: Direction) -> MoveResult:
        return self.attempt_move(Direction(direction))

    def tick(self) -> MoveResult:
        return self.attempt_move(Direction.DOWN)

    def rotate(self) -> bool:
        if not self.can_rotate():
            return False
        assert self.active is not None
        self.active.shape = rotate_shape(self.active.shape)
        return True

    def hard_drop(self) -> int:
        """Drop the active piece until it locks; returns rows descended."""
        rows = 0
        while self.attempt_move(Direction.DOWN) == MoveResult.MOVED:
            rows += 1
            self.score += self.rules.hard_drop_points(1)
        return rows

    def step(self, action: Action) -> None:
        action = Action(action)
        if action == Action.LEFT:
            self.move(Direction.LEFT)
        elif action == Action.RIGHT:
            self.move(Direction.RIGHT)
        elif action == Action.DOWN:
            self.move(Direction.DOWN)
        elif action == Action.ROTATE:
            self.rotate()
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.PAUSE:
            self.toggle_pause()
        elif action == Action.START:
            self.start_game()
        elif action == Action.NONE:
            pass

    # ---------- Lock sequence ----------
    def _rotated(self) -> ActivePiece:
        assert self.active is not None
        piece = self.active.copy()
        piece.shape = rotate_shape(piece.shape)
        return piece

    def _lock_piece(self) -> None:
        assert self.active is not None
        merged = merge_into_board(self.active, self.board)
        self.board, cleared = clear_full_lines(merged)
        self.lines += cleared
        self.score += self.rules.score_for_lines(cleared, self.level)
        new_level = self.rules.next_level(self.level, self.lines, cleared)
        if cleared:
            logger.debug("locked %s: cleared %d line(s), total %d", self.active.kind.name, cleared, self.lines)
        if new_level != self.level:
            logger.debug("level up: %d -> %d", self.level, new_level)
        self.level = new_level
        self._spawn_next()

    def _spawn_next(self) -> None:
        assert self.next_piece is not None
        piece = spawn_piece(self.next_piece, self.config.width)
        if check_collision(piece, self.board):
            # Spawn overlaps settled cells; the board is left as-is.
            self.active = None
            self.status = GameStatus.GAME_OVER
            logger.info("game over: score=%d level=%d lines=%d", self.score, self.level, self.lines)
            return
        self.active = piece
        self.next_piece = pick_next_type(self.rng)
