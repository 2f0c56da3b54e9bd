from __future__ import annotations

import logging
from collections import deque
from enum import IntEnum
from typing import Callable, Deque, Optional

from .core import Direction, GameResult, GameStatus, TetrisEngine


logger = logging.getLogger(__name__)


class Command(IntEnum):
    TICK = 0
    START = 1
    PAUSE = 2
    LEFT = 3
    RIGHT = 4
    DOWN = 5
    ROTATE = 6
    HARD_DROP = 7


GameOverCallback = Callable[[GameResult], None]


class GameLoop:
    """Serializes gravity ticks and player commands into one FIFO queue.

    The timer and the input handler are both producers: ``submit`` enqueues a
    player command, ``update`` enqueues a tick once the level's fall interval
    has elapsed and then applies everything queued, one command at a time.
    Time is passed in by the caller (milliseconds), so the loop never sleeps
    or blocks.

    The tick countdown restarts from zero every time the engine enters the
    running state (new game or resume). At most one tick is produced per
    ``update`` call, so a stalled caller does not get a burst of drops.
    """

    def __init__(self, engine: Optional[TetrisEngine] = None, on_game_over: Optional[GameOverCallback] = None) -> None:
        self.engine = engine or TetrisEngine()
        self.on_game_over = on_game_over
        self._queue: Deque[Command] = deque()
        self._last_tick_ms: Optional[int] = None

    @property
    def pending(self) -> int:
        return len(self._queue)

    def submit(self, command: Command) -> None:
        if not isinstance(command, Command):
            raise TypeError(f"expected Command, got {type(command).__name__}")
        self._queue.append(command)

    def update(self, now_ms: int) -> int:
        """Produce a tick if one is due, then drain the queue.

        Returns the number of commands applied.
        """
        if self.engine.is_running:
            if self._last_tick_ms is None:
                self._last_tick_ms = now_ms
            elif now_ms - self._last_tick_ms >= self.engine.fall_interval_ms:
                self._queue.append(Command.TICK)
                self._last_tick_ms = now_ms
        return self._drain(now_ms)

    def _drain(self, now_ms: int) -> int:
        processed = 0
        while self._queue:
            command = self._queue.popleft()
            before = self.engine.status
            self._apply(command)
            processed += 1
            self._after_transition(command, before, now_ms)
        return processed

    def _apply(self, command: Command) -> None:
        engine = self.engine
        if command == Command.TICK:
            engine.tick()
        elif command == Command.START:
            engine.start_game()
        elif command == Command.PAUSE:
            engine.toggle_pause()
        elif command == Command.LEFT:
            engine.move(Direction.LEFT)
        elif command == Command.RIGHT:
            engine.move(Direction.RIGHT)
        elif command == Command.DOWN:
            engine.move(Direction.DOWN)
        elif command == Command.ROTATE:
            engine.rotate()
        elif command == Command.HARD_DROP:
            engine.hard_drop()

    def _after_transition(self, command: Command, before: GameStatus, now_ms: int) -> None:
        after = self.engine.status
        if after == GameStatus.RUNNING and (command == Command.START or before != GameStatus.RUNNING):
            # fresh countdown on start/resume
            self._last_tick_ms = now_ms
        elif after != GameStatus.RUNNING:
            self._last_tick_ms = None
        if after == GameStatus.GAME_OVER and before != GameStatus.GAME_OVER:
            result = self.engine.result()
            logger.info("session finished with %d points", result.score)
            if self.on_game_over is not None:
                self.on_game_over(result)
