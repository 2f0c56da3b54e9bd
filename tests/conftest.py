import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from cosmic_tetris.game import GameConfig, TetrisEngine, TetrominoType, spawn_piece


@pytest.fixture
def engine() -> TetrisEngine:
    return TetrisEngine(GameConfig(random_seed=1234))


@pytest.fixture
def running(engine: TetrisEngine) -> TetrisEngine:
    """Started engine with an O piece falling and a T queued."""
    engine.start_game()
    engine.active = spawn_piece(TetrominoType.O, engine.config.width)
    engine.next_piece = TetrominoType.T
    return engine
