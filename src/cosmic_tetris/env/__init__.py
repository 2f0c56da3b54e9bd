"""Gymnasium environments for Cosmic Tetris."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register default 10x20 falling-block environment (6 discrete actions)
register(
    id="CosmicTetris-10x20-v0",
    entry_point="cosmic_tetris.env.tetris_env:TetrisEnv",
)

__all__ = ["CosmicTetris-10x20-v0"]
