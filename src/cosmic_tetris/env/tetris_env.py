from __future__ import annotations

import random
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from cosmic_tetris.game import COLOR_HEX, Action, Direction, GameConfig, MoveResult, TetrisEngine


N_ACTIONS = 6  # Action.NONE .. Action.HARD_DROP


def _hex_to_rgb(value: str) -> Tuple[int, int, int]:
    return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)


PALETTE = np.array(
    [(30, 30, 36)] + [_hex_to_rgb(COLOR_HEX[i]) for i in range(1, 8)],
    dtype=np.uint8,
)


def compute_action_mask(engine: TetrisEngine) -> np.ndarray:
    mask = np.zeros((N_ACTIONS,), dtype=np.bool_)
    mask[Action.NONE] = True
    if not engine.is_running:
        return mask
    mask[Action.LEFT] = engine.can_move(Direction.LEFT)
    mask[Action.RIGHT] = engine.can_move(Direction.RIGHT)
    mask[Action.DOWN] = True  # either moves or locks
    mask[Action.ROTATE] = engine.can_rotate()
    mask[Action.HARD_DROP] = True
    return mask


class TetrisEnv(gym.Env):
    """Falling-block environment driven through the engine's command API.

    Actions (6 total):
      0: No-op
      1: Move Left
      2: Move Right
      3: Move Down (soft drop; locks if blocked)
      4: Rotate CW
      5: Hard Drop

    After the action, a gravity tick is applied every ``gravity_every`` steps
    unless the action itself locked the piece. The reward is the change in the
    engine score plus an optional per-line bonus.
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        gravity_every: int = 1,
        line_reward: float = 0.0,
        terminal_penalty: float = 0.0,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        if gravity_every <= 0:
            raise ValueError("gravity_every must be > 0")
        self.engine = TetrisEngine(config)
        self.render_mode = render_mode
        self.gravity_every = int(gravity_every)
        self.line_reward = float(line_reward)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)

        h, w = self.engine.config.height, self.engine.config.width
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=0, high=7, shape=(h, w), dtype=np.int8),
                "next_piece": spaces.Discrete(8),
                "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(N_ACTIONS)

        self._steps = 0
        # Rendering state (lazy)
        self._renderer = None
        self._screen = None

    def _get_obs(self) -> Dict[str, Any]:
        snapshot = self.engine.snapshot()
        next_piece = int(snapshot.next_piece) if snapshot.next_piece is not None else 0
        return {
            "board": snapshot.composite().astype(np.int8),
            "next_piece": next_piece,
            "level": np.array([snapshot.level], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": compute_action_mask(self.engine),
            "score": self.engine.score,
            "lines": self.engine.lines,
            "level": self.engine.level,
            "steps": self._steps,
        }

    def action_masks(self) -> np.ndarray:
        return compute_action_mask(self.engine)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        # piece sequence follows the env seeding, including unseeded resets
        self.engine.rng = random.Random(int(self.np_random.integers(2**63)))
        self.engine.start_game()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def _apply(self, action: Action) -> bool:
        """Apply one command; returns True if it locked the piece."""
        if action == Action.DOWN:
            return self.engine.move(Direction.DOWN) == MoveResult.LOCKED
        if action == Action.HARD_DROP:
            was_running = self.engine.is_running
            self.engine.hard_drop()
            return was_running
        self.engine.step(action)
        return False

    def step(self, action: int):
        action = int(action)
        if not 0 <= action < N_ACTIONS:
            raise ValueError(f"action must be in [0, {N_ACTIONS}), got {action}")

        score_before = self.engine.score
        lines_before = self.engine.lines

        locked = self._apply(Action(action))
        self._steps += 1
        if not locked and self._steps % self.gravity_every == 0:
            self.engine.tick()

        lines = self.engine.lines - lines_before
        reward = float(self.engine.score - score_before) + self.line_reward * float(lines)
        terminated = bool(self.engine.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated
        if terminated:
            reward += self.terminal_penalty

        info = self._get_info()
        info["lines_cleared"] = lines
        if self.render_mode == "human":
            self.render()
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            board = self.engine.snapshot().composite()
            cell = 12
            img = PALETTE[board.astype(np.intp)]
            return np.repeat(np.repeat(img, cell, axis=0), cell, axis=1)
        if self.render_mode == "human":
            import pygame

            from cosmic_tetris.visualization.renderer import Renderer

            if self._renderer is None:
                pygame.init()
                self._renderer = Renderer(cell_size=24)
                self._screen = pygame.display.set_mode(self._renderer.window_size(self.engine.board.shape))
                pygame.display.set_caption("Cosmic Tetris - Env")
            pygame.event.pump()
            self._renderer.draw(self._screen, self.engine.snapshot())
        return None

    def close(self) -> None:
        if self._renderer is not None:
            import pygame

            pygame.quit()
            self._renderer = None
            self._screen = None
