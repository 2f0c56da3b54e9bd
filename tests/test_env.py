import gymnasium as gym
import numpy as np
import pytest

import cosmic_tetris.env  # noqa: F401
from cosmic_tetris.env.tetris_env import N_ACTIONS, TetrisEnv, compute_action_mask
from cosmic_tetris.game import Action, TetrominoType, spawn_piece


@pytest.fixture
def env():
    e = TetrisEnv()
    yield e
    e.close()


def test_registered_env_resets():
    e = gym.make("CosmicTetris-10x20-v0")
    obs, info = e.reset(seed=3)
    assert e.observation_space.contains(obs)
    assert info["score"] == 0
    e.close()


def test_reset_is_deterministic_with_seed(env):
    obs_a, _ = env.reset(seed=11)
    obs_b, _ = env.reset(seed=11)
    assert np.array_equal(obs_a["board"], obs_b["board"])
    assert obs_a["next_piece"] == obs_b["next_piece"]


def test_observation_shows_falling_piece(env):
    obs, info = env.reset(seed=0)
    assert obs["board"].shape == (20, 10)
    assert np.count_nonzero(obs["board"]) == 4
    assert 1 <= obs["next_piece"] <= 7
    assert obs["level"].tolist() == [1]
    assert info["action_mask"].shape == (N_ACTIONS,)


def test_step_applies_gravity(env):
    env.reset(seed=0)
    env.engine.active = spawn_piece(TetrominoType.O)
    env.step(Action.NONE)
    assert env.engine.active.y == 1
    env.step(Action.LEFT)
    assert env.engine.active.position == (3, 2)


def test_hard_drop_reward_and_no_extra_gravity(env):
    env.reset(seed=0)
    env.engine.active = spawn_piece(TetrominoType.O)
    env.engine.next_piece = TetrominoType.T
    obs, reward, terminated, truncated, info = env.step(Action.HARD_DROP)
    assert reward == 36.0
    assert not terminated and not truncated
    # the next piece has not been pulled down by gravity
    assert env.engine.active.kind == TetrominoType.T
    assert env.engine.active.y == 0
    assert info["lines_cleared"] == 0


def test_line_reward_and_termination(env):
    env.line_reward = 10.0
    env.terminal_penalty = -5.0
    env.reset(seed=0)
    engine = env.engine
    engine.active = spawn_piece(TetrominoType.O)
    engine.board[19, :] = 1
    engine.board[19, 4:6] = 0
    engine.next_piece = TetrominoType.T
    obs, reward, terminated, truncated, info = env.step(Action.HARD_DROP)
    # 18 rows dropped, one line at level 1, plus the line bonus
    assert info["lines_cleared"] == 1
    assert reward == 18 * 2 + 100 + 10.0
    assert not terminated

    engine.board[0:2, 2:] = 1
    engine.active = spawn_piece(TetrominoType.O)
    engine.active.x = 0
    engine.next_piece = TetrominoType.O
    obs, reward, terminated, truncated, info = env.step(Action.HARD_DROP)
    assert terminated
    assert reward == 18 * 2 - 5.0
    assert info["action_mask"].tolist() == [True] + [False] * 5


def test_truncation(env):
    env.max_episode_steps = 3
    env.reset(seed=0)
    results = [env.step(Action.NONE) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]


def test_action_mask_tracks_walls(env):
    env.reset(seed=0)
    env.engine.active = spawn_piece(TetrominoType.I)
    env.engine.active.x = 0
    mask = compute_action_mask(env.engine)
    assert mask.tolist() == [True, False, True, True, True, True]
    assert np.array_equal(env.action_masks(), mask)


def test_invalid_action(env):
    env.reset(seed=0)
    with pytest.raises(ValueError):
        env.step(N_ACTIONS)


def test_rgb_render():
    e = TetrisEnv(render_mode="rgb_array")
    e.reset(seed=0)
    img = e.render()
    assert img.shape == (240, 120, 3)
    assert img.dtype == np.uint8


def test_random_rollout_stays_in_spaces(env):
    obs, info = env.reset(seed=5)
    rng = np.random.default_rng(5)
    for _ in range(300):
        action = int(rng.choice(np.flatnonzero(info["action_mask"])))
        obs, reward, terminated, truncated, info = env.step(action)
        assert env.observation_space.contains(obs)
        assert reward >= 0
        if terminated or truncated:
            obs, info = env.reset()


def test_unseeded_resets_follow_the_env_seed():
    a, b = TetrisEnv(), TetrisEnv()
    a.reset(seed=21)
    b.reset(seed=21)
    for _ in range(4):
        obs_a, _ = a.reset()
        obs_b, _ = b.reset()
        assert a.engine.active.kind == b.engine.active.kind
        assert obs_a["next_piece"] == obs_b["next_piece"]
