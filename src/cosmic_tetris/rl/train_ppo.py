from __future__ import annotations

import argparse
import os

import gymnasium as gym

# Ensure envs are registered
import cosmic_tetris.env  # noqa: F401
from cosmic_tetris.env.tetris_env import compute_action_mask

ENV_ID = "CosmicTetris-10x20-v0"


def make_env(seed: int | None = None, gravity_every: int = 1) -> gym.Env:
    env = gym.make(ENV_ID, gravity_every=gravity_every)
    if seed is not None:
        env.reset(seed=seed)
    return env


def mask_fn(env: gym.Env):
    return compute_action_mask(env.unwrapped.engine)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--timesteps", type=int, default=200_000)
    p.add_argument("--gravity_every", type=int, default=1,
                   help="Apply one gravity tick every N environment steps")
    p.add_argument("--logdir", type=str, default="./logs/ppo")
    p.add_argument("--save_path", type=str, default="./models/ppo_tetris.zip")
    p.add_argument("--n_envs", type=int, default=4)
    return p


def main() -> None:
    args = build_parser().parse_args()

    from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

    if args.algo == "maskable":
        # sb3-contrib MaskablePPO
        from sb3_contrib import MaskablePPO as Algo
        from sb3_contrib.common.wrappers import ActionMasker

        def make_env_idx(i: int):
            def thunk():
                return ActionMasker(make_env(gravity_every=args.gravity_every), mask_fn)
            return thunk
    else:
        from stable_baselines3 import PPO as Algo

        def make_env_idx(i: int):
            def thunk():
                return make_env(gravity_every=args.gravity_every)
            return thunk

    vec_env = SubprocVecEnv([make_env_idx(i) for i in range(args.n_envs)])
    vec_env = VecMonitor(vec_env)
    model = Algo(
        policy="MultiInputPolicy",
        env=vec_env,
        verbose=1,
        tensorboard_log=args.logdir,
    )

    os.makedirs(os.path.dirname(args.save_path), exist_ok=True)
    model.learn(total_timesteps=args.timesteps)
    model.save(args.save_path)


if __name__ == "__main__":  # pragma: no cover
    main()
