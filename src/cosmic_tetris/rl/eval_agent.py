from __future__ import annotations

import argparse

import pygame

from cosmic_tetris.visualization.renderer import Renderer
from .train_ppo import make_env, mask_fn


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--model", type=str, required=True)
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--fps", type=int, default=10)
    p.add_argument("--gravity_every", type=int, default=1)
    return p


def main() -> None:
    args = build_parser().parse_args()
    if args.algo == "maskable":
        from sb3_contrib import MaskablePPO as Algo
    else:
        from stable_baselines3 import PPO as Algo

    env = make_env(gravity_every=args.gravity_every)
    model = Algo.load(args.model, device="auto")
    engine = env.unwrapped.engine
    renderer = Renderer(cell_size=28)

    pygame.init()
    try:
        screen = pygame.display.set_mode(renderer.window_size(engine.board.shape))
        pygame.display.set_caption("Cosmic Tetris - Agent Eval")
        font = pygame.font.SysFont(None, 24)
        clock = pygame.time.Clock()

        obs, info = env.reset()
        total_reward = 0.0
        steps = 0
        while steps < args.steps:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    return

            if args.algo == "maskable":
                action, _ = model.predict(obs, deterministic=True, action_masks=mask_fn(env))
            else:
                action, _ = model.predict(obs, deterministic=True)

            obs, reward, terminated, truncated, info = env.step(action)
            total_reward += float(reward)
            steps += 1
            if terminated or truncated:
                print(f"episode finished: score={info['score']} lines={info['lines']}")
                obs, info = env.reset()

            renderer.render(screen, engine.snapshot())
            txt = font.render(f"step {steps}/{args.steps}  reward {total_reward:.1f}", True, (230, 230, 230))
            screen.blit(txt, (renderer.margin, 2))
            pygame.display.flip()
            clock.tick(args.fps)
    finally:
        env.close()
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    main()
