from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pygame

from cosmic_tetris.game import Command, GameConfig, GameLoop, GameResult, TetrisEngine
from .records import HighScore, HighScoreStore
from .renderer import Renderer


DEFAULT_RECORDS = Path.home() / ".cosmic_tetris" / "highscores.json"

# Bindings that only apply while a session is in progress.
KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.LEFT,
    pygame.K_RIGHT: Command.RIGHT,
    pygame.K_DOWN: Command.DOWN,
    pygame.K_UP: Command.ROTATE,
    pygame.K_SPACE: Command.HARD_DROP,
    pygame.K_p: Command.PAUSE,
}

START_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)


def command_for_key(key: int, is_playing: bool, game_over: bool) -> Optional[Command]:
    if key in START_KEYS and not is_playing:
        return Command.START
    if not is_playing or game_over:
        return None
    return KEY_TO_COMMAND.get(key)


def make_recorder(store: HighScoreStore):
    def record(result: GameResult) -> None:
        rank = store.add(HighScore.from_result(result))
        if rank is not None:
            print(f"New high score #{rank + 1}: {result.score}")

    return record


def format_records(entries: Sequence[HighScore]) -> str:
    if not entries:
        return "No high scores yet"
    lines = ["#   SCORE  LEVEL  LINES  DATE"]
    for rank, e in enumerate(entries, start=1):
        lines.append(f"{rank:<3} {e.score:>5}  {e.level:>5}  {e.lines:>5}  {e.date[:10]}")
    return "\n".join(lines)


def run(seed: Optional[int] = None, cell_size: int = 30, records: Path = DEFAULT_RECORDS) -> None:
    store = HighScoreStore(records)
    record = make_recorder(store)
    top_scores: List[HighScore] = store.load()

    def on_game_over(result: GameResult) -> None:
        record(result)
        top_scores[:] = store.load()

    pygame.init()
    try:
        clock = pygame.time.Clock()
        engine = TetrisEngine(GameConfig(random_seed=seed))
        loop = GameLoop(engine, on_game_over=on_game_over)
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(engine.board.shape))
        pygame.display.set_caption("Cosmic Tetris")

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                        continue
                    command = command_for_key(event.key, engine.is_playing, engine.game_over)
                    if command is not None:
                        loop.submit(command)

            loop.update(pygame.time.get_ticks())
            renderer.draw(screen, engine.snapshot(), top_scores)
            clock.tick(60)
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Cosmic Tetris")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=30)
    p.add_argument("--records", type=Path, default=DEFAULT_RECORDS,
                   help="JSON file the high-score table is kept in")
    p.add_argument("--show-records", action="store_true",
                   help="Print the high-score table and exit")
    p.add_argument("--clear-records", action="store_true",
                   help="Delete all high scores and exit")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    if args.clear_records or args.show_records:
        store = HighScoreStore(args.records)
        if args.clear_records:
            store.clear()
            print("High scores cleared")
        if args.show_records:
            print(format_records(store.load()))
        return
    run(seed=args.seed, cell_size=args.cell_size, records=args.records)


if __name__ == "__main__":  # pragma: no cover
    main()
