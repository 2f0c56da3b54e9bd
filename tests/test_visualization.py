import pygame
import pytest
from pygame import surfarray

from cosmic_tetris.game import Command, GameResult
from cosmic_tetris.visualization.human_play import (
    KEY_TO_COMMAND,
    build_parser,
    command_for_key,
    format_records,
    main,
    make_recorder,
)
from cosmic_tetris.visualization.records import HighScore, HighScoreStore
from cosmic_tetris.visualization.renderer import Renderer, _color_for_value


@pytest.fixture
def screen():
    pygame.init()
    renderer = Renderer(cell_size=10)
    surf = pygame.Surface(renderer.window_size((20, 10)))
    yield surf
    pygame.quit()


def test_window_size():
    assert Renderer(cell_size=30, margin=20, panel_cells=6).window_size((20, 10)) == (20 * 3 + 300 + 180, 20 * 2 + 600)


def test_palette():
    assert _color_for_value(0) == (20, 20, 26)
    assert _color_for_value(1) == (0x0E, 0xA5, 0xE9)
    assert _color_for_value(-7) == (0xEA, 0x38, 0x4C)


@pytest.mark.parametrize("phase", ["idle", "running", "paused"])
def test_render_every_phase(screen, engine, phase):
    if phase != "idle":
        engine.start_game()
    if phase == "paused":
        engine.toggle_pause()
    Renderer(cell_size=10).render(screen, engine.snapshot())
    # the board area is painted
    assert screen.get_at((25, 25))[:3] != (0, 0, 0)


def test_render_game_over(screen, running):
    running.board[0:2, 2:] = 1
    running.active.x = 0
    running.hard_drop()
    assert running.game_over
    Renderer(cell_size=10).render(screen, running.snapshot())


def test_key_bindings():
    assert KEY_TO_COMMAND[pygame.K_UP] == Command.ROTATE
    assert command_for_key(pygame.K_SPACE, True, False) == Command.HARD_DROP
    assert command_for_key(pygame.K_p, True, False) == Command.PAUSE
    assert command_for_key(pygame.K_RETURN, False, False) == Command.START
    assert command_for_key(pygame.K_RETURN, False, True) == Command.START
    # gameplay keys are dead outside a session
    assert command_for_key(pygame.K_LEFT, False, False) is None
    assert command_for_key(pygame.K_LEFT, False, True) is None
    assert command_for_key(pygame.K_RETURN, True, False) is None


def test_recorder_appends_to_store(tmp_path, capsys):
    store = HighScoreStore(tmp_path / "scores.json")
    record = make_recorder(store)
    record(GameResult(score=700, level=1, lines=7))
    assert [e.score for e in store.load()] == [700]
    assert "New high score #1: 700" in capsys.readouterr().out


def _score(score: int) -> HighScore:
    return HighScore(score=score, level=2, lines=11, date="2026-10-19T08:30:00+00:00")


def test_idle_screen_lists_top_scores(screen, engine):
    renderer = Renderer(cell_size=10)
    renderer.render(screen, engine.snapshot())
    plain = surfarray.array3d(screen)
    renderer.render(screen, engine.snapshot(), [_score(900), _score(400)])
    assert (surfarray.array3d(screen) != plain).any()


def test_top_scores_hidden_during_play(screen, engine):
    engine.start_game()
    renderer = Renderer(cell_size=10)
    renderer.render(screen, engine.snapshot())
    plain = surfarray.array3d(screen)
    renderer.render(screen, engine.snapshot(), [_score(900)])
    assert (surfarray.array3d(screen) == plain).all()


def test_format_records():
    assert format_records([]) == "No high scores yet"
    table = format_records([_score(1500), _score(300)]).splitlines()
    assert len(table) == 3
    assert table[1].split() == ["1", "1500", "2", "11", "2026-10-19"]
    assert table[2].split()[:2] == ["2", "300"]


def test_record_flags_parse():
    args = build_parser().parse_args(["--show-records", "--clear-records"])
    assert args.show_records and args.clear_records
    args = build_parser().parse_args([])
    assert not args.show_records and not args.clear_records


def test_show_records_prints_ranked_table(tmp_path, capsys):
    path = tmp_path / "scores.json"
    store = HighScoreStore(path)
    store.add(_score(300))
    store.add(_score(1200))
    main(["--records", str(path), "--show-records"])
    out = capsys.readouterr().out.splitlines()
    assert out[1].split()[:2] == ["1", "1200"]
    assert out[2].split()[:2] == ["2", "300"]


def test_clear_records_empties_the_table(tmp_path, capsys):
    path = tmp_path / "scores.json"
    HighScoreStore(path).add(_score(500))
    main(["--records", str(path), "--clear-records", "--show-records"])
    out = capsys.readouterr().out
    assert "High scores cleared" in out
    assert "No high scores yet" in out
    assert HighScoreStore(path).load() == []
