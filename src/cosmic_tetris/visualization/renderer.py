from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
import pygame

from cosmic_tetris.game import BASE_SHAPES, COLOR_HEX, GameSnapshot
from .records import HighScore


Color = Tuple[int, int, int]

EMPTY_COLOR: Color = (20, 20, 26)
TEXT_COLOR: Color = (230, 230, 230)


def _color_for_value(v: int) -> Color:
    if v == 0:
        return EMPTY_COLOR
    hex_color = COLOR_HEX.get(abs(v))
    if hex_color is None:
        return (200, 200, 200)
    c = pygame.Color(hex_color)
    return (c.r, c.g, c.b)


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_cells: int = 6, max_records: int = 10) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_w = panel_cells * cell_size
        self.max_records = max_records
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, board_shape: Tuple[int, int]) -> Tuple[int, int]:
        h, w = board_shape
        width = self.margin * 3 + w * self.cell_size + self.panel_w
        height = self.margin * 2 + h * self.cell_size
        return width, height

    def _get_font(self) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.SysFont(None, 26)
        return self._font

    def _cells_surface(self, cells: np.ndarray, cell_size: int) -> pygame.Surface:
        h, w = cells.shape
        surf = pygame.Surface((w * cell_size, h * cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(x * cell_size, y * cell_size, cell_size - 1, cell_size - 1)
                pygame.draw.rect(surf, _color_for_value(int(cells[y, x])), rect)
        return surf

    def _draw_panel(self, screen: pygame.Surface, snapshot: GameSnapshot) -> int:
        font = self._get_font()
        x0 = self.margin * 2 + snapshot.board.shape[1] * self.cell_size
        y = self.margin
        screen.blit(font.render("NEXT", True, TEXT_COLOR), (x0, y))
        y += 24
        if snapshot.next_piece is not None:
            shape = BASE_SHAPES[snapshot.next_piece] * int(snapshot.next_piece)
            preview = self._cells_surface(shape, self.cell_size * 2 // 3)
            screen.blit(preview, (x0, y))
        y += self.cell_size * 3
        for label, value in (("SCORE", snapshot.score), ("LEVEL", snapshot.level), ("LINES", snapshot.lines)):
            screen.blit(font.render(f"{label}: {value}", True, TEXT_COLOR), (x0, y))
            y += 26
        return y

    def _draw_banner(self, screen: pygame.Surface, text: str, color: Color) -> None:
        img = self._get_font().render(text, True, color)
        rect = img.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2))
        screen.blit(img, rect)

    def _draw_records(self, screen: pygame.Surface, records: Sequence[HighScore], x0: int, y: int) -> None:
        font = self._get_font()
        y += 12
        screen.blit(font.render("TOP SCORES", True, TEXT_COLOR), (x0, y))
        for rank, entry in enumerate(records[: self.max_records], start=1):
            y += 22
            screen.blit(font.render(f"{rank:>2}. {entry.score}", True, (200, 210, 235)), (x0, y))

    def render(self, screen: pygame.Surface, snapshot: GameSnapshot, records: Optional[Sequence[HighScore]] = None) -> None:
        """Draw one frame onto ``screen`` without flipping the display.

        ``records`` (best first) are listed under the stats while no session
        is in progress.
        """
        screen.fill((10, 10, 14))
        grid_surf = self._cells_surface(snapshot.composite(), self.cell_size)
        screen.blit(grid_surf, (self.margin, self.margin))
        panel_bottom = self._draw_panel(screen, snapshot)
        if records and not snapshot.is_playing:
            x0 = self.margin * 2 + snapshot.board.shape[1] * self.cell_size
            self._draw_records(screen, records, x0, panel_bottom)
        if snapshot.game_over:
            self._draw_banner(screen, "GAME OVER - Enter to restart", (255, 100, 100))
        elif snapshot.paused:
            self._draw_banner(screen, "PAUSED", TEXT_COLOR)
        elif not snapshot.is_playing:
            self._draw_banner(screen, "Press Enter to start", TEXT_COLOR)

    def draw(self, screen: pygame.Surface, snapshot: GameSnapshot, records: Optional[Sequence[HighScore]] = None) -> None:
        self.render(screen, snapshot, records)
        pygame.display.flip()

