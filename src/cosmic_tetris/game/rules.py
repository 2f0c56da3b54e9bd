from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    points_per_line: int = 100
    hard_drop_points_per_row: int = 2
    lines_per_level: int = 10
    base_fall_interval_ms: int = 1000
    fall_interval_step_ms: int = 100
    min_fall_interval_ms: int = 100

    def score_for_lines(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        return lines * self.points_per_line * level

    def hard_drop_points(self, rows: int) -> int:
        return max(0, rows) * self.hard_drop_points_per_row

    def next_level(self, level: int, total_lines: int, lines_cleared: int) -> int:
        """Level after a lock that brought the line count to ``total_lines``.

        Advances by at most one per lock, even when the clear spans
        several thresholds.
        """
        if lines_cleared > 0 and total_lines >= level * self.lines_per_level:
            return level + 1
        return level

    def fall_interval_ms(self, level: int) -> int:
        interval = self.base_fall_interval_ms - (level - 1) * self.fall_interval_step_ms
        return max(self.min_fall_interval_ms, interval)
