from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional, Union

from cosmic_tetris.game import GameResult


logger = logging.getLogger(__name__)


@dataclass
class HighScore:
    score: int
    level: int
    lines: int
    date: str  # ISO-8601

    @classmethod
    def from_result(cls, result: GameResult) -> "HighScore":
        return cls(score=result.score, level=result.level, lines=result.lines, date=result.timestamp.isoformat())


class HighScoreStore:
    """JSON file holding the best finished sessions, highest score first."""

    def __init__(self, path: Union[str, Path], limit: int = 10) -> None:
        if limit <= 0:
            raise ValueError("limit must be > 0")
        self.path = Path(path)
        self.limit = int(limit)

    def load(self) -> List[HighScore]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            entries = [HighScore(**item) for item in raw]
        except (ValueError, TypeError) as exc:
            logger.warning("ignoring unreadable high-score file %s: %s", self.path, exc)
            return []
        entries.sort(key=lambda e: e.score, reverse=True)
        return entries

    def add(self, entry: HighScore) -> Optional[int]:
        """Insert ``entry`` and return its rank, or None if it did not make the list."""
        entries = self.load()
        entries.append(entry)
        # stable sort: earlier records win ties
        entries.sort(key=lambda e: e.score, reverse=True)
        entries = entries[: self.limit]
        self._write(entries)
        for rank, kept in enumerate(entries):
            if kept is entry:
                return rank
        return None

    def clear(self) -> None:
        self._write([])

    def _write(self, entries: List[HighScore]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([asdict(e) for e in entries], indent=2), encoding="utf-8")
