"""GameLogger — JSONL game logging.

One logger per game. Writes one JSONL line per finished round plus a game
summary as the final line. All entries include schema version and game ID.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path

import taboogame

_SCHEMA_VERSION = "1.0.0"


@dataclass
class RoundEntry:
    """One finished round."""

    round_number: int
    team_index: int
    team_name: str
    correct: int
    taboo: int
    skips: int
    score_after: int
    words: list[str]
    round_time_seconds: int
    next_phase: str


class GameLogger:
    """Writes JSONL records for a single game."""

    def __init__(self, output_dir: Path, game_id: str, context: dict | None = None):
        self._output_dir = Path(output_dir)
        self._game_id = game_id
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._output_dir / f"{game_id}.jsonl"
        self._context = context or {}

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def game_id(self) -> str:
        return self._game_id

    def log_round(self, entry: RoundEntry) -> None:
        record = asdict(entry)
        record["record_type"] = "round"
        record["schema_version"] = _SCHEMA_VERSION
        record["game_id"] = self._game_id
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._append(record)

    def finalize_game(
        self,
        teams: list[dict],
        winner: str | None,
        extra: dict | None = None,
    ) -> None:
        record = {
            "schema_version": _SCHEMA_VERSION,
            "record_type": "game_summary",
            "game_id": self._game_id,
            "final_scores": teams,
            "winner": winner,
            "engine_version": taboogame.__version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "seed": self._context.get("seed"),
            "settings": self._context.get("settings"),
        }
        if extra:
            record.update(extra)
        self._append(record)

    def _append(self, record: dict) -> None:
        with open(self._file_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str, ensure_ascii=False) + "\n")
