"""TelemetryLogger — JSONL match logging.

One logger per match. Writes one JSONL line per accepted action plus a
match summary when the match reaches a terminal phase. All entries
include schema version and match ID.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path

import connectsquares

_SCHEMA_VERSION = "1.0.0"


@dataclass
class TelemetryEntry:
    """One accepted action."""

    action: str
    player_id: str
    tick: int
    phase: str
    moves_played: int
    turn_cursor: int
    joined_count: int
    row: int | None = None
    col: int | None = None
    outcome: str | None = None
    board: list[list[int | None]] | None = None


class TelemetryLogger:
    """Writes JSONL telemetry for a single match."""

    def __init__(self, output_dir: Path, match_id: str):
        self._output_dir = Path(output_dir)
        self._match_id = match_id
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._output_dir / f"{match_id}.jsonl"

    @property
    def file_path(self) -> Path:
        return self._file_path

    def log_action(self, entry: TelemetryEntry) -> None:
        record = asdict(entry)
        record["record_type"] = "action"
        record["schema_version"] = _SCHEMA_VERSION
        record["match_id"] = self._match_id
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._append(record)

    def finalize_match(
        self,
        phase: str,
        winner: str | None,
        transfers: list[dict],
        extra: dict | None = None,
    ) -> None:
        record = {
            "schema_version": _SCHEMA_VERSION,
            "record_type": "match_summary",
            "match_id": self._match_id,
            "phase": phase,
            "winner": winner,
            "transfers": transfers,
            "engine_version": connectsquares.__version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if extra:
            record.update(extra)
        self._append(record)

    def _append(self, record: dict) -> None:
        with open(self._file_path, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
