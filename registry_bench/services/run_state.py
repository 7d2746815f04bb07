"""Persisted progress of a full benchmark run.

The state file is rewritten after every completed step so a crashed or
interrupted run resumes where it stopped. Writes go through a temporary
file and ``os.replace`` so a crash mid-write never leaves a torn file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class StepFlags:
    create: bool = False
    fill: bool = False
    layout: bool = False
    read: bool = False
    queries: bool = False

    def reset_round(self) -> None:
        """Clear every per-round flag; table creation is done once per run."""
        self.fill = False
        self.layout = False
        self.read = False
        self.queries = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StepFlags":
        return cls(**{f.name: bool(data.get(f.name, False)) for f in fields(cls)})


@dataclass
class BenchmarkRunState:
    table: str
    record_max: int
    batch_size: int
    fill_batch: int
    current_round: int = 1
    total_rows: int = 0
    completed: StepFlags = field(default_factory=StepFlags)

    def matches(self, table: str, record_max: int, batch_size: int, fill_batch: int) -> bool:
        return (
            self.table == table
            and self.record_max == record_max
            and self.batch_size == batch_size
            and self.fill_batch == fill_batch
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "recordMax": self.record_max,
            "batchSize": self.batch_size,
            "fillBatch": self.fill_batch,
            "currentRound": self.current_round,
            "totalRows": self.total_rows,
            "completed": asdict(self.completed),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BenchmarkRunState":
        return cls(
            table=str(data["table"]),
            record_max=int(data["recordMax"]),
            batch_size=int(data["batchSize"]),
            fill_batch=int(data["fillBatch"]),
            current_round=int(data.get("currentRound", 1)),
            total_rows=int(data.get("totalRows", 0)),
            completed=StepFlags.from_dict(data.get("completed") or {}),
        )


class StateStore:
    """JSON file holding a single ``BenchmarkRunState``."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[BenchmarkRunState]:
        """Return the stored state; a missing or unreadable file yields None."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return BenchmarkRunState.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return None

    def save(self, state: BenchmarkRunState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(state.to_dict(), handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def load_or_init(
        self, table: str, record_max: int, batch_size: int, fill_batch: int
    ) -> tuple[BenchmarkRunState, bool]:
        """Resume a compatible state or start fresh; returns ``(state, resumed)``."""
        state = self.load()
        if state is not None and state.matches(table, record_max, batch_size, fill_batch):
            return state, True
        return BenchmarkRunState(table, record_max, batch_size, fill_batch), False


__all__ = ["StepFlags", "BenchmarkRunState", "StateStore"]
