"""
modules/observability/logger.py
---------------------------------
Structured JSON event log for enrichment runs: append-only, one object per
line (.jsonl).

Usage:
    from modules.observability.logger import StructuredLogger

    events = StructuredLogger()
    events.log("run_ab12cd", "pipeline_start", {"days": 3})
    with events.stage("run_ab12cd", "day_1.meals"):
        ...

Logs are written to  <LOGS_DIR>/<run_id>.jsonl  (default: logs/ next to
backend/main.py). A logger built with enabled=False accepts every call and
writes nothing.
"""

from __future__ import annotations

import json
import os
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import config

_DEFAULT_LOGS_DIR: Path = Path(__file__).resolve().parents[2] / "logs"


class StructuredLogger:
    """Thread-safe, append-only JSONL event log keyed by run id."""

    def __init__(
        self,
        logs_dir: Path | str | None = None,
        enabled: Optional[bool] = None,
    ) -> None:
        self._logs_dir = Path(logs_dir or config.LOGS_DIR or _DEFAULT_LOGS_DIR)
        self.enabled = config.ENABLE_STRUCTURED_LOGS if enabled is None else enabled
        self._lock = threading.Lock()
        self._handles: dict[str, object] = {}  # run_id -> file handle

    # ── public API ────────────────────────────────────────────────────────

    def log(self, run_id: str, event_type: str, payload: dict) -> None:
        """Append one record to ``<run_id>.jsonl``."""
        if not self.enabled:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "run_id": run_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(run_id)
            if fh is None:
                fh = self._open(run_id)
            fh.write(line)  # type: ignore[union-attr]
            fh.flush()  # type: ignore[union-attr]

    @contextmanager
    def stage(self, run_id: str, name: str, **payload) -> Iterator[dict]:
        """
        Log ``stage_end`` with the elapsed milliseconds when the block exits.

        The yielded dict is merged into the end record, so callers can attach
        counts discovered inside the block.
        """
        extra: dict = {}
        started = time.perf_counter()
        ok = False
        try:
            yield extra
            ok = True
        finally:
            self.log(run_id, "stage_end", {
                "stage": name,
                "ok": ok,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                **payload,
                **extra,
            })

    def close(self, run_id: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if run_id:
                fh = self._handles.pop(run_id, None)
                if fh:
                    fh.close()  # type: ignore[union-attr]
            else:
                for fh in self._handles.values():
                    fh.close()  # type: ignore[union-attr]
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, run_id: str):  # noqa: ANN202
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{run_id}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[run_id] = fh
        return fh
