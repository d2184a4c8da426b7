from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any


class RuntimeEventLogger:
    """Append-only JSONL record of what each job simulated and submitted."""

    def __init__(self, data_dir: str, filename: str = "clinic_events.jsonl"):
        self.path = Path(data_dir) / filename if data_dir else None
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def emit(self, event: str, **fields: Any) -> None:
        if self.path is None:
            return
        payload = {
            "ts": time.time(),
            "event": event,
            **fields,
        }
        row = json.dumps(payload, separators=(",", ":"), ensure_ascii=True, default=str)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(row + "\n")
