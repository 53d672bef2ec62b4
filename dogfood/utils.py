from __future__ import annotations

import json
import sys
import time
from datetime import datetime, timezone
from typing import Any, Callable, TextIO


def now_ts() -> float:
    return time.time()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_event_logger(enabled: bool, stream: TextIO | None = None) -> Callable[..., None]:
    """Return a ``log(event, **fields)`` callable writing JSON lines (stderr by default)."""

    def log(event: str, **fields: Any) -> None:
        if not enabled:
            return
        payload = {"ts": utc_now_iso(), "event": event, **fields}
        print(json.dumps(payload, ensure_ascii=False), file=stream or sys.stderr)

    return log
