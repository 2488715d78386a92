"""
Structured event log.

Every event is one JSON line on stdout with the keys:
ts, level, message, request_id, event, module (+ any extra fields).
"""
from __future__ import annotations

import datetime
import json
import logging
import os
from typing import Any, Dict, Optional

_log = logging.getLogger("guessboard")


def setup_logging() -> None:
    if not _log.handlers:
        logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def emit(level: str, event: str, message: str, request_id: Optional[str], module: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {
        "ts": _now_iso(),
        "level": level.lower(),
        "message": message,
        "request_id": request_id,
        "event": event,
        "module": module,
    }
    payload.update(extra)
    print(json.dumps(payload, ensure_ascii=False, default=str), flush=True)
