# Best-effort log of generation requests in a local SQLite file.
# A failing write is logged and dropped: it never fails the request.

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS interactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL,
    mode TEXT NOT NULL,
    prompt TEXT NOT NULL,
    response TEXT,
    success INTEGER NOT NULL,
    error TEXT
)
"""


class InteractionLog:
    def __init__(self, db_path: str):
        self.db_path = Path(db_path)
        self._ready = False

    def _connect(self) -> sqlite3.Connection:
        if not self._ready:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(_SCHEMA)
            self._ready = True
        return sqlite3.connect(self.db_path)

    def record(
        self,
        mode: str,
        prompt: str,
        response: Optional[str] = None,
        success: bool = True,
        error: Optional[str] = None,
    ) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO interactions (created_at, mode, prompt, response, success, error) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        datetime.now(timezone.utc).isoformat(),
                        mode,
                        prompt[:4000],
                        response,
                        1 if success else 0,
                        error,
                    ),
                )
        except (sqlite3.Error, OSError):
            logger.exception("Could not record interaction (mode=%s)", mode)

    def stats(self) -> Dict[str, Any]:
        with self._connect() as conn:
            rows = conn.execute("SELECT mode, COUNT(*) FROM interactions GROUP BY mode ORDER BY mode").fetchall()
            failures = conn.execute("SELECT COUNT(*) FROM interactions WHERE success = 0").fetchone()[0]
        by_mode = {mode: count for mode, count in rows}
        return {"total": sum(by_mode.values()), "byMode": by_mode, "failures": failures}
