"""Append-only decision trace for debugging hooks.

One line per branch taken, e.g.::

    [2026-01-31 14:02:11] HOOK START: tool=Edit path=spec/user_spec.rb skill= cwd=/work
    [2026-01-31 14:02:11] BRANCH: RSpec spec matched -> DENIED (skill ruby-conventions:ruby-testing not loaded)

Nothing reads this file back. Writes are unsynchronized between hook
processes and failures are ignored: a broken log must never affect a decision.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class AuditLog:
    def __init__(self, path: Path | str | None):
        self.path = Path(path) if path else None
        # Fixed per invocation, like the shell hooks' $TIMESTAMP
        self.timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)

    def log(self, message: str) -> None:
        if self.path is None:
            return
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(f"[{self.timestamp}] {message}\n")
        except OSError as e:
            logger.debug("Audit log write failed for %s: %s", self.path, e)


class NullAuditLog(AuditLog):
    """Discards every trace line."""

    def __init__(self) -> None:
        super().__init__(None)
