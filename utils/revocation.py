"""
In-process revocation list for access tokens.

Best effort only: entries live in memory, are not shared between worker
processes, and disappear on restart. One ledger is created per app in
create_app() and reached through current_app.extensions.
"""
from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Dict


class RevocationLedger:
    def __init__(
        self,
        default_ttl: timedelta = timedelta(days=30),
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, token: str, expires_at: datetime | float | int | None = None) -> None:
        """Remember token as revoked until expires_at (epoch seconds or datetime)."""
        if not token:
            return
        if expires_at is None:
            deadline = self._clock() + self.default_ttl.total_seconds()
        elif isinstance(expires_at, datetime):
            deadline = expires_at.timestamp()
        else:
            deadline = float(expires_at)
        with self._lock:
            self._entries[token] = deadline

    def is_revoked(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            deadline = self._entries.get(token)
            if deadline is None:
                return False
            if deadline < self._clock():
                del self._entries[token]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def close(self) -> None:
        with self._lock:
            self._entries.clear()
