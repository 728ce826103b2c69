"""
Disk cache for finished match records.

Finished matches never change upstream, so an entry is written once and then
trusted forever: no expiry, no revalidation. One JSON file per match id under
an explicit cache directory. A missing or corrupt file is a miss (and gets
replaced by the refetched record); a failed write is logged and ignored.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from .domain.contracts import MatchRecord
from .errors import ProtocolError
from .logging_utils import RateLimitedLogger
from .validators import decode_match_record

log = logging.getLogger(__name__)
_write_warnings = RateLimitedLogger(log, window_seconds=300.0)


class MatchCache:
    def __init__(self, cache_dir: str) -> None:
        self.cache_dir = os.fspath(cache_dir)
        self._locks: Dict[int, List[Any]] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, match_id: int) -> str:
        return os.path.join(self.cache_dir, f"match_{int(match_id)}.json")

    @contextmanager
    def _id_lock(self, match_id: int) -> Iterator[None]:
        # entries live only while some caller holds or waits on them
        with self._locks_guard:
            entry = self._locks.get(match_id)
            if entry is None:
                entry = self._locks[match_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[match_id]

    def lookup(self, match_id: int) -> Optional[MatchRecord]:
        """Return the cached record, or None on a miss (absent, unreadable or invalid)."""

        path = self.path_for(match_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            log.warning("match_cache_unreadable id=%s err=%s", match_id, exc)
            return None

        record, error = decode_match_record(payload)
        if error or record.id != int(match_id):
            log.warning("match_cache_invalid id=%s err=%s", match_id, error or "id mismatch")
            return None
        return record

    def store(self, payload: Dict[str, Any]) -> bool:
        """Persist a validated wire payload. Returns False instead of raising on I/O errors."""

        match_id = int(payload["id"])
        path = self.path_for(match_id)
        tmp_path = None
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".match_{match_id}.", suffix=".tmp", dir=self.cache_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp_path, path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as exc:
            _write_warnings.warning(
                ("match_cache_write", self.cache_dir),
                "match_cache_write_failed id=%s dir=%s err=%s",
                match_id,
                self.cache_dir,
                exc,
            )
            return False
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
        return True

    def get_match(self, match_id: int, fetcher: Callable[[], Dict[str, Any]]) -> MatchRecord:
        """Serve from disk, or call ``fetcher`` for the raw record, validate, persist and return it."""

        cached = self.lookup(match_id)
        if cached is not None:
            log.debug("match_cache_hit id=%s", match_id)
            return cached

        # coalesces concurrent misses for one id; writes are idempotent either way
        with self._id_lock(int(match_id)):
            cached = self.lookup(match_id)
            if cached is not None:
                return cached

            payload = fetcher()
            record, error = decode_match_record(payload)
            if error:
                raise ProtocolError("MatchCache", error)
            self.store(payload)
            log.debug("match_cache_miss id=%s stored", match_id)
            return record
