from __future__ import annotations

import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Protocol

from ..config import setup_logger
from ..correlator import correlate
from ..domain.contracts import DeathEvent, MatchIdPage, MatchRecord, VodPage
from ..errors import RequestTimeoutError
from ..match_cache import MatchCache
from ..match_lister import MatchIdLister
from ..ranked_client import RankedApiClient
from ..validators import validate_before, validate_season, validate_user
from .. import settings

logger = setup_logger(__name__)


class MatchFetcher(Protocol):
    def fetch_match_payload(self, match_id: int) -> Dict[str, Any]:
        ...


class VodService:
    """
    Builds one page of death links.

    Lists VOD-bearing match ids (newest first), loads each record through the
    disk cache and correlates its deaths with VODs. Results keep listing order.
    Any failure aborts the whole page; nothing is retried.

    ``max_workers > 1`` loads matches concurrently. ``deadline`` (seconds)
    bounds the whole call and raises ``RequestTimeoutError`` on expiry.
    """

    def __init__(
        self,
        lister: MatchIdLister,
        cache: MatchCache,
        fetcher: MatchFetcher,
        max_workers: int = 1,
        deadline: Optional[float] = None,
    ) -> None:
        self.lister = lister
        self.cache = cache
        self.fetcher = fetcher
        self.max_workers = max(1, int(max_workers))
        self.deadline = deadline

    def _load(self, match_id: int) -> MatchRecord:
        return self.cache.get_match(match_id, lambda: self.fetcher.fetch_match_payload(match_id))

    def _events_for(self, match_id: int) -> List[DeathEvent]:
        return correlate(self._load(match_id))

    def _remaining(self, started: float) -> Optional[float]:
        if self.deadline is None:
            return None
        remaining = self.deadline - (time.monotonic() - started)
        if remaining <= 0:
            raise RequestTimeoutError("VodService", f"Request exceeded deadline of {self.deadline}s.")
        return remaining

    def _collect_sequential(self, ids: List[int], started: float) -> List[List[DeathEvent]]:
        results = []
        for match_id in ids:
            results.append(self._events_for(match_id))
            self._remaining(started)
        return results

    def _collect_parallel(self, ids: List[int], started: float) -> List[List[DeathEvent]]:
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="vod-fetch")
        try:
            futures = [executor.submit(self._events_for, match_id) for match_id in ids]
            done, pending = wait(futures, timeout=self._remaining(started), return_when=FIRST_EXCEPTION)
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()
            if pending:
                raise RequestTimeoutError("VodService", f"Request exceeded deadline of {self.deadline}s.")
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def get_vods(self, user: Any = None, before: Any = None, season: Any = None) -> VodPage:
        started = time.monotonic()
        user = validate_user(user)
        before = validate_before(before)
        season = validate_season(season)

        page: MatchIdPage = self.lister.list(user, before=before, season=season)
        self._remaining(started)
        if self.max_workers > 1 and len(page.ids) > 1:
            per_match = self._collect_parallel(page.ids, started)
        else:
            per_match = self._collect_sequential(page.ids, started)

        events: List[DeathEvent] = [ev for match_events in per_match for ev in match_events]
        logger.info(
            "vods_page user=%s before=%s season=%s matches=%d deaths=%d next=%s elapsed_ms=%.0f",
            user,
            before,
            season,
            len(page.ids),
            len(events),
            page.next_cursor,
            (time.monotonic() - started) * 1000,
        )
        return VodPage(events=events, next_cursor=page.next_cursor, season=season)


def build_default_service(cache_dir: Optional[str] = None) -> VodService:
    """Wire a VodService from environment settings."""

    client = RankedApiClient()
    return VodService(
        lister=MatchIdLister(client),
        cache=MatchCache(cache_dir or settings.VOD_CACHE_DIR),
        fetcher=client,
        max_workers=settings.VOD_FETCH_WORKERS,
        deadline=settings.VOD_REQUEST_DEADLINE_S,
    )
