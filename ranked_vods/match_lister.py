from __future__ import annotations

from typing import Any, Optional, Protocol

from .config import setup_logger
from .constants import API_MAX_RESULTS, API_MAX_RESULTS_USER_PAGE
from .domain.contracts import MatchIdPage, MatchSummary, Scope
from .validators import validate_before, validate_season, validate_user

logger = setup_logger(__name__)


class MatchListingClient(Protocol):
    def list_matches(
        self,
        user: Optional[str],
        count: int,
        before: Optional[int] = None,
        season: Optional[int] = None,
    ) -> list[MatchSummary]:
        ...


def scope_for(user: Optional[str]) -> Scope:
    return Scope.SINGLE_USER if user else Scope.ALL_USERS


def page_size_for(scope: Scope) -> int:
    # most matches lack a public vod, so the global listing asks for more
    return API_MAX_RESULTS if scope is Scope.ALL_USERS else API_MAX_RESULTS_USER_PAGE


class MatchIdLister:
    """Lists ids of non-decayed matches that carry at least one VOD, newest first."""

    def __init__(self, client: MatchListingClient) -> None:
        self.client = client

    def list(
        self,
        user: Optional[str] = None,
        before: Any = None,
        season: Any = None,
    ) -> MatchIdPage:
        user = validate_user(user)
        before = validate_before(before)
        season = validate_season(season)
        scope = scope_for(user)

        summaries = self.client.list_matches(
            user,
            page_size_for(scope),
            before=before,
            season=season,
        )
        ids = [summary.id for summary in summaries if summary.has_vod]
        logger.info(
            "match_ids scope=%s user=%s before=%s season=%s listed=%d with_vod=%d",
            scope.value,
            user,
            before,
            season,
            len(summaries),
            len(ids),
        )
        return MatchIdPage(ids=ids, next_cursor=ids[-1] if ids else None)
