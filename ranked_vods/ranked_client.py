"""
Client for the MCSR Ranked API (https://api.mcsrranked.com).

Every response is an envelope ``{"status": "success" | "error", "data": ...}``.
Service errors are translated into the typed errors from ``errors.py``;
success payloads are structurally validated before they leave this module.
No request is ever retried.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import setup_logger
from .constants import PLAYER_NOT_EXIST_ERROR, USER_NOT_FOUND_MESSAGE
from .domain.contracts import MatchRecord, MatchSummary
from .errors import NetworkError, NotFoundError, ProtocolError, UpstreamError
from .settings import RANKED_API_BASE, RANKED_API_TIMEOUT_MS
from .validators import decode_match_record, decode_match_summaries

SOURCE = "MCSRRanked"

logger = setup_logger(__name__)


def _session() -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": "ranked-vods/0.1 (+https://mcsrranked.com)",
        }
    )
    return session


def _reject_constant(token: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"non-finite number {token!r}")


def build_matches_endpoint(
    user: Optional[str],
    count: int,
    before: Optional[int] = None,
    season: Optional[int] = None,
) -> tuple[str, Dict[str, Any]]:
    """Return (path, params) for a listing request. Absent optionals are omitted."""

    path = f"users/{quote(user, safe='')}/matches" if user else "matches"
    params: Dict[str, Any] = {"count": count}
    if before is not None:
        params["before"] = before
    params["excludeDecayed"] = "true"
    if season is not None:
        params["season"] = season
    return path, params


def describe_error(endpoint: str, data: Any) -> str:
    """Build the diagnostic message for an error envelope (NotFound is raised by the caller)."""

    message = f"API request failed to endpoint {endpoint}."
    if isinstance(data, dict):
        error = data.get("error")
        query = data.get("query")
        params = data.get("params")
        if error:
            message += f" {error}"
        if query:
            message += f" Query validation failed: {json.dumps(query)}"
        if params:
            message += f" Parameter validation failed: {json.dumps(params)}"
    elif isinstance(data, str):
        message += f" {data}"
    return message


class RankedApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or RANKED_API_BASE).rstrip("/")
        self.timeout = (timeout_ms or RANKED_API_TIMEOUT_MS) / 1000.0
        self.session = session or _session()

    # -------- transport --------
    def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("ranked_request_failed endpoint=%s err=%s", endpoint, exc)
            raise NetworkError(
                SOURCE,
                f"Network request failed for endpoint {endpoint}.",
                str(exc),
                endpoint=endpoint,
            ) from exc

        text = response.text or ""
        if not response.ok and not text.lstrip().startswith("{"):
            raise self._not_ok(response, endpoint, text)

        try:
            envelope = json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            if not response.ok:
                # e.g. a truncated proxy error page
                raise self._not_ok(response, endpoint, text) from exc
            raise ProtocolError(
                SOURCE,
                f"Response from endpoint {endpoint} is not valid JSON.",
                text[:200],
            ) from exc

        return self._unwrap(envelope, endpoint, response.status_code)

    @staticmethod
    def _not_ok(response: requests.Response, endpoint: str, text: str) -> NetworkError:
        return NetworkError(
            SOURCE,
            f"Network response was not ok for endpoint {endpoint}. "
            f"Status: {response.status_code} {response.reason}. Text: {text}",
            endpoint=endpoint,
            status_code=response.status_code,
        )

    def _unwrap(self, envelope: Any, endpoint: str, status_code: Optional[int] = None) -> Any:
        if not isinstance(envelope, dict) or envelope.get("status") not in ("success", "error"):
            raise ProtocolError(
                SOURCE,
                f"Unexpected response envelope from endpoint {endpoint}.",
                str(envelope)[:200],
            )

        data = envelope.get("data")
        if envelope["status"] == "success":
            return data

        if isinstance(data, dict) and data.get("error") == PLAYER_NOT_EXIST_ERROR:
            raise NotFoundError(SOURCE, USER_NOT_FOUND_MESSAGE)

        message = describe_error(endpoint, data)
        logger.error("ranked_api_error status=%s %s", status_code, message)
        raise UpstreamError(SOURCE, message, endpoint=endpoint, status_code=status_code)

    # -------- endpoints --------
    def list_matches(
        self,
        user: Optional[str],
        count: int,
        before: Optional[int] = None,
        season: Optional[int] = None,
    ) -> List[MatchSummary]:
        path, params = build_matches_endpoint(user, count, before, season)
        data = self._request(path, params)
        summaries, error = decode_match_summaries(data)
        if error:
            raise ProtocolError(SOURCE, error)
        logger.debug("ranked_list path=%s params=%s items=%d", path, params, len(summaries))
        return summaries

    def fetch_match_payload(self, match_id: int) -> Dict[str, Any]:
        """Return the validated raw match record, as the cache persists it."""

        data = self._request(f"matches/{int(match_id)}")
        _, error = decode_match_record(data)
        if error:
            raise ProtocolError(SOURCE, error)
        return data

    def fetch_match(self, match_id: int) -> MatchRecord:
        record, error = decode_match_record(self._request(f"matches/{int(match_id)}"))
        if error:
            raise ProtocolError(SOURCE, error)
        return record
