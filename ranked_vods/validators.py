"""Input validation and structural decoding of ranked API payloads.

Caller input (season, cursor, user) is validated eagerly and rejected with
``InvalidArgumentError``. Upstream payloads are decoded into the strict
domain types by ``decode_*`` helpers that return ``(value, error)``: exactly
one of the two is ``None``. Callers turn the error into a ``ProtocolError``.
"""

import json
import math
from numbers import Real
from typing import Any, List, Optional, Tuple

from .config import setup_logger
from .constants import MIN_VOD_SEASON, PAYLOAD_EXCERPT_CHARS, SEASON_ERROR_MESSAGE
from .domain.contracts import MatchRecord, MatchSummary, PlayerRef, TimelineEvent, VodRef
from .errors import InvalidArgumentError

logger = setup_logger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _excerpt(payload: Any) -> str:
    try:
        text = json.dumps(payload, default=str)
    except (TypeError, ValueError):
        text = repr(payload)
    if len(text) > PAYLOAD_EXCERPT_CHARS:
        return text[:PAYLOAD_EXCERPT_CHARS] + "..."
    return text


def _coerce_int(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def validate_season(raw: Any) -> Optional[int]:
    """Return the season as int, or None when absent. Seasons below 8 are rejected."""

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    season = _coerce_int(raw)
    if season is None or season < MIN_VOD_SEASON:
        logger.info("season_invalid: %r", raw)
        raise InvalidArgumentError(SEASON_ERROR_MESSAGE)
    return season


def validate_before(raw: Any) -> Optional[int]:
    """Return the pagination cursor as a positive int, or None when absent."""

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    before = _coerce_int(raw)
    if before is None or before < 1:
        logger.info("before_invalid: %r", raw)
        raise InvalidArgumentError("Parameter 'before' must be a positive match id.")
    return before


def validate_user(raw: Optional[str]) -> Optional[str]:
    """Trim the user name; empty means all users."""

    if raw is None:
        return None
    user = str(raw).strip()
    return user or None


def decode_match_summaries(payload: Any) -> Tuple[Optional[List[MatchSummary]], Optional[str]]:
    """Decode a match listing page. Every element needs an int id and an object/array vod."""

    if not isinstance(payload, list):
        return None, "Expected an array of basic match data but got: " + _excerpt(payload)

    summaries: List[MatchSummary] = []
    for item in payload:
        if (
            not isinstance(item, dict)
            or not _is_int(item.get("id"))
            or not isinstance(item.get("vod"), (dict, list))
        ):
            return None, "Expected an array of basic match data but got: " + _excerpt(payload)
        vod = item["vod"]
        # upstream sends [] or {} for "no vod"; only a non-empty array counts
        summaries.append(MatchSummary(id=item["id"], has_vod=isinstance(vod, list) and len(vod) > 0))
    return summaries, None


def _decode_timeline(raw: Any) -> Optional[TimelineEvent]:
    if (
        not isinstance(raw, dict)
        or not isinstance(raw.get("uuid"), str)
        or not isinstance(raw.get("type"), str)
        or not _is_number(raw.get("time"))
        or raw["time"] < 0
    ):
        return None
    return TimelineEvent(player_uuid=raw["uuid"], offset_ms=raw["time"], kind=raw["type"])


def _decode_vod(raw: Any) -> Optional[VodRef]:
    if (
        not isinstance(raw, dict)
        or not isinstance(raw.get("uuid"), str)
        or not isinstance(raw.get("url"), str)
        or not _is_number(raw.get("startsAt"))
    ):
        return None
    return VodRef(player_uuid=raw["uuid"], url=raw["url"], vod_start_unix=raw["startsAt"])


def _decode_player(raw: Any) -> Optional[PlayerRef]:
    if (
        not isinstance(raw, dict)
        or not isinstance(raw.get("uuid"), str)
        or not isinstance(raw.get("nickname"), str)
    ):
        return None
    return PlayerRef(player_uuid=raw["uuid"], nickname=raw["nickname"])


def decode_match_record(payload: Any) -> Tuple[Optional[MatchRecord], Optional[str]]:
    """Decode a full match record, rejecting any missing or mistyped required field."""

    def fail(reason: str):
        return None, f"Expected a MatchData object ({reason}) but got: {_excerpt(payload)}"

    if not isinstance(payload, dict):
        return fail("not an object")
    if not _is_int(payload.get("id")):
        return fail("id")
    if not _is_number(payload.get("date")):
        return fail("date")
    result = payload.get("result")
    if not isinstance(result, dict) or not _is_number(result.get("time")):
        return fail("result.time")
    for key in ("timelines", "vod", "players"):
        if not isinstance(payload.get(key), list):
            return fail(key)

    timelines = [_decode_timeline(raw) for raw in payload["timelines"]]
    if any(ev is None for ev in timelines):
        return fail("timelines entry")
    vods = [_decode_vod(raw) for raw in payload["vod"]]
    if any(v is None for v in vods):
        return fail("vod entry")
    players = [_decode_player(raw) for raw in payload["players"]]
    if any(p is None for p in players):
        return fail("players entry")

    seen = set()
    for vod in vods:
        if vod.player_uuid in seen:
            return fail("duplicate vod uuid")
        seen.add(vod.player_uuid)

    record = MatchRecord(
        id=payload["id"],
        start_unix=payload["date"],
        duration_ms=result["time"],
        timeline_events=tuple(timelines),
        vods=tuple(vods),
        players=tuple(players),
    )
    return record, None
