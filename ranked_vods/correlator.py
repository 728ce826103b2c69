"""
Pair death timeline events with the dying player's VOD.

Three clocks are involved:

* the match record's ``date``, which upstream sets when the match *ends*,
  together with its duration ``result.time`` (ms);
* each timeline event's offset (ms) from the match start;
* each VOD's own ``startsAt`` unix timestamp.

Everything here is pure and deterministic.
"""

from __future__ import annotations

import math
from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from .constants import DEATH_TIMELINE_TYPE, LABEL_TIMEZONE, VOD_TIMESTAMP_PADDING
from .domain.contracts import DeathEvent, MatchRecord, TimelineEvent, VodRef


@lru_cache(maxsize=4)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def death_events(match: MatchRecord) -> List[TimelineEvent]:
    return [ev for ev in match.timeline_events if ev.kind == DEATH_TIMELINE_TYPE]


def game_start_unix(match: MatchRecord) -> float:
    return match.start_unix - match.duration_ms / 1000


def event_absolute_unix(match: MatchRecord, event: TimelineEvent) -> float:
    return game_start_unix(match) + event.offset_ms / 1000


def vod_timestamp(absolute_unix: float, vod: VodRef, padding: int = VOD_TIMESTAMP_PADDING) -> int:
    """Seconds into the VOD, minus the lead-in padding.

    Not clamped: a death within ``padding`` seconds of the VOD start yields a
    negative value.
    """

    return math.floor(absolute_unix - vod.vod_start_unix) - padding


def wall_clock_label(absolute_unix: float, tz: str = LABEL_TIMEZONE) -> str:
    """Render e.g. ``5.3.2024, 14:03:05`` (German numeric style, no zero-padded day/month)."""

    dt = datetime.fromtimestamp(absolute_unix, tz=_zone(tz))
    return f"{dt.day}.{dt.month}.{dt.year}, {dt:%H:%M:%S}"


def vod_link(url: str, seconds: int) -> str:
    return f"{url}?t={seconds}s"


def find_vod(match: MatchRecord, player_uuid: str) -> Optional[VodRef]:
    for vod in match.vods:
        if vod.player_uuid == player_uuid:
            return vod
    return None


def correlate(match: MatchRecord) -> List[DeathEvent]:
    """Return one DeathEvent per death whose player published a VOD, in timeline order."""

    deaths = death_events(match)
    if not deaths:
        return []

    nicknames: Dict[str, str] = {p.player_uuid: p.nickname for p in match.players}
    out: List[DeathEvent] = []
    for event in deaths:
        vod = find_vod(match, event.player_uuid)
        if vod is None:
            continue
        absolute = event_absolute_unix(match, event)
        out.append(
            DeathEvent(
                nickname=nicknames.get(event.player_uuid, event.player_uuid),
                wall_clock_label=wall_clock_label(absolute),
                vod_link=vod_link(vod.url, vod_timestamp(absolute, vod)),
            )
        )
    return out
