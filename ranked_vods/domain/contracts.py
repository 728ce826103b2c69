from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


class Scope(enum.Enum):
    ALL_USERS = "all"
    SINGLE_USER = "user"


@dataclass(frozen=True)
class MatchSummary:
    id: int
    has_vod: bool


@dataclass(frozen=True)
class TimelineEvent:
    player_uuid: str
    offset_ms: float          # from match start
    kind: str                 # upstream "type", e.g. "projectelo.timeline.death"


@dataclass(frozen=True)
class VodRef:
    player_uuid: str
    url: str
    vod_start_unix: float


@dataclass(frozen=True)
class PlayerRef:
    player_uuid: str
    nickname: str


@dataclass(frozen=True)
class MatchRecord:
    """A finished match. Immutable upstream, so safe to cache forever.

    ``start_unix`` carries the upstream ``date`` field, which is the time the
    match was reported (its end), not the time it began.
    """

    id: int
    start_unix: float
    duration_ms: float
    timeline_events: Tuple[TimelineEvent, ...] = ()
    vods: Tuple[VodRef, ...] = ()
    players: Tuple[PlayerRef, ...] = ()

    def to_payload(self) -> Dict[str, Any]:
        """Return the upstream wire shape of this record."""

        return {
            "id": self.id,
            "date": self.start_unix,
            "result": {"time": self.duration_ms},
            "timelines": [
                {"uuid": ev.player_uuid, "time": ev.offset_ms, "type": ev.kind}
                for ev in self.timeline_events
            ],
            "vod": [
                {"uuid": v.player_uuid, "url": v.url, "startsAt": v.vod_start_unix}
                for v in self.vods
            ],
            "players": [
                {"uuid": p.player_uuid, "nickname": p.nickname} for p in self.players
            ],
        }


@dataclass(frozen=True)
class DeathEvent:
    nickname: str
    wall_clock_label: str
    vod_link: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "nickname": self.nickname,
            "time": self.wall_clock_label,
            "link": self.vod_link,
        }


@dataclass(frozen=True)
class MatchIdPage:
    ids: List[int] = field(default_factory=list)
    next_cursor: Optional[int] = None


@dataclass
class VodPage:
    """One page of death links plus the cursor for the next (older) page."""

    events: List[DeathEvent] = field(default_factory=list)
    next_cursor: Optional[int] = None
    season: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events": [ev.to_dict() for ev in self.events],
            "next_cursor": self.next_cursor,
            "season": self.season,
        }
