from ranked_vods import correlator
from ranked_vods.domain.contracts import DeathEvent, MatchRecord, PlayerRef, TimelineEvent, VodRef
from ranked_vods.validators import decode_match_record

from payloads import DEATH, make_match_payload


def _record(**overrides):
    record, error = decode_match_record(make_match_payload(**overrides))
    assert error is None
    return record


def test_clock_reconciliation_example():
    match = _record()
    death = correlator.death_events(match)[0]

    assert correlator.game_start_unix(match) == 995
    assert correlator.event_absolute_unix(match, death) == 997
    assert correlator.vod_timestamp(997, match.vods[0], padding=0) == 7
    # padding pushes the link before the VOD start; passed through unclamped
    assert correlator.vod_timestamp(997, match.vods[0]) == -3


def test_correlate_builds_link_and_label():
    events = correlator.correlate(_record())

    assert events == [
        DeathEvent(
            nickname="Feinberg",
            wall_clock_label="1.1.1970, 01:16:37",
            vod_link="https://twitch.tv/videos/1?t=-3s",
        )
    ]


def test_vod_timestamp_floors_before_padding():
    vod = VodRef(player_uuid="p1", url="u", vod_start_unix=1_700_000_000)
    assert correlator.vod_timestamp(1_700_000_125.9, vod) == 115


def test_no_deaths_returns_empty():
    match = _record(timelines=[{"uuid": "p1", "time": 10, "type": "projectelo.timeline.reset"}])
    assert correlator.correlate(match) == []


def test_death_without_vod_is_omitted():
    match = _record(
        timelines=[
            {"uuid": "p2", "time": 1500, "type": DEATH},
            {"uuid": "p1", "time": 2000, "type": DEATH},
        ]
    )
    events = correlator.correlate(match)
    assert [ev.nickname for ev in events] == ["Feinberg"]


def test_order_follows_timeline():
    match = MatchRecord(
        id=1,
        start_unix=1_700_003_600,
        duration_ms=600_000,
        timeline_events=(
            TimelineEvent("b", 400_000, DEATH),
            TimelineEvent("a", 100_000, DEATH),
            TimelineEvent("b", 50_000, DEATH),
        ),
        vods=(VodRef("a", "https://a", 1_700_002_900), VodRef("b", "https://b", 1_700_002_950)),
        players=(PlayerRef("a", "Alpha"), PlayerRef("b", "Beta")),
    )
    links = [ev.vod_link for ev in correlator.correlate(match)]
    # game start = 1_700_003_000
    assert links == ["https://b?t=440s", "https://a?t=190s", "https://b?t=90s"]


def test_missing_player_entry_falls_back_to_uuid():
    match = _record(players=[])
    assert correlator.correlate(match)[0].nickname == "p1"


def test_wall_clock_label_uses_berlin_summer_time():
    # 2024-07-01 12:00:00 UTC
    assert correlator.wall_clock_label(1719835200) == "1.7.2024, 14:00:00"
