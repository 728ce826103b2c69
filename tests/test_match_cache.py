import json
import os
import threading
import time

import pytest

from ranked_vods import match_cache
from ranked_vods.errors import ProtocolError, UpstreamError
from ranked_vods.match_cache import MatchCache
from ranked_vods.validators import decode_match_record

from payloads import make_match_payload


class CountingFetcher:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.payload


@pytest.fixture
def cache(tmp_path):
    return MatchCache(tmp_path / "cache")


@pytest.fixture(autouse=True)
def _reset_write_warnings():
    match_cache._write_warnings.reset()


def test_second_call_is_served_from_disk(cache):
    fetcher = CountingFetcher(make_match_payload(5))

    first = cache.get_match(5, fetcher)
    second = cache.get_match(5, fetcher)

    assert fetcher.calls == 1
    assert first == second
    assert os.path.exists(cache.path_for(5))


def test_round_trip_preserves_record(cache):
    payload = make_match_payload(11)
    original, _ = decode_match_record(payload)

    assert cache.store(original.to_payload()) is True
    assert cache.lookup(11) == original


def test_lookup_miss_returns_none(cache):
    assert cache.lookup(404) is None


def test_directory_created_on_demand(tmp_path):
    cache = MatchCache(tmp_path / "a" / "b")
    cache.get_match(5, CountingFetcher(make_match_payload(5)))
    assert (tmp_path / "a" / "b" / "match_5.json").is_file()


def test_persisted_file_is_raw_validated_payload(cache):
    payload = make_match_payload(5)
    cache.get_match(5, CountingFetcher(payload))
    with open(cache.path_for(5), encoding="utf-8") as f:
        assert json.load(f) == payload


@pytest.mark.parametrize(
    "content",
    ["{not json", json.dumps({"id": 5, "date": "x"}), json.dumps(make_match_payload(6))],
)
def test_corrupt_entry_is_a_miss_and_gets_replaced(cache, content):
    os.makedirs(cache.cache_dir, exist_ok=True)
    with open(cache.path_for(5), "w", encoding="utf-8") as f:
        f.write(content)
    fetcher = CountingFetcher(make_match_payload(5))

    record = cache.get_match(5, fetcher)

    assert fetcher.calls == 1
    assert record.id == 5
    assert cache.lookup(5) == record


def test_write_failure_still_returns_record(cache, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(match_cache.tempfile, "mkstemp", boom)
    fetcher = CountingFetcher(make_match_payload(5))

    record = cache.get_match(5, fetcher)

    assert record.id == 5
    assert cache.lookup(5) is None
    assert "match_cache_write_failed" in caplog.text
    # nothing cached, so the next call fetches again
    cache.get_match(5, fetcher)
    assert fetcher.calls == 2


def test_invalid_fetched_payload_raises_protocol_error(cache):
    with pytest.raises(ProtocolError):
        cache.get_match(5, CountingFetcher({"id": 5}))
    assert not os.path.exists(cache.path_for(5))


def test_fetch_errors_propagate(cache):
    def failing():
        raise UpstreamError("MCSRRanked", "down")

    with pytest.raises(UpstreamError):
        cache.get_match(5, failing)
    assert cache._locks == {}


def test_concurrent_misses_for_one_id_fetch_once(cache):
    payload = make_match_payload(5)
    calls = []

    def slow_fetcher():
        calls.append(1)
        time.sleep(0.1)
        return payload

    results = []
    threads = [threading.Thread(target=lambda: results.append(cache.get_match(5, slow_fetcher))) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert results[0] == results[1]


def test_per_id_locks_are_released_after_misses(cache):
    for match_id in range(1, 51):
        cache.get_match(match_id, CountingFetcher(make_match_payload(match_id)))
    assert cache._locks == {}
