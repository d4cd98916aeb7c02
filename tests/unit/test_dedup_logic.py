import hashlib

from metriccatcher.ingest.dedup import Deduplicator, digest


def test_first_sighting_is_not_duplicate_second_is() -> None:
    dedup = Deduplicator()
    payload = b'[{"name":"a","type":"counter","value":1}]'

    assert dedup.check_and_mark(payload) is False
    assert dedup.check_and_mark(payload) is True
    assert dedup.stats == {"tracked": 1, "duplicates": 1}


def test_digest_covers_exact_bytes_only() -> None:
    long_payload = b'[{"name":"a.b.c","type":"gauge","value":12345}]'
    short_payload = b'[{"name":"a","type":"gauge","value":1}]'
    # A reused buffer would still hold the tail of the longer packet.
    stale_buffer = short_payload + long_payload[len(short_payload):]

    dedup = Deduplicator()
    dedup.check_and_mark(stale_buffer)

    assert dedup.check_and_mark(short_payload) is False
    assert digest(short_payload) == hashlib.md5(short_payload).hexdigest()


def test_repeat_is_processed_again_after_capacity_distinct_messages() -> None:
    dedup = Deduplicator(capacity=1000)
    original = b'[{"name":"app.web.requests","type":"counter","value":1}]'
    assert dedup.check_and_mark(original) is False

    for i in range(1000):
        assert dedup.check_and_mark(f"distinct-{i}".encode()) is False

    assert dedup.tracked == 1000
    assert dedup.check_and_mark(original) is False


def test_duplicate_hit_does_not_refresh_recency() -> None:
    dedup = Deduplicator(capacity=2)
    dedup.check_and_mark(b"a")
    dedup.check_and_mark(b"b")
    assert dedup.check_and_mark(b"a") is True

    dedup.check_and_mark(b"c")

    assert b"a" not in dedup
    assert b"b" in dedup
