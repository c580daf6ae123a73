"""
Unit tests for usage record canonicalization and hashing.
The stored bytes are what external verifiers hash, so these pin the format.
"""

import hashlib
import json
from datetime import UTC, datetime, timedelta, timezone

from src.domain.usage_record import (
    UsageRecord,
    build_anchor_payload,
    canonical_json_bytes,
    decode_anchor_payload,
    format_timestamp,
    usage_record_path,
)

JST = timezone(timedelta(hours=9))


def _record(**overrides) -> UsageRecord:
    values = dict(
        session_id="sess-1",
        user_id="user-1",
        seat_id="pc01",
        start_time=datetime(2024, 5, 10, 9, 0, 0, tzinfo=UTC),
        end_time=datetime(2024, 5, 10, 10, 30, 0, 123456, tzinfo=UTC),
        hour_blocks=2,
    )
    values.update(overrides)
    return UsageRecord(**values)


def test_canonical_bytes_sorted_keys_no_whitespace():
    record = _record()

    assert record.canonical_bytes() == (
        b'{"endTime":"2024-05-10T10:30:00.123Z","hourBlocks":2,"seatId":"pc01",'
        b'"sessionId":"sess-1","startTime":"2024-05-10T09:00:00.000Z","userId":"user-1"}'
    )


def test_digest_is_sha256_of_canonical_bytes():
    record = _record()

    assert record.digest() == hashlib.sha256(record.canonical_bytes()).hexdigest()
    assert len(record.digest()) == 64


def test_digest_is_deterministic_across_instances():
    assert _record().digest() == _record().digest()


def test_digest_changes_when_any_field_changes():
    assert _record().digest() != _record(hour_blocks=3).digest()
    assert _record().digest() != _record(seat_id="pc02").digest()


def test_timestamps_are_converted_to_utc():
    local_start = datetime(2024, 5, 10, 18, 0, 0, tzinfo=JST)

    assert format_timestamp(local_start) == "2024-05-10T09:00:00.000Z"
    assert _record(start_time=local_start).digest() == _record().digest()


def test_naive_timestamps_are_treated_as_utc():
    assert format_timestamp(datetime(2024, 5, 10, 9, 0, 0)) == "2024-05-10T09:00:00.000Z"


def test_null_values_are_serialized_as_null():
    record = _record(end_time=None)

    assert b'"endTime":null' in record.canonical_bytes()


def test_canonical_json_keeps_non_ascii_as_utf8():
    assert canonical_json_bytes({"name": "席"}) == '{"name":"席"}'.encode("utf-8")


def test_usage_record_path_uses_end_time_millis():
    record = _record(end_time=datetime(2024, 5, 10, 10, 30, 0, tzinfo=UTC))

    millis = int(datetime(2024, 5, 10, 10, 30, 0, tzinfo=UTC).timestamp() * 1000)
    assert usage_record_path(record) == f"sessionLog/user-1/{millis}_sess-1.json"
    assert record.storage_path() == usage_record_path(record)


def test_anchor_payload_carries_hash_only_by_default():
    record = _record()

    payload = json.loads(build_anchor_payload("sess-1", record.digest(), record.to_dict()))

    assert payload == {"hash": record.digest(), "proofId": "sess-1", "type": "seat_usage"}


def test_anchor_payload_inlines_small_records():
    record = _record()

    payload = json.loads(
        build_anchor_payload("sess-1", record.digest(), record.to_dict(), inline_limit=1024)
    )

    assert payload["record"] == record.to_dict()


def test_decode_anchor_payload_from_transaction_input():
    record = _record()
    data = build_anchor_payload("sess-1", record.digest(), record.to_dict())

    decoded = decode_anchor_payload("0x" + data.hex())

    assert decoded["hash"] == record.digest()


def test_decode_anchor_payload_rejects_garbage():
    assert decode_anchor_payload("0xzz") is None
    assert decode_anchor_payload("0x" + b"not json".hex()) is None
