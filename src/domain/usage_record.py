"""
Usage Record Canonicalization

Builds the immutable, content-addressed summary of a finished session and
its canonical serialization. External verifiers recompute the hash from the
stored blob, so the byte output must stay stable:

- keys sorted ascending, no insignificant whitespace, UTF-8
- timestamps ISO-8601 UTC with millisecond precision and a ``Z`` suffix
- numbers as-is, nulls as ``null``
"""

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from src.domain.base import as_utc

ANCHOR_PAYLOAD_TYPE = "seat_usage"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def canonical_json_bytes(payload: Any) -> bytes:
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class UsageRecord:
    session_id: str
    user_id: str
    seat_id: str
    start_time: datetime
    end_time: Optional[datetime]
    hour_blocks: int

    @classmethod
    def from_session(cls, session) -> "UsageRecord":
        return cls(
            session_id=session.id,
            user_id=session.user_id,
            seat_id=session.seat_id,
            start_time=session.start_time,
            end_time=session.end_time,
            hour_blocks=session.hour_blocks,
        )

    def to_dict(self) -> dict:
        return {
            "endTime": format_timestamp(self.end_time),
            "hourBlocks": self.hour_blocks,
            "seatId": self.seat_id,
            "sessionId": self.session_id,
            "startTime": format_timestamp(self.start_time),
            "userId": self.user_id,
        }

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.to_dict())

    def digest(self) -> str:
        return sha256_hex(self.canonical_bytes())

    def storage_path(self) -> str:
        return usage_record_path(self)


def usage_record_path(record: UsageRecord) -> str:
    """sessionLog/{userId}/{endTimeMillis}_{sessionId}.json"""
    end_time = as_utc(record.end_time)
    millis = int(end_time.timestamp() * 1000) if end_time else 0
    return f"sessionLog/{record.user_id}/{millis}_{record.session_id}.json"


def build_anchor_payload(
    proof_id: str, digest: str, record: dict, inline_limit: int = 0
) -> bytes:
    """
    Ledger transaction data for a proof.

    The full record is embedded only when its canonical form fits in
    inline_limit bytes; otherwise only the digest is anchored.
    """
    payload = {"hash": digest, "proofId": proof_id, "type": ANCHOR_PAYLOAD_TYPE}
    if inline_limit > 0 and len(canonical_json_bytes(record)) <= inline_limit:
        payload["record"] = record
    return canonical_json_bytes(payload)


def decode_anchor_payload(hex_data: str) -> Optional[dict]:
    """Decode hex transaction input back into the anchor payload"""
    clean = hex_data[2:] if hex_data.startswith("0x") else hex_data
    try:
        decoded = json.loads(bytes.fromhex(clean).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    return decoded if isinstance(decoded, dict) else None
