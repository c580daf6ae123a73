"""
Unit tests for RetryAnchorUseCase and VerifyProofUseCase
"""

import pytest
from unittest.mock import AsyncMock
from datetime import datetime, UTC

from src.app.use_cases.proofs import RetryAnchorUseCase, VerifyProofUseCase
from src.domain.entities import AnchorStatus, OutboxEventType, Proof, Session
from src.domain.usage_record import UsageRecord, build_anchor_payload
from tests.fakes import FakeLedgerClient, InMemoryBlobStorage


def _proof(status=AnchorStatus.error, **overrides) -> Proof:
    values = dict(
        id="sess-1",
        session_id="sess-1",
        user_id="user-1",
        hash="0" * 64,
        storage_ref="sessionLog/user-1/1_sess-1.json",
        status=status,
        error_message="timeout" if status == AnchorStatus.error else None,
    )
    values.update(overrides)
    return Proof(**values)


@pytest.mark.asyncio
async def test_retry_anchor_rearms_failed_proof(mock_uow):
    # Arrange
    proof = _proof()
    session = Session(
        id="sess-1",
        user_id="user-1",
        seat_id="pc01",
        active=False,
        anchor_status=AnchorStatus.error,
        anchor_error="timeout",
    )
    mock_uow.proofs.get_by_id = AsyncMock(return_value=proof)
    mock_uow.proofs.update = AsyncMock()
    mock_uow.sessions.get_by_id = AsyncMock(return_value=session)
    mock_uow.sessions.update = AsyncMock()
    mock_uow.outbox_events.create = AsyncMock()

    # Act
    result = await RetryAnchorUseCase(mock_uow).execute("sess-1")

    # Assert
    assert result.is_ok()
    assert result.value.status == "pending"
    assert proof.tx_id is None
    assert proof.error_message is None
    assert session.anchor_status == AnchorStatus.pending
    assert session.anchor_error is None

    event = mock_uow.outbox_events.create.call_args[0][0]
    assert event.event_type == OutboxEventType.session_ended
    assert event.aggregate_id == "sess-1"
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_retry_anchor_rejects_confirmed_proof(mock_uow):
    mock_uow.proofs.get_by_id = AsyncMock(return_value=_proof(status=AnchorStatus.confirmed))
    mock_uow.outbox_events.create = AsyncMock()

    result = await RetryAnchorUseCase(mock_uow).execute("sess-1")

    assert result.is_err()
    assert result.error.code == "PROOF_NOT_RETRYABLE"
    mock_uow.outbox_events.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_retry_anchor_not_found(mock_uow):
    mock_uow.proofs.get_by_id = AsyncMock(return_value=None)

    result = await RetryAnchorUseCase(mock_uow).execute("missing")

    assert result.is_err()
    assert result.error.code == "PROOF_NOT_FOUND"


def _stored_record():
    record = UsageRecord(
        session_id="sess-1",
        user_id="user-1",
        seat_id="pc01",
        start_time=datetime(2024, 5, 10, 9, 0, tzinfo=UTC),
        end_time=datetime(2024, 5, 10, 10, 30, tzinfo=UTC),
        hour_blocks=2,
    )
    storage = InMemoryBlobStorage()
    storage.blobs[record.storage_path()] = record.canonical_bytes()
    return record, storage


@pytest.mark.asyncio
async def test_verify_proof_matches_blob_and_ledger(mock_uow):
    record, storage = _stored_record()
    ledger = FakeLedgerClient()
    tx_id = await ledger.submit_transaction(
        build_anchor_payload("sess-1", record.digest(), record.to_dict())
    )
    proof = _proof(
        status=AnchorStatus.confirmed,
        hash=record.digest(),
        storage_ref=record.storage_path(),
        tx_id=tx_id,
    )
    mock_uow.proofs.get_by_id = AsyncMock(return_value=proof)

    result = await VerifyProofUseCase(mock_uow, storage, ledger).execute("sess-1")

    assert result.is_ok()
    response = result.value
    assert response.blob_matches is True
    assert response.computed_hash == record.digest()
    assert response.ledger_hash == record.digest()
    assert response.ledger_matches is True


@pytest.mark.asyncio
async def test_verify_proof_detects_tampered_blob(mock_uow):
    record, storage = _stored_record()
    tampered = record.canonical_bytes().replace(b'"hourBlocks":2', b'"hourBlocks":1')
    storage.blobs[record.storage_path()] = tampered
    proof = _proof(
        status=AnchorStatus.confirmed, hash=record.digest(), storage_ref=record.storage_path()
    )
    mock_uow.proofs.get_by_id = AsyncMock(return_value=proof)

    result = await VerifyProofUseCase(mock_uow, storage).execute("sess-1")

    assert result.is_ok()
    assert result.value.blob_matches is False
    assert result.value.ledger_matches is None


@pytest.mark.asyncio
async def test_verify_proof_missing_blob(mock_uow):
    mock_uow.proofs.get_by_id = AsyncMock(return_value=_proof(status=AnchorStatus.confirmed))

    result = await VerifyProofUseCase(mock_uow, InMemoryBlobStorage()).execute("sess-1")

    assert result.is_err()
    assert result.error.code == "BLOB_NOT_FOUND"
