"""
Anchor Usage Record Use Case

Stores the canonical usage record of an ended session, creates its Proof
and anchors the digest on the public ledger.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.app.services.blob_storage import IBlobStorage
from src.app.services.ledger_client import ILedgerClient, LedgerReceipt
from src.app.services.transaction import read_modify_write
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import AnchorStatus, Proof
from src.domain.errors import ProviderError
from src.domain.usage_record import UsageRecord, build_anchor_payload, sha256_hex
from src.libs.result import Error, Result, Return

from .dtos import AnchorResponse

logger = logging.getLogger(__name__)


@dataclass
class _PreparedAnchor:
    response: AnchorResponse
    payload: Optional[bytes] = None


class AnchorUsageRecordUseCase:
    """
    Use case for anchoring one session's usage record.

    Business Rules:
    - Only ended sessions are anchored
    - Entry guard: act only while the proof is pending and has no tx_id,
      so redelivered triggers never submit a second transaction
    - Blob write + Proof{pending} are committed before the ledger call
    - Exactly one confirmation is awaited; success -> confirmed,
      any ledger failure or timeout -> error (terminal for this attempt)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        storage: IBlobStorage,
        ledger: ILedgerClient,
        inline_limit: int = 0,
        confirmations: int = 1,
    ):
        self.uow = uow
        self.storage = storage
        self.ledger = ledger
        self.inline_limit = inline_limit
        self.confirmations = confirmations

    async def execute(
        self, session_id: str, now: Optional[datetime] = None
    ) -> Result[AnchorResponse]:
        """
        Execute anchor use case.

        Args:
            session_id: Ended session whose usage record is anchored
            now: Proof creation time (defaults to current UTC time)

        Returns:
            Result with AnchorResponse (status confirmed / error, or
            skipped=True when the guard blocked the attempt), or Error
        """
        prepared = await read_modify_write(
            self.uow, lambda: self._prepare(session_id, now or utc_now())
        )
        if prepared.is_err():
            return prepared

        if prepared.value.payload is None:
            return Return.ok(prepared.value.response)

        proof_id = prepared.value.response.proof_id
        logger.info(
            f"Submitting ledger transaction for proof {proof_id}, "
            f"payload {len(prepared.value.payload)} bytes"
        )
        tx_id = None
        try:
            tx_id = await self.ledger.submit_transaction(prepared.value.payload)
            logger.info(f"Ledger transaction sent for proof {proof_id}: {tx_id}")
            receipt = await self.ledger.wait_for_confirmation(tx_id, self.confirmations)
        except ProviderError as exc:
            logger.error(
                f"Anchoring failed for proof {proof_id} (submitted tx: {tx_id}): {exc.message}"
            )
            return await self._record_failure(proof_id, exc.message, tx_id)

        return await self._record_confirmation(proof_id, receipt)

    async def _prepare(self, session_id: str, now: datetime) -> Result[_PreparedAnchor]:
        session = await self.uow.sessions.get_by_id(session_id)
        if not session:
            return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

        if session.active or session.end_time is None:
            return Return.err(Error("SESSION_NOT_ENDED", "Session has not ended yet"))

        proof = await self.uow.proofs.get_by_id(session.id)
        if proof and (proof.status != AnchorStatus.pending or proof.tx_id):
            logger.info(
                f"Skipping anchor for proof {proof.id}: status={proof.status.value}, "
                f"tx_id={proof.tx_id}"
            )
            return Return.ok(_PreparedAnchor(AnchorResponse.from_entity(proof, skipped=True)))

        record = UsageRecord.from_session(session)
        blob = record.canonical_bytes()
        digest = sha256_hex(blob)
        storage_ref = await self.storage.write(record.storage_path(), blob)

        if proof is None:
            proof = Proof(
                id=session.id,
                session_id=session.id,
                user_id=session.user_id,
                hash=digest,
                storage_ref=storage_ref,
                status=AnchorStatus.pending,
                created_at=now,
            )
            await self.uow.proofs.create(proof)
        else:
            proof.hash = digest
            proof.storage_ref = storage_ref
            await self.uow.proofs.update(proof)

        session.storage_ref = storage_ref
        session.usage_hash = digest
        session.anchor_status = AnchorStatus.pending
        await self.uow.sessions.update(session)

        payload = build_anchor_payload(proof.id, digest, record.to_dict(), self.inline_limit)
        return Return.ok(_PreparedAnchor(AnchorResponse.from_entity(proof), payload))

    async def _record_confirmation(
        self, proof_id: str, receipt: LedgerReceipt
    ) -> Result[AnchorResponse]:
        async with self.uow:
            proof = await self.uow.proofs.get_by_id(proof_id)
            if not proof:
                return Return.err(Error("PROOF_NOT_FOUND", "Proof not found"))

            proof.status = AnchorStatus.confirmed
            proof.tx_id = receipt.tx_id
            proof.block_number = receipt.block_number
            proof.chain_id = receipt.chain_id
            proof.error_message = None
            proof.confirmed_at = utc_now()
            await self.uow.proofs.update(proof)

            session = await self.uow.sessions.get_by_id(proof.session_id)
            if session:
                session.anchor_status = AnchorStatus.confirmed
                session.anchor_tx_id = receipt.tx_id
                session.anchor_block_number = receipt.block_number
                session.anchor_error = None
                await self.uow.sessions.update(session)

            await self.uow.commit()

        logger.info(
            f"Proof {proof_id} confirmed: tx={receipt.tx_id}, block={receipt.block_number}"
        )
        return Return.ok(AnchorResponse.from_entity(proof))

    async def _record_failure(
        self, proof_id: str, message: str, submitted_tx_id: Optional[str] = None
    ) -> Result[AnchorResponse]:
        """
        Record a failed attempt. A transaction that was sent but not confirmed
        is kept in submitted_tx_id; tx_id stays unset so a retry can resubmit.
        """
        async with self.uow:
            proof = await self.uow.proofs.get_by_id(proof_id)
            if not proof:
                return Return.err(Error("PROOF_NOT_FOUND", "Proof not found"))

            proof.status = AnchorStatus.error
            proof.error_message = message
            if submitted_tx_id:
                proof.submitted_tx_id = submitted_tx_id
            await self.uow.proofs.update(proof)

            session = await self.uow.sessions.get_by_id(proof.session_id)
            if session:
                session.anchor_status = AnchorStatus.error
                session.anchor_error = message
                await self.uow.sessions.update(session)

            await self.uow.commit()

        return Return.ok(AnchorResponse.from_entity(proof))
