"""
Verify Proof Use Case

Recomputes the digest of a stored usage record and compares it with the
proof and, when available, with the hash embedded in the ledger
transaction.
"""

import logging
from typing import Optional

from src.app.services.blob_storage import IBlobStorage
from src.app.services.ledger_client import ILedgerClient
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ProviderError
from src.domain.usage_record import decode_anchor_payload, sha256_hex
from src.libs.result import Error, Result, Return

from .dtos import VerifyProofResponse

logger = logging.getLogger(__name__)


class VerifyProofUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        storage: IBlobStorage,
        ledger: Optional[ILedgerClient] = None,
    ):
        self.uow = uow
        self.storage = storage
        self.ledger = ledger

    async def execute(self, proof_id: str) -> Result[VerifyProofResponse]:
        async with self.uow:
            proof = await self.uow.proofs.get_by_id(proof_id)
            if not proof:
                return Return.err(Error("PROOF_NOT_FOUND", "Proof not found"))

            stored_hash = proof.hash
            storage_ref = proof.storage_ref
            tx_id = proof.tx_id
            status = proof.status.value

        blob = await self.storage.read(storage_ref)
        if blob is None:
            return Return.err(
                Error("BLOB_NOT_FOUND", "Stored usage record is missing", reason=storage_ref)
            )

        computed_hash = sha256_hex(blob)

        ledger_hash = None
        if tx_id and self.ledger:
            try:
                tx_input = await self.ledger.get_transaction_input(tx_id)
            except ProviderError as exc:
                logger.warning(f"Could not read ledger transaction {tx_id}: {exc.message}")
                tx_input = None
            decoded = decode_anchor_payload(tx_input) if tx_input else None
            if decoded:
                ledger_hash = decoded.get("hash")

        return Return.ok(
            VerifyProofResponse(
                proof_id=proof_id,
                status=status,
                stored_hash=stored_hash,
                computed_hash=computed_hash,
                blob_matches=computed_hash == stored_hash,
                tx_id=tx_id,
                ledger_hash=ledger_hash,
                ledger_matches=(ledger_hash == stored_hash) if ledger_hash else None,
            )
        )
