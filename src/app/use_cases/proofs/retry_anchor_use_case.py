"""
Retry Anchor Use Case

Re-arms a failed proof so the anchor handler runs again.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AnchorStatus, OutboxEvent, OutboxEventType
from src.libs.result import Error, Result, Return

from .dtos import AnchorResponse

logger = logging.getLogger(__name__)


class RetryAnchorUseCase:
    """
    Use case for manually re-triggering a failed anchor.

    Business Rules:
    - Only proofs in error can be retried; confirmed proofs are final
    - Proof and session anchor fields go back to pending with no tx_id,
      which re-opens the anchor entry guard
    - A new session_ended outbox event is written in the same transaction
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, proof_id: str) -> Result[AnchorResponse]:
        async with self.uow:
            proof = await self.uow.proofs.get_by_id(proof_id)
            if not proof:
                return Return.err(Error("PROOF_NOT_FOUND", "Proof not found"))

            if proof.status != AnchorStatus.error:
                return Return.err(
                    Error(
                        "PROOF_NOT_RETRYABLE",
                        "Only failed proofs can be retried",
                        reason=f"status={proof.status.value}",
                    )
                )

            proof.status = AnchorStatus.pending
            proof.tx_id = None
            proof.block_number = None
            proof.error_message = None
            await self.uow.proofs.update(proof)

            session = await self.uow.sessions.get_by_id(proof.session_id)
            if session:
                session.anchor_status = AnchorStatus.pending
                session.anchor_error = None
                await self.uow.sessions.update(session)

            await self.uow.outbox_events.create(
                OutboxEvent(
                    event_type=OutboxEventType.session_ended,
                    aggregate_id=proof.session_id,
                    payload={"retry": True},
                )
            )

            await self.uow.commit()

        logger.info(f"Proof {proof_id} re-armed for anchoring")
        return Return.ok(AnchorResponse.from_entity(proof))
