"""
Dispatch Pending Events Use Case

Drains the outbox: hands every pending event to the handler registered for
its type and records the delivery outcome.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import OutboxEventStatus, OutboxEventType
from src.libs.result import Result, Return

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class PendingEvent:
    """Detached view of an outbox row handed to handlers"""

    id: str
    event_type: OutboxEventType
    aggregate_id: str
    payload: Optional[Dict[str, Any]]
    attempts: int


EventHandler = Callable[[PendingEvent], Awaitable[Result]]


class DispatchResponse(BaseModel):
    processed: int = 0
    retrying: int = 0
    failed: int = 0


class DispatchPendingEventsUseCase:
    """
    Business Rules:
    - Oldest pending events first, at most batch_size per run
    - An event is marked processed only after its handler returned ok
    - A handler error or exception counts one attempt; after max_attempts
      the event is marked failed and left for manual inspection
    - Events without a handler are marked failed immediately
    """

    def __init__(
        self,
        uow: UnitOfWork,
        handlers: Dict[OutboxEventType, EventHandler],
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.uow = uow
        self.handlers = handlers
        self.batch_size = batch_size
        self.max_attempts = max_attempts

    async def execute(self) -> Result[DispatchResponse]:
        response = DispatchResponse()

        async with self.uow:
            rows = await self.uow.outbox_events.get_pending(limit=self.batch_size)
            events: List[PendingEvent] = [
                PendingEvent(
                    id=row.id,
                    event_type=row.event_type,
                    aggregate_id=row.aggregate_id,
                    payload=row.payload,
                    attempts=row.attempts,
                )
                for row in rows
            ]

        for event in events:
            error = await self._deliver(event)
            status = await self._record_outcome(event, error)
            if status == OutboxEventStatus.processed:
                response.processed += 1
            elif status == OutboxEventStatus.failed:
                response.failed += 1
            else:
                response.retrying += 1

        if events:
            logger.info(
                f"Dispatched {len(events)} event(s): processed={response.processed}, "
                f"retrying={response.retrying}, failed={response.failed}"
            )
        return Return.ok(response)

    async def _deliver(self, event: PendingEvent) -> Optional[str]:
        """Run the handler; returns an error description, or None on success"""
        handler = self.handlers.get(event.event_type)
        if handler is None:
            return f"No handler for event type {event.event_type.value}"

        try:
            result = await handler(event)
        except Exception as exc:
            logger.exception(
                f"Handler for {event.event_type.value} {event.aggregate_id} raised"
            )
            return f"{type(exc).__name__}: {exc}"

        if result.is_err():
            logger.warning(
                f"Handler for {event.event_type.value} {event.aggregate_id} failed: "
                f"{result.error.code} {result.error.message}"
            )
            return f"{result.error.code}: {result.error.message}"
        return None

    async def _record_outcome(
        self, event: PendingEvent, error: Optional[str]
    ) -> OutboxEventStatus:
        async with self.uow:
            row = await self.uow.outbox_events.get_by_id(event.id)
            if not row:
                return OutboxEventStatus.failed

            if error is None:
                row.status = OutboxEventStatus.processed
                row.processed_at = utc_now()
                row.last_error = None
            else:
                row.attempts += 1
                row.last_error = error
                if row.attempts >= self.max_attempts or event.event_type not in self.handlers:
                    row.status = OutboxEventStatus.failed

            await self.uow.outbox_events.update(row)
            await self.uow.commit()
            return row.status
