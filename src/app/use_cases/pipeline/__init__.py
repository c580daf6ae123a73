"""
Pipeline Use Cases

Outbox dispatch connecting the session ledger, proof anchor and
settlement bridge.
"""

from .dispatch_pending_events_use_case import (
    DispatchPendingEventsUseCase,
    DispatchResponse,
    EventHandler,
    PendingEvent,
)

__all__ = [
    "DispatchPendingEventsUseCase",
    "DispatchResponse",
    "EventHandler",
    "PendingEvent",
]
