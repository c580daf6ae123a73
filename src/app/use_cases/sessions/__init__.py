"""
Session Ledger Use Cases

Seat occupancy: start and end sessions.
"""

from .dtos import SessionResponse
from .end_session_use_case import EndSessionUseCase, hour_blocks_for
from .start_session_use_case import StartSessionUseCase

__all__ = [
    "StartSessionUseCase",
    "EndSessionUseCase",
    "SessionResponse",
    "hour_blocks_for",
]
