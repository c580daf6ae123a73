"""
Settlement Bridge DTOs
"""

from typing import Optional

from pydantic import BaseModel


class SettlementResponse(BaseModel):
    invoice_id: str
    status: str
    external_ref: Optional[str] = None
    external_url: Optional[str] = None
    skipped: bool = False


class ReconcileResponse(BaseModel):
    event_id: str
    event_type: str
    invoice_id: Optional[str] = None
    status: Optional[str] = None
    changed: bool = False
    ignored: bool = False
