"""
Admin API Routes - Operator Endpoints

Manual triggers for the billing pipeline. Authentication is via Admin API
Key, not member tokens.
"""

from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.payment_gateway import IPaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.invoices import GenerateInvoicesResponse, GenerateMonthlyInvoicesUseCase
from src.app.use_cases.members import IssueMemberTokenUseCase, MemberTokenResponse
from src.app.use_cases.proofs import AnchorResponse, RetryAnchorUseCase
from src.app.use_cases.settlement import SettleInvoiceUseCase, SettlementResponse
from src.depends import get_payment_gateway, get_unit_of_work, get_uow_factory

router = APIRouter(prefix="/admin", tags=["Admin"])


class GenerateInvoicesRequest(BaseModel):
    """Manual invoice run; defaults to the previous month for all users"""

    model_config = ConfigDict(populate_by_name=True)

    period: Optional[str] = Field(None, description="Billing period as YYYY-MM")
    user_ids: Optional[List[str]] = Field(None, alias="userIds")


@router.post(
    "/invoices/generate",
    status_code=status.HTTP_200_OK,
    response_model=GenerateInvoicesResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def generate_invoices(
    request: GenerateInvoicesRequest,
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
):
    """
    Generate Monthly Invoices

    Requires: X-Admin-API-Key header

    Raises:
        - 400 Bad Request: INVALID_PERIOD
    """
    use_case = GenerateMonthlyInvoicesUseCase(
        uow_factory,
        concurrency=ApplicationConfig.INVOICE_CONCURRENCY,
        timezone=ApplicationConfig.BILLING_TIMEZONE,
        max_attempts=ApplicationConfig.TRANSACTION_MAX_ATTEMPTS,
        retry_base_delay=ApplicationConfig.TRANSACTION_RETRY_BASE_DELAY,
    )
    result = await use_case.execute(period_string=request.period, user_ids=request.user_ids)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/invoices/{invoice_id}/settle",
    status_code=status.HTTP_200_OK,
    response_model=SettlementResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def settle_invoice(
    invoice_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    gateway: IPaymentGateway = Depends(get_payment_gateway),
):
    """
    Settle Invoice

    Requires: X-Admin-API-Key header

    Raises:
        - 404 Not Found: INVOICE_NOT_FOUND
        - 412 Precondition Failed: PAYMENT_SETUP_INCOMPLETE
        - 502 Bad Gateway: PROVIDER_UNAVAILABLE, PROVIDER_REJECTED
    """
    use_case = SettleInvoiceUseCase(
        uow,
        gateway,
        max_attempts=ApplicationConfig.PAYMENT_MAX_ATTEMPTS,
        retry_base_delay=ApplicationConfig.PAYMENT_RETRY_BASE_DELAY,
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/proofs/{proof_id}/retry",
    status_code=status.HTTP_200_OK,
    response_model=AnchorResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def retry_anchor(
    proof_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Retry Anchor

    Re-arms a failed proof; the worker anchors it again.

    Requires: X-Admin-API-Key header

    Raises:
        - 404 Not Found: PROOF_NOT_FOUND
        - 409 Conflict: PROOF_NOT_RETRYABLE
    """
    result = await RetryAnchorUseCase(uow).execute(proof_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/users/{user_id}/member-token",
    status_code=status.HTTP_200_OK,
    response_model=MemberTokenResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def issue_member_token(
    user_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Issue Member Token

    Requires: X-Admin-API-Key header

    Raises:
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await IssueMemberTokenUseCase(uow).execute(user_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
