import logging

from fastapi import APIRouter, Depends, Request, status

from src.api.error import ClientError, raise_for_error
from src.app.services.payment_gateway import IPaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.settlement import ReconcilePaymentUseCase, ReconcileResponse
from src.depends import get_payment_gateway, get_unit_of_work
from src.domain.errors import WebhookVerificationError
from src.libs.result import Error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/payments", status_code=status.HTTP_200_OK, response_model=ReconcileResponse)
async def payment_webhook(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    gateway: IPaymentGateway = Depends(get_payment_gateway),
):
    """
    Payment Provider Webhook

    Verifies the signature and applies invoice.paid / invoice.payment_failed
    events to the matching invoice.

    Raises:
        - 400 Bad Request: INVALID_WEBHOOK
        - 404 Not Found: INVOICE_NOT_FOUND
    """
    body = await request.body()
    try:
        event = gateway.parse_webhook(request.headers, body)
    except WebhookVerificationError as exc:
        raise ClientError(Error("INVALID_WEBHOOK", str(exc)))

    logger.info(f"Payment webhook received: {event.event_type} ({event.event_id})")
    result = await ReconcilePaymentUseCase(uow).execute(event)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
