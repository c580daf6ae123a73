from fastapi import APIRouter, Depends, status

from src.api.error import raise_for_error
from src.app.services.blob_storage import IBlobStorage
from src.app.services.ledger_client import ILedgerClient
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.proofs import VerifyProofResponse, VerifyProofUseCase
from src.depends import get_blob_storage, get_ledger_client, get_unit_of_work

router = APIRouter(prefix="/proofs", tags=["Proofs"])


@router.get(
    "/{proof_id}/verify",
    status_code=status.HTTP_200_OK,
    response_model=VerifyProofResponse,
)
async def verify_proof(
    proof_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    storage: IBlobStorage = Depends(get_blob_storage),
    ledger: ILedgerClient = Depends(get_ledger_client),
):
    """
    Verify Proof

    Recomputes the hash of the stored usage record and compares it with the
    proof and the hash anchored on the ledger.

    Raises:
        - 404 Not Found: PROOF_NOT_FOUND
        - 500 Internal Server Error: BLOB_NOT_FOUND
    """
    result = await VerifyProofUseCase(uow, storage, ledger).execute(proof_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
