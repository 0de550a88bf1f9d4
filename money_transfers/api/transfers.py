"""
Transfer endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from .system import TransferSystem, get_transfer_system
from .schemas import TransferRequest, TransferResponse
from ..errors import TransferErrorKind


router = APIRouter()


STATUS_BY_ERROR_KIND = {
    TransferErrorKind.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    TransferErrorKind.SAME_ACCOUNT: status.HTTP_400_BAD_REQUEST,
    TransferErrorKind.CURRENCY_MISMATCH: status.HTTP_400_BAD_REQUEST,
    TransferErrorKind.INSUFFICIENT_FUNDS: status.HTTP_400_BAD_REQUEST,
    TransferErrorKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    TransferErrorKind.CONCURRENT_CONFLICT: status.HTTP_409_CONFLICT,
    TransferErrorKind.STORAGE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TransferResponse)
def make_transfer(
    request: TransferRequest,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Move money between two accounts"""
    try:
        candidate = request.to_transfer()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = system.transfer_engine.execute(candidate)
    if not result.ok:
        raise HTTPException(
            status_code=STATUS_BY_ERROR_KIND[result.kind],
            detail={"error": result.kind.value, "message": result.message}
        )

    return TransferResponse.from_transfer(result.transfer)
