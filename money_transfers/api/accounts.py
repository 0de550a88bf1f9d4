"""
Account endpoints
"""

from typing import List
from fastapi import APIRouter, HTTPException, Depends, status

from .system import TransferSystem, get_transfer_system
from .schemas import CreateAccountRequest, AccountResponse, TransferResponse
from ..errors import StorageError


router = APIRouter()


@router.get("", response_model=List[AccountResponse])
def list_accounts(system: TransferSystem = Depends(get_transfer_system)):
    """List all accounts"""
    return [AccountResponse.from_account(account) for account in system.query_service.list_accounts()]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountResponse)
def create_account(
    request: CreateAccountRequest,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Create a new account"""
    try:
        account = system.account_manager.create_account(
            owner=request.owner,
            balance=request.to_balance()
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return AccountResponse.from_account(account)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Get account details"""
    account = system.query_service.get_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    return AccountResponse.from_account(account)


@router.get("/{account_id}/transfers", response_model=List[TransferResponse])
def list_account_transfers(
    account_id: int,
    system: TransferSystem = Depends(get_transfer_system)
):
    """List transfers the account sent or received"""
    transfers = system.query_service.list_transfers_for_account(account_id)
    return [TransferResponse.from_transfer(transfer) for transfer in transfers]


@router.get("/{account_id}/transfers/{transfer_id}", response_model=TransferResponse)
def get_account_transfer(
    account_id: int,
    transfer_id: int,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Get one transfer of the account"""
    transfer = system.query_service.get_transfer(transfer_id, account_id)
    if not transfer:
        raise HTTPException(status_code=404, detail="Transfer not found")

    return TransferResponse.from_transfer(transfer)
