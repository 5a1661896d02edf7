"""
Transaction receipt endpoint.

Lets clients poll for the receipt of a mutation they submitted.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from nexusnft.api.collections import ReceiptResponse, receipt_response
from nexusnft.db import get_transaction, transaction_to_receipt
from nexusnft.db.database import get_session

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/{tx_hash}", response_model=ReceiptResponse)
async def get_receipt(
    tx_hash: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ReceiptResponse:
    """
    Get the receipt of a committed transaction.

    Returns 404 while the transaction is unknown; rejected mutations are
    never recorded, so their hashes stay unknown.
    """
    transaction = await get_transaction(session, tx_hash.lower())
    if transaction is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No receipt for transaction {tx_hash}",
        )
    return receipt_response(transaction_to_receipt(transaction))
