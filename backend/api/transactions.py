"""Cash-ledger transactions API endpoints."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from api.auth import get_current_user_id
from api.helpers import http_error
from database import get_db
from schemas import (
    BudgetCategory,
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
)
from services.exceptions import LedgerError
from services.transaction_service import TransactionService

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    account_id: Optional[str] = None,
    budget_id: Optional[str] = None,
    category: Optional[BudgetCategory] = None,
    type: Optional[TransactionType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(50, ge=1, le=500),
    skip: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List transactions newest first, with filters and pagination."""
    items, total = TransactionService.list_transactions(
        db,
        user_id,
        account_id=account_id,
        budget_id=budget_id,
        category=category.value if category else None,
        transaction_type=type.value if type else None,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        skip=skip,
    )
    return {
        "transactions": items,
        "pagination": {
            "total": total,
            "limit": limit,
            "skip": skip,
            "has_more": skip + len(items) < total,
        },
    }


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    transaction_data: TransactionCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Record a transaction, adjusting balances and the linked budget."""
    try:
        return TransactionService.create_transaction(db, user_id, transaction_data)
    except LedgerError as e:
        raise http_error(e)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return TransactionService.get_owned(db, user_id, transaction_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    transaction_data: TransactionUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return TransactionService.update_transaction(db, user_id, transaction_id, transaction_data)
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete a transaction and reverse its balance and budget effects."""
    try:
        TransactionService.delete_transaction(db, user_id, transaction_id)
    except LedgerError as e:
        raise http_error(e)
    return Response(status_code=204)
