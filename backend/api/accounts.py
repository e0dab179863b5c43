"""Accounts API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.auth import get_current_user_id
from api.helpers import http_error
from database import get_db
from schemas import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    NetWorthSummary,
    SavingsBucketCreate,
    SavingsBucketResponse,
    SavingsBucketUpdate,
)
from services.account_service import AccountService
from services.exceptions import LedgerError

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    active_only: bool = False,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List the caller's accounts."""
    return AccountService.list_accounts(db, user_id, active_only=active_only)


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Create a new account."""
    account = AccountService.create_account(db, user_id, account_data)
    db.commit()
    db.refresh(account)
    return account


@router.get("/summary", response_model=NetWorthSummary)
def get_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Total assets, total liabilities and net worth across active accounts."""
    return AccountService.get_net_worth(db, user_id)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return AccountService.get_owned(db, user_id, account_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    account_data: AccountUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Update an account. A ``balance`` here is a manual correction."""
    try:
        return AccountService.update_account(db, user_id, account_id, account_data)
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{account_id}", status_code=204)
def delete_account(
    account_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete an account and everything recorded on it."""
    try:
        AccountService.delete_account(db, user_id, account_id)
    except LedgerError as e:
        raise http_error(e)
    return Response(status_code=204)


# --- Savings buckets ---


@router.post(
    "/{account_id}/buckets", response_model=SavingsBucketResponse, status_code=201
)
def create_bucket(
    account_id: str,
    bucket_data: SavingsBucketCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return AccountService.add_bucket(db, user_id, account_id, bucket_data)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{account_id}/buckets/{bucket_id}", response_model=SavingsBucketResponse)
def update_bucket(
    account_id: str,
    bucket_id: str,
    bucket_data: SavingsBucketUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return AccountService.update_bucket(db, user_id, account_id, bucket_id, bucket_data)
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{account_id}/buckets/{bucket_id}", status_code=204)
def delete_bucket(
    account_id: str,
    bucket_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        AccountService.delete_bucket(db, user_id, account_id, bucket_id)
    except LedgerError as e:
        raise http_error(e)
    return Response(status_code=204)
