"""Budgets API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.auth import get_current_user_id
from api.helpers import http_error
from database import get_db
from schemas import BudgetCreate, BudgetResponse, BudgetUpdate
from services.budget_service import BudgetService
from services.exceptions import LedgerError

router = APIRouter(prefix="/api/budgets", tags=["budgets"])


@router.get("", response_model=list[BudgetResponse])
def list_budgets(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return BudgetService.list_budgets(db, user_id)


@router.post("", response_model=BudgetResponse, status_code=201)
def create_budget(
    budget_data: BudgetCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    budget = BudgetService.create_budget(db, user_id, budget_data)
    db.commit()
    db.refresh(budget)
    return budget


@router.get("/{budget_id}", response_model=BudgetResponse)
def get_budget(
    budget_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return BudgetService.get_owned(db, user_id, budget_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{budget_id}", response_model=BudgetResponse)
def update_budget(
    budget_id: str,
    budget_data: BudgetUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Update a budget's target, period or dates; ``spent`` is left alone."""
    try:
        return BudgetService.update_budget(db, user_id, budget_id, budget_data)
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(
    budget_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        BudgetService.delete_budget(db, user_id, budget_id)
    except LedgerError as e:
        raise http_error(e)
    return Response(status_code=204)
