"""Budget management and the ``spent`` accumulator."""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from models import Budget, Transaction
from schemas.budget import BudgetCreate, BudgetUpdate
from services.exceptions import LedgerValidationError, NotFoundError
from services.write_retry import run_with_write_retry

logger = logging.getLogger(__name__)


class BudgetService:
    """Service for budgets.

    ``spent`` is only ever changed through ``apply_spend`` and
    ``reverse_spend``, which TransactionService calls inside its own
    write-retry unit.
    """

    @staticmethod
    def list_budgets(db: Session, user_id: str) -> list[Budget]:
        return (
            db.query(Budget)
            .filter(Budget.user_id == user_id)
            .order_by(Budget.start_date.desc(), Budget.name)
            .all()
        )

    @staticmethod
    def get_owned(db: Session, user_id: str, budget_id: str) -> Budget:
        """Get a budget owned by ``user_id``.

        Raises:
            NotFoundError: absent or owned by another user.
        """
        budget = (
            db.query(Budget)
            .filter(Budget.id == budget_id, Budget.user_id == user_id)
            .first()
        )
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        return budget

    @staticmethod
    def create_budget(db: Session, user_id: str, data: BudgetCreate) -> Budget:
        budget = Budget(
            user_id=user_id,
            name=data.name,
            category=data.category.value,
            amount=data.amount,
            spent=Decimal("0"),
            period=data.period.value,
            start_date=data.start_date,
            end_date=data.end_date,
            is_recurring=data.is_recurring,
        )
        db.add(budget)
        db.flush()
        logger.info("Budget created: %s (%s %s)", budget.name, budget.amount, budget.period)
        return budget

    @staticmethod
    def update_budget(db: Session, user_id: str, budget_id: str, data: BudgetUpdate) -> Budget:
        changes = data.model_dump(exclude_unset=True)
        for key in ("category", "period"):
            if changes.get(key) is not None:
                changes[key] = changes[key].value

        def apply() -> Budget:
            budget = BudgetService.get_owned(db, user_id, budget_id)
            for field, value in changes.items():
                if value is None and field != "end_date":
                    continue
                setattr(budget, field, value)
            if budget.end_date is not None and budget.end_date < budget.start_date:
                raise LedgerValidationError("end_date cannot be before start_date")
            db.flush()
            return budget

        return run_with_write_retry(db, apply, description=f"update budget {budget_id}")

    @staticmethod
    def delete_budget(db: Session, user_id: str, budget_id: str) -> None:
        """Delete a budget; transactions that referenced it keep their rows unlinked."""

        def apply() -> None:
            budget = BudgetService.get_owned(db, user_id, budget_id)
            db.query(Transaction).filter(Transaction.budget_id == budget_id).update(
                {Transaction.budget_id: None}, synchronize_session=False
            )
            db.delete(budget)
            db.flush()

        run_with_write_retry(db, apply, description=f"delete budget {budget_id}")
        logger.info("Budget deleted: id=%s", budget_id)

    # --- Accumulator ---

    @staticmethod
    def apply_spend(budget: Budget, increment: Decimal) -> None:
        if increment:
            budget.spent = Decimal(budget.spent or 0) + increment

    @staticmethod
    def reverse_spend(budget: Budget, increment: Decimal) -> None:
        """Undo an earlier ``apply_spend``; ``spent`` never drops below zero."""
        if increment:
            budget.spent = max(Decimal("0"), Decimal(budget.spent or 0) - increment)
