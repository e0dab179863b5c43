"""Cash-ledger transactions and their balance and budget side effects."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from models import Transaction
from models.utils import utcnow
from schemas.transaction import TransactionCreate, TransactionUpdate
from services.account_service import AccountService
from services.balance_mutator import (
    TYPES_WITH_TARGET,
    BalanceEffect,
    budget_increment,
    compute_balance_effect,
)
from services.budget_service import BudgetService
from services.exceptions import LedgerValidationError, NotFoundError
from services.write_retry import run_with_write_retry

logger = logging.getLogger(__name__)


class TransactionService:
    """Records transactions and keeps account balances and budgets in step.

    Each mutation is one read-modify-write unit run under
    ``run_with_write_retry``: the transaction row, the affected account
    balances and the budget accumulator commit together or not at all.
    """

    @staticmethod
    def get_owned(db: Session, user_id: str, transaction_id: str) -> Transaction:
        txn = (
            db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
            .first()
        )
        if txn is None:
            raise NotFoundError("Transaction", transaction_id)
        return txn

    @staticmethod
    def _apply_effects(
        db: Session,
        user_id: str,
        transaction_type: str,
        amount: Decimal,
        account_id: str,
        target_account_id: Optional[str],
        budget_id: Optional[str],
    ) -> BalanceEffect:
        """Apply a transaction's balance deltas and budget increment.

        Returns:
            The deltas applied, to be recorded on the transaction row.
        """
        source = AccountService.get_owned(db, user_id, account_id)
        target = None
        if target_account_id is not None:
            if target_account_id == account_id:
                raise LedgerValidationError("Target account must differ from the source account")
            target = AccountService.get_owned(db, user_id, target_account_id)

        effect = compute_balance_effect(
            transaction_type,
            amount,
            source.account_type,
            target.account_type if target is not None else None,
        )

        source.balance = Decimal(source.balance or 0) + effect.source_delta
        if target is not None:
            target.balance = Decimal(target.balance or 0) + effect.target_delta

        if budget_id is not None:
            budget = BudgetService.get_owned(db, user_id, budget_id)
            BudgetService.apply_spend(budget, budget_increment(transaction_type, amount))
        return effect

    @staticmethod
    def _undo_effects(db: Session, user_id: str, txn: Transaction) -> None:
        """Undo the deltas recorded on ``txn``.

        The recorded deltas are used as-is, so reclassifying an account
        after the fact does not change what a reversal does.
        """
        source = AccountService.get_owned(db, user_id, txn.account_id)
        source.balance = Decimal(source.balance or 0) - Decimal(txn.source_delta or 0)
        if txn.target_account_id is not None and txn.target_delta is not None:
            target = AccountService.get_owned(db, user_id, txn.target_account_id)
            target.balance = Decimal(target.balance or 0) - Decimal(txn.target_delta)

        if txn.budget_id is not None:
            budget = BudgetService.get_owned(db, user_id, txn.budget_id)
            BudgetService.reverse_spend(budget, budget_increment(txn.type, Decimal(txn.amount)))

    @staticmethod
    def create_transaction(db: Session, user_id: str, data: TransactionCreate) -> Transaction:
        """Record a transaction and apply its effects.

        Raises:
            NotFoundError: account, target or budget not owned by the caller.
            LedgerValidationError: target rules for the type are violated.
        """

        def apply() -> Transaction:
            effect = TransactionService._apply_effects(
                db,
                user_id,
                data.type.value,
                data.amount,
                data.account_id,
                data.target_account_id,
                data.budget_id,
            )
            txn = Transaction(
                user_id=user_id,
                account_id=data.account_id,
                target_account_id=data.target_account_id,
                budget_id=data.budget_id,
                type=data.type.value,
                amount=data.amount,
                source_delta=effect.source_delta,
                target_delta=effect.target_delta,
                description=data.description,
                category=data.category.value if data.category else None,
                date=data.date or utcnow(),
                is_recurring=data.is_recurring,
            )
            db.add(txn)
            db.flush()
            return txn

        txn = run_with_write_retry(db, apply, description="create transaction")
        logger.info(
            "Transaction recorded: %s %s on account %s (id=%s)",
            txn.type, txn.amount, txn.account_id, txn.id,
        )
        return txn

    @staticmethod
    def update_transaction(
        db: Session, user_id: str, transaction_id: str, data: TransactionUpdate
    ) -> Transaction:
        """Edit a transaction, reversing its old effects and applying the new ones."""
        changes = data.model_dump(exclude_unset=True)

        def apply() -> Transaction:
            txn = TransactionService.get_owned(db, user_id, transaction_id)
            TransactionService._undo_effects(db, user_id, txn)

            new_type = changes["type"].value if changes.get("type") else txn.type
            new_amount = changes.get("amount") or txn.amount
            new_account_id = changes.get("account_id") or txn.account_id
            if "target_account_id" in changes:
                new_target_id = changes["target_account_id"]
            elif new_type in TYPES_WITH_TARGET:
                new_target_id = txn.target_account_id
            else:
                new_target_id = None
            new_budget_id = changes["budget_id"] if "budget_id" in changes else txn.budget_id

            effect = TransactionService._apply_effects(
                db,
                user_id,
                new_type,
                new_amount,
                new_account_id,
                new_target_id,
                new_budget_id,
            )

            txn.type = new_type
            txn.amount = new_amount
            txn.account_id = new_account_id
            txn.target_account_id = new_target_id
            txn.budget_id = new_budget_id
            txn.source_delta = effect.source_delta
            txn.target_delta = effect.target_delta
            if changes.get("description") is not None:
                txn.description = changes["description"]
            if "category" in changes:
                txn.category = changes["category"].value if changes["category"] else None
            if changes.get("date") is not None:
                txn.date = changes["date"]
            if changes.get("is_recurring") is not None:
                txn.is_recurring = changes["is_recurring"]
            db.flush()
            return txn

        txn = run_with_write_retry(db, apply, description=f"update transaction {transaction_id}")
        logger.info("Transaction updated: id=%s", transaction_id)
        return txn

    @staticmethod
    def delete_transaction(db: Session, user_id: str, transaction_id: str) -> None:
        """Delete a transaction and undo its balance and budget effects."""

        def apply() -> None:
            txn = TransactionService.get_owned(db, user_id, transaction_id)
            TransactionService._undo_effects(db, user_id, txn)
            db.delete(txn)
            db.flush()

        run_with_write_retry(db, apply, description=f"delete transaction {transaction_id}")
        logger.info("Transaction deleted: id=%s", transaction_id)

    @staticmethod
    def list_transactions(
        db: Session,
        user_id: str,
        *,
        account_id: Optional[str] = None,
        budget_id: Optional[str] = None,
        category: Optional[str] = None,
        transaction_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 50,
        skip: int = 0,
    ) -> tuple[list[Transaction], int]:
        """List the caller's transactions, newest first.

        ``account_id`` matches either side of a payment or transfer.

        Returns:
            Tuple of (page of transactions, total matching count).
        """
        query = db.query(Transaction).filter(Transaction.user_id == user_id)
        if account_id:
            query = query.filter(
                (Transaction.account_id == account_id)
                | (Transaction.target_account_id == account_id)
            )
        if budget_id:
            query = query.filter(Transaction.budget_id == budget_id)
        if category:
            query = query.filter(Transaction.category == category)
        if transaction_type:
            query = query.filter(Transaction.type == transaction_type)
        if start_date:
            query = query.filter(Transaction.date >= start_date)
        if end_date:
            query = query.filter(Transaction.date <= end_date)

        total = query.count()
        items = (
            query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total
