"""Unit tests for TransactionService balance and budget side effects."""

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from models import Account, Budget
from schemas.account import AccountUpdate
from schemas.transaction import TransactionCreate, TransactionUpdate
from services.account_service import AccountService
from services.exceptions import LedgerValidationError, NotFoundError
from services.transaction_service import TransactionService
from tests.fixtures import OTHER_USER_ID, USER_ID, make_account


def _balance(db, account) -> Decimal:
    return db.query(Account).filter_by(id=account.id).one().balance


def _spent(db, budget) -> Decimal:
    return db.query(Budget).filter_by(id=budget.id).one().spent


def _create(db, **kwargs):
    return TransactionService.create_transaction(db, USER_ID, TransactionCreate(**kwargs))


class TestCreate:
    def test_income_raises_asset_balance(self, db, checking):
        _create(db, account_id=checking.id, type="income", amount=Decimal("250"))
        assert _balance(db, checking) == Decimal("1250.00")

    def test_expense_on_credit_card_raises_amount_owed(self, db, credit_card):
        _create(db, account_id=credit_card.id, type="expense", amount=Decimal("50"))
        assert _balance(db, credit_card) == Decimal("250.00")

    def test_payment_moves_both_accounts(self, db, checking, credit_card):
        _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("150"),
        )
        assert _balance(db, checking) == Decimal("850.00")
        assert _balance(db, credit_card) == Decimal("50.00")

    def test_overpaid_liability_goes_negative(self, db, checking, credit_card):
        _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("300"),
        )
        assert _balance(db, credit_card) == Decimal("-100.00")

    def test_transfer_between_asset_accounts(self, db, checking):
        savings = make_account(db, "savings", Decimal("0"))
        _create(
            db,
            account_id=checking.id,
            target_account_id=savings.id,
            type="transfer",
            amount=Decimal("300"),
        )
        assert _balance(db, checking) == Decimal("700.00")
        assert _balance(db, savings) == Decimal("300.00")

    def test_expense_increments_budget(self, db, checking, budget):
        _create(
            db, account_id=checking.id, type="expense", amount=Decimal("42.50"),
            budget_id=budget.id, category="food",
        )
        assert _spent(db, budget) == Decimal("42.50")

    def test_income_does_not_increment_budget(self, db, checking, budget):
        _create(db, account_id=checking.id, type="income", amount=Decimal("10"), budget_id=budget.id)
        assert _spent(db, budget) == Decimal("0")

    def test_date_defaults_to_now(self, db, checking):
        txn = _create(db, account_id=checking.id, type="income", amount=Decimal("1"))
        assert txn.date is not None

    def test_payment_to_asset_rejected_without_side_effects(self, db, checking):
        savings = make_account(db, "savings", Decimal("0"))
        with pytest.raises(LedgerValidationError):
            _create(
                db,
                account_id=checking.id,
                target_account_id=savings.id,
                type="payment",
                amount=Decimal("10"),
            )
        assert _balance(db, checking) == Decimal("1000.00")

    def test_target_must_differ_from_source(self, db, checking):
        with pytest.raises(LedgerValidationError, match="differ"):
            _create(
                db,
                account_id=checking.id,
                target_account_id=checking.id,
                type="transfer",
                amount=Decimal("10"),
            )

    def test_foreign_account_is_not_found(self, db):
        foreign = make_account(db, "checking", user_id=OTHER_USER_ID)
        with pytest.raises(NotFoundError):
            _create(db, account_id=foreign.id, type="income", amount=Decimal("1"))
        assert _balance(db, foreign) == Decimal("1000.00")

    def test_foreign_budget_is_not_found(self, db, checking):
        foreign_budget = Budget(
            user_id=OTHER_USER_ID, name="Theirs", category="food", amount=Decimal("10"),
        )
        db.add(foreign_budget)
        db.commit()

        with pytest.raises(NotFoundError):
            _create(
                db, account_id=checking.id, type="expense", amount=Decimal("5"),
                budget_id=foreign_budget.id,
            )
        assert _balance(db, checking) == Decimal("1000.00")


class TestUpdate:
    def test_amount_change_reapplies_effects(self, db, checking, budget):
        txn = _create(
            db, account_id=checking.id, type="expense", amount=Decimal("100"), budget_id=budget.id
        )
        TransactionService.update_transaction(
            db, USER_ID, txn.id, TransactionUpdate(amount=Decimal("60"))
        )
        assert _balance(db, checking) == Decimal("940.00")
        assert _spent(db, budget) == Decimal("60.00")

    def test_moving_to_another_account(self, db, checking):
        savings = make_account(db, "savings", Decimal("0"))
        txn = _create(db, account_id=checking.id, type="income", amount=Decimal("100"))

        TransactionService.update_transaction(
            db, USER_ID, txn.id, TransactionUpdate(account_id=savings.id)
        )
        assert _balance(db, checking) == Decimal("1000.00")
        assert _balance(db, savings) == Decimal("100.00")

    def test_changing_to_single_sided_type_drops_target(self, db, checking, credit_card):
        txn = _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("50"),
        )
        updated = TransactionService.update_transaction(
            db, USER_ID, txn.id, TransactionUpdate(type="expense")
        )
        assert updated.target_account_id is None
        assert _balance(db, checking) == Decimal("950.00")
        assert _balance(db, credit_card) == Decimal("200.00")

    def test_description_only(self, db, checking):
        txn = _create(db, account_id=checking.id, type="income", amount=Decimal("5"))
        updated = TransactionService.update_transaction(
            db, USER_ID, txn.id, TransactionUpdate(description="Birthday gift")
        )
        assert updated.description == "Birthday gift"
        assert _balance(db, checking) == Decimal("1005.00")


class TestDelete:
    def test_delete_reverses_balance_and_budget(self, db, checking, credit_card, budget):
        txn = _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("80"),
            budget_id=budget.id,
        )
        TransactionService.delete_transaction(db, USER_ID, txn.id)

        assert _balance(db, checking) == Decimal("1000.00")
        assert _balance(db, credit_card) == Decimal("200.00")
        assert _spent(db, budget) == Decimal("0")
        with pytest.raises(NotFoundError):
            TransactionService.get_owned(db, USER_ID, txn.id)

    def test_spent_never_drops_below_zero(self, db, checking, budget):
        txn = _create(
            db, account_id=checking.id, type="expense", amount=Decimal("30"), budget_id=budget.id
        )
        # Manual correction lowered spent after the expense was recorded
        row = db.query(Budget).filter_by(id=budget.id).one()
        row.spent = Decimal("10")
        db.commit()

        TransactionService.delete_transaction(db, USER_ID, txn.id)
        assert _spent(db, budget) == Decimal("0")

    def test_delete_foreign_transaction_not_found(self, db, checking):
        txn = _create(db, account_id=checking.id, type="income", amount=Decimal("5"))
        with pytest.raises(NotFoundError):
            TransactionService.delete_transaction(db, OTHER_USER_ID, txn.id)


class TestAccountChangesAfterPosting:
    def test_retyped_account_reverses_with_recorded_deltas(self, db, checking, credit_card):
        payment = _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("50"),
        )
        expense = _create(db, account_id=checking.id, type="expense", amount=Decimal("100"))
        assert _balance(db, checking) == Decimal("850.00")

        AccountService.update_account(
            db, USER_ID, checking.id, AccountUpdate(account_type="loan")
        )

        TransactionService.delete_transaction(db, USER_ID, expense.id)
        assert _balance(db, checking) == Decimal("950.00")

        TransactionService.delete_transaction(db, USER_ID, payment.id)
        assert _balance(db, checking) == Decimal("1000.00")
        assert _balance(db, credit_card) == Decimal("200.00")

    def test_manual_balance_correction_is_kept_on_delete(self, db, checking):
        txn = _create(db, account_id=checking.id, type="expense", amount=Decimal("100"))
        AccountService.update_account(
            db, USER_ID, checking.id, AccountUpdate(balance=Decimal("500"))
        )

        TransactionService.delete_transaction(db, USER_ID, txn.id)
        assert _balance(db, checking) == Decimal("600.00")

    def test_recorded_deltas(self, db, checking, credit_card):
        txn = _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("40"),
        )
        assert txn.source_delta == Decimal("-40")
        assert txn.target_delta == Decimal("-40")

        single = _create(db, account_id=credit_card.id, type="expense", amount=Decimal("5"))
        assert single.source_delta == Decimal("5")
        assert single.target_delta is None


class TestMoneyPrecision:
    @pytest.mark.parametrize("amount", ["0.004", "12.345", "0.001"])
    def test_sub_cent_amounts_rejected(self, amount):
        with pytest.raises(ValidationError):
            TransactionCreate(account_id="a", type="expense", amount=Decimal(amount))
        with pytest.raises(ValidationError):
            TransactionUpdate(amount=Decimal(amount))

    def test_cent_amounts_accumulate_exactly(self, db, checking, budget):
        for _ in range(3):
            _create(
                db,
                account_id=checking.id,
                type="expense",
                amount=Decimal("0.01"),
                budget_id=budget.id,
            )
        assert _balance(db, checking) == Decimal("999.97")
        assert _spent(db, budget) == Decimal("0.03")

    def test_sub_cent_account_balance_rejected(self):
        with pytest.raises(ValidationError):
            AccountUpdate(balance=Decimal("10.005"))


class TestList:
    def test_filters_and_pagination(self, db, checking, credit_card):
        for day in range(1, 6):
            _create(
                db,
                account_id=checking.id,
                type="expense",
                amount=Decimal(day),
                category="food",
                date=datetime(2025, 3, day),
            )
        _create(db, account_id=credit_card.id, type="expense", amount=Decimal("9"))

        items, total = TransactionService.list_transactions(
            db, USER_ID, account_id=checking.id, limit=2, skip=1
        )
        assert total == 5
        assert [t.amount for t in items] == [Decimal("4.00"), Decimal("3.00")]

    def test_account_filter_matches_target_side(self, db, checking, credit_card):
        _create(
            db,
            account_id=checking.id,
            target_account_id=credit_card.id,
            type="payment",
            amount=Decimal("10"),
        )
        _, total = TransactionService.list_transactions(db, USER_ID, account_id=credit_card.id)
        assert total == 1

    def test_date_range(self, db, checking):
        for day in (1, 15, 28):
            _create(
                db, account_id=checking.id, type="income", amount=Decimal("1"),
                date=datetime(2025, 2, day),
            )
        items, total = TransactionService.list_transactions(
            db, USER_ID, start_date=datetime(2025, 2, 10), end_date=datetime(2025, 2, 20)
        )
        assert total == 1
        assert items[0].date.day == 15

    def test_other_users_transactions_hidden(self, db, checking):
        _create(db, account_id=checking.id, type="income", amount=Decimal("1"))
        _, total = TransactionService.list_transactions(db, OTHER_USER_ID)
        assert total == 0
