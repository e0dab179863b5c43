"""Account management service."""

import logging
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import Account, SavingsBucket, Transaction
from schemas.account import (
    AccountCreate,
    AccountUpdate,
    SavingsBucketCreate,
    SavingsBucketUpdate,
)
from services.asset_service import AssetService
from services.exceptions import NotFoundError
from services.write_retry import run_with_write_retry

logger = logging.getLogger(__name__)


def account_value(account: Account) -> Decimal:
    """Balance plus the market value of any holdings."""
    value = Decimal(account.balance or 0)
    for holding in account.holdings:
        value += holding.total_quantity * Decimal(holding.current_price or 0)
    return value


class AccountService:
    """Service for managing account CRUD operations.

    Every lookup is scoped to the caller: an account owned by someone else
    is reported exactly like a missing one.
    """

    @staticmethod
    def list_accounts(db: Session, user_id: str, *, active_only: bool = False) -> list[Account]:
        """List the caller's accounts, oldest first."""
        query = db.query(Account).filter(Account.user_id == user_id)
        if active_only:
            query = query.filter(Account.is_active.is_(True))
        return query.order_by(Account.created_at).all()

    @staticmethod
    def get_owned(db: Session, user_id: str, account_id: str) -> Account:
        """Get an account owned by ``user_id``.

        Raises:
            NotFoundError: absent or owned by another user.
        """
        account = (
            db.query(Account)
            .filter(Account.id == account_id, Account.user_id == user_id)
            .first()
        )
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    @staticmethod
    def create_account(db: Session, user_id: str, data: AccountCreate) -> Account:
        account = Account(
            user_id=user_id,
            name=data.name,
            account_type=data.account_type.value,
            institution=data.institution,
            balance=data.balance,
            interest_rate=data.interest_rate,
            notes=data.notes,
        )
        db.add(account)
        db.flush()
        logger.info("Account created: %s (%s, id=%s)", account.name, account.account_type, account.id)
        return account

    @staticmethod
    def update_account(
        db: Session, user_id: str, account_id: str, data: AccountUpdate
    ) -> Account:
        """Apply the set fields of ``data`` to an account."""
        changes = data.model_dump(exclude_unset=True)
        if "account_type" in changes and changes["account_type"] is not None:
            changes["account_type"] = changes["account_type"].value

        def apply() -> Account:
            account = AccountService.get_owned(db, user_id, account_id)
            for field, value in changes.items():
                if value is None and field in ("name", "account_type", "balance", "is_active"):
                    continue
                setattr(account, field, value)
            db.flush()
            return account

        account = run_with_write_retry(db, apply, description=f"update account {account_id}")
        logger.info("Account updated: %s (id=%s)", account.name, account.id)
        return account

    @staticmethod
    def delete_account(db: Session, user_id: str, account_id: str) -> None:
        """Delete an account with its buckets, holdings and activity.

        Cash-ledger transactions that name the account as source or target
        are deleted too. Other accounts' balances are left as they are.
        """

        def apply() -> None:
            account = AccountService.get_owned(db, user_id, account_id)
            db.query(Transaction).filter(
                or_(
                    Transaction.account_id == account_id,
                    Transaction.target_account_id == account_id,
                )
            ).delete(synchronize_session=False)
            db.delete(account)
            db.flush()

        run_with_write_retry(db, apply, description=f"delete account {account_id}")
        logger.info("Account deleted: id=%s", account_id)

    @staticmethod
    def get_net_worth(db: Session, user_id: str) -> dict:
        """Assets minus liabilities across the caller's active accounts.

        Asset accounts count their balance plus holdings at current price;
        liability balances are amounts owed. Manually valued assets are
        added to the asset side.
        """
        total_assets = Decimal("0")
        total_liabilities = Decimal("0")
        by_type: dict[str, Decimal] = {}

        accounts = AccountService.list_accounts(db, user_id, active_only=True)
        for account in accounts:
            if account.is_liability:
                value = Decimal(account.balance or 0)
                total_liabilities += value
            else:
                value = account_value(account)
                total_assets += value
            by_type[account.account_type] = by_type.get(account.account_type, Decimal("0")) + value

        manual_assets, asset_count = AssetService.total_value(db, user_id)
        total_assets += manual_assets

        return {
            "total_assets": total_assets,
            "total_liabilities": total_liabilities,
            "net_worth": total_assets - total_liabilities,
            "manual_assets": manual_assets,
            "account_count": len(accounts),
            "asset_count": asset_count,
            "by_type": by_type,
        }

    # --- Savings buckets ---

    @staticmethod
    def _get_bucket(account: Account, bucket_id: str) -> SavingsBucket:
        for bucket in account.buckets:
            if bucket.id == bucket_id:
                return bucket
        raise NotFoundError("Savings bucket", bucket_id)

    @staticmethod
    def add_bucket(
        db: Session, user_id: str, account_id: str, data: SavingsBucketCreate
    ) -> SavingsBucket:
        def apply() -> SavingsBucket:
            account = AccountService.get_owned(db, user_id, account_id)
            bucket = SavingsBucket(name=data.name, amount=data.amount, goal=data.goal)
            account.buckets.append(bucket)
            account.touch()
            db.flush()
            return bucket

        return run_with_write_retry(db, apply, description=f"add bucket to {account_id}")

    @staticmethod
    def update_bucket(
        db: Session, user_id: str, account_id: str, bucket_id: str, data: SavingsBucketUpdate
    ) -> SavingsBucket:
        changes = data.model_dump(exclude_unset=True)

        def apply() -> SavingsBucket:
            account = AccountService.get_owned(db, user_id, account_id)
            bucket = AccountService._get_bucket(account, bucket_id)
            for field, value in changes.items():
                if value is None and field in ("name", "amount"):
                    continue
                setattr(bucket, field, value)
            account.touch()
            db.flush()
            return bucket

        return run_with_write_retry(db, apply, description=f"update bucket {bucket_id}")

    @staticmethod
    def delete_bucket(db: Session, user_id: str, account_id: str, bucket_id: str) -> None:
        def apply() -> None:
            account = AccountService.get_owned(db, user_id, account_id)
            bucket = AccountService._get_bucket(account, bucket_id)
            account.buckets.remove(bucket)
            account.touch()
            db.flush()

        run_with_write_retry(db, apply, description=f"delete bucket {bucket_id}")
