"""Investment accounts: holdings, lots, disposals, cash and the activity log.

Holdings and lots belong to their account aggregate. Every mutation
touches the account row so its ``version`` changes, which makes two
concurrent edits of the same portfolio collide on commit instead of one
silently overwriting the other. ``run_with_write_retry`` then replays the
losing unit against fresh state.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy.orm import Session

from models import Account, Holding, HoldingLot, InvestmentTransaction
from models.utils import utcnow
from schemas.investment import (
    BuyRequest,
    CashUpdate,
    InvestmentTransactionCreate,
    LotCreate,
    LotUpdate,
    RemoveRequest,
    SellRequest,
)
from services.account_service import AccountService
from services.exceptions import LedgerValidationError, NotFoundError
from services.lot_disposal_engine import DisposalResult, LotConsumption, LotState, dispose_fifo
from services.price_service import PriceService
from services.write_retry import run_with_write_retry
from utils.ticker import normalize_symbol, symbols_match

logger = logging.getLogger(__name__)

INVESTMENT_ACCOUNT_TYPES = frozenset({"investment", "retirement"})

# Signed effect of a directly posted activity on the account's cash.
_CASH_SIGN = {
    "deposit": Decimal("1"),
    "dividend": Decimal("1"),
    "withdrawal": Decimal("-1"),
}

_CENT = Decimal("0.01")


def cents(value: Decimal) -> Decimal:
    """Round a money amount to the cent, half up, as the ledger stores it."""
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def _symbol(raw: str) -> str:
    try:
        return normalize_symbol(raw)
    except ValueError as e:
        raise LedgerValidationError(str(e)) from e


def lot_summary(lot: HoldingLot) -> dict:
    return {
        "id": lot.id,
        "quantity": lot.quantity,
        "unit_price": lot.unit_price,
        "purchase_date": lot.purchase_date,
        "notes": lot.notes,
        "cost_basis": lot.quantity * lot.unit_price,
    }


def holding_summary(holding: Holding) -> dict:
    """Build a HoldingResponse-compatible dict with valuation fields."""
    quantity = holding.total_quantity
    cost_basis = holding.total_cost_basis
    price = Decimal(holding.current_price or 0)
    market_value = quantity * price
    return {
        "id": holding.id,
        "symbol": holding.symbol,
        "name": holding.name,
        "asset_kind": holding.asset_kind,
        "current_price": price,
        "last_updated": holding.last_updated,
        "total_quantity": quantity,
        "average_cost": cost_basis / quantity if quantity else None,
        "total_cost_basis": cost_basis,
        "market_value": market_value,
        "unrealized_gain_loss": market_value - cost_basis,
        "lots": [lot_summary(lot) for lot in holding.lots],
    }


def portfolio_summary(account: Account) -> dict:
    """Build an InvestmentAccountResponse-compatible dict."""
    holdings = [holding_summary(h) for h in account.holdings]
    holdings_value = sum((h["market_value"] for h in holdings), Decimal("0"))
    cost_basis = sum((h["total_cost_basis"] for h in holdings), Decimal("0"))
    cash = Decimal(account.balance or 0)
    return {
        "id": account.id,
        "name": account.name,
        "account_type": account.account_type,
        "institution": account.institution,
        "cash": cash,
        "version": account.version,
        "holdings": holdings,
        "holdings_value": holdings_value,
        "total_cost_basis": cost_basis,
        "unrealized_gain_loss": holdings_value - cost_basis,
        "total_value": cash + holdings_value,
    }


class InvestmentService:
    """Lot-level portfolio operations for one user's investment accounts."""

    # --- Lookups ---

    @staticmethod
    def get_account(db: Session, user_id: str, account_id: str) -> Account:
        """Get an owned investment account.

        Raises:
            NotFoundError: absent or not owned.
            LedgerValidationError: the account cannot hold investments.
        """
        account = AccountService.get_owned(db, user_id, account_id)
        if account.account_type not in INVESTMENT_ACCOUNT_TYPES:
            raise LedgerValidationError(
                f"Account {account_id} is a {account.account_type} account, not an investment account"
            )
        return account

    @staticmethod
    def find_holding(account: Account, symbol: str) -> Optional[Holding]:
        for holding in account.holdings:
            if symbols_match(holding.symbol, symbol):
                return holding
        return None

    @staticmethod
    def get_holding(account: Account, symbol: str) -> Holding:
        holding = InvestmentService.find_holding(account, symbol)
        if holding is None:
            raise NotFoundError("Holding", symbol)
        return holding

    @staticmethod
    def get_lot(holding: Holding, lot_id: str) -> HoldingLot:
        for lot in holding.lots:
            if lot.id == lot_id:
                return lot
        raise NotFoundError("Lot", lot_id)

    # --- Internal helpers ---

    @staticmethod
    def _append_lot(holding: Holding, quantity: Decimal, price: Decimal, purchase_date, notes) -> HoldingLot:
        position = max((lot.position for lot in holding.lots), default=-1) + 1
        lot = HoldingLot(
            quantity=quantity,
            unit_price=price,
            purchase_date=purchase_date,
            notes=notes,
            position=position,
        )
        holding.lots.append(lot)
        return lot

    @staticmethod
    def _record(
        account: Account,
        transaction_type: str,
        *,
        amount: Decimal = Decimal("0"),
        cash_delta: Decimal = Decimal("0"),
        symbol: Optional[str] = None,
        name: Optional[str] = None,
        quantity: Optional[Decimal] = None,
        price: Optional[Decimal] = None,
        date=None,
        notes: Optional[str] = None,
    ) -> InvestmentTransaction:
        """Append an activity record and apply ``cash_delta`` to the account."""
        if cash_delta:
            account.balance = Decimal(account.balance or 0) + cash_delta
        txn = InvestmentTransaction(
            type=transaction_type,
            symbol=symbol,
            name=name,
            quantity=quantity,
            price=price,
            amount=amount,
            cash_delta=cash_delta,
            date=date or utcnow(),
            notes=notes,
        )
        account.investment_transactions.append(txn)
        return txn

    @staticmethod
    def _write_back(account: Account, holding: Holding, result: DisposalResult) -> None:
        """Persist a disposal result onto the holding's lot rows."""
        remaining = {lot.lot_id: lot.quantity for lot in result.remaining_lots}
        for lot in list(holding.lots):
            if lot.id in remaining:
                lot.quantity = remaining[lot.id]
            else:
                holding.lots.remove(lot)
        if result.holding_emptied:
            account.holdings.remove(holding)

    @staticmethod
    def _dispose(account: Account, holding: Holding, quantity: Decimal) -> DisposalResult:
        states = [
            LotState(
                lot_id=lot.id,
                quantity=Decimal(lot.quantity),
                unit_price=Decimal(lot.unit_price),
                purchase_date=lot.purchase_date,
                notes=lot.notes,
            )
            for lot in holding.lots
        ]
        result = dispose_fifo(states, quantity)
        InvestmentService._write_back(account, holding, result)
        return result

    # --- Holdings and lots ---

    @staticmethod
    def buy(db: Session, user_id: str, account_id: str, data: BuyRequest) -> Holding:
        """Buy into a holding: create it on first purchase, else append a lot.

        The purchase is logged as a ``buy`` activity. Cash is not debited;
        use a withdrawal if the purchase was funded from the account.
        """
        symbol = _symbol(data.symbol)

        def apply() -> Holding:
            account = InvestmentService.get_account(db, user_id, account_id)
            holding = InvestmentService.find_holding(account, symbol)
            if holding is None:
                holding = Holding(
                    symbol=symbol,
                    name=data.name or symbol,
                    asset_kind=data.asset_kind.value,
                    current_price=data.price,
                    last_updated=utcnow(),
                )
                account.holdings.append(holding)
            InvestmentService._append_lot(holding, data.quantity, data.price, data.date, data.notes)
            InvestmentService._record(
                account,
                "buy",
                amount=cents(data.quantity * data.price),
                symbol=symbol,
                name=holding.name,
                quantity=data.quantity,
                price=data.price,
                notes=data.notes,
            )
            account.touch()
            db.flush()
            return holding

        holding = run_with_write_retry(db, apply, description=f"buy {symbol}")
        logger.info("Bought %s %s @ %s in account %s", data.quantity, symbol, data.price, account_id)
        return holding

    @staticmethod
    def add_lot(db: Session, user_id: str, account_id: str, symbol: str, data: LotCreate) -> HoldingLot:
        """Append a lot to an existing holding (a manual correction, not logged)."""

        def apply() -> HoldingLot:
            account = InvestmentService.get_account(db, user_id, account_id)
            holding = InvestmentService.get_holding(account, symbol)
            lot = InvestmentService._append_lot(holding, data.quantity, data.price, data.date, data.notes)
            account.touch()
            db.flush()
            return lot

        return run_with_write_retry(db, apply, description=f"add lot to {symbol}")

    @staticmethod
    def update_lot(
        db: Session, user_id: str, account_id: str, symbol: str, lot_id: str, data: LotUpdate
    ) -> HoldingLot:
        changes = data.model_dump(exclude_unset=True)

        def apply() -> HoldingLot:
            account = InvestmentService.get_account(db, user_id, account_id)
            lot = InvestmentService.get_lot(InvestmentService.get_holding(account, symbol), lot_id)
            if changes.get("quantity") is not None:
                lot.quantity = changes["quantity"]
            if changes.get("price") is not None:
                lot.unit_price = changes["price"]
            if changes.get("date") is not None:
                lot.purchase_date = changes["date"]
            if "notes" in changes:
                lot.notes = changes["notes"]
            account.touch()
            db.flush()
            return lot

        return run_with_write_retry(db, apply, description=f"update lot {lot_id}")

    @staticmethod
    def delete_lot(db: Session, user_id: str, account_id: str, symbol: str, lot_id: str) -> bool:
        """Delete a lot; the holding goes too when it was the last one.

        Returns:
            True if the holding was removed along with the lot.
        """

        def apply() -> bool:
            account = InvestmentService.get_account(db, user_id, account_id)
            holding = InvestmentService.get_holding(account, symbol)
            holding.lots.remove(InvestmentService.get_lot(holding, lot_id))
            emptied = not holding.lots
            if emptied:
                account.holdings.remove(holding)
            account.touch()
            db.flush()
            return emptied

        return run_with_write_retry(db, apply, description=f"delete lot {lot_id}")

    # --- Disposals ---

    @staticmethod
    def sell(db: Session, user_id: str, account_id: str, symbol: str, data: SellRequest) -> dict:
        """Sell ``data.quantity`` FIFO and credit the proceeds, rounded to the cent, to cash.

        Returns:
            Dict matching DisposalResponse.
        """

        def apply() -> dict:
            account = InvestmentService.get_account(db, user_id, account_id)
            holding = InvestmentService.get_holding(account, symbol)
            result = InvestmentService._dispose(account, holding, data.quantity)
            proceeds = cents(data.quantity * data.price)
            txn = InvestmentService._record(
                account,
                "sell",
                amount=proceeds,
                cash_delta=proceeds,
                symbol=holding.symbol,
                name=holding.name,
                quantity=data.quantity,
                price=data.price,
                date=data.date,
                notes=data.notes,
            )
            account.touch()
            db.flush()
            return InvestmentService._disposal_outcome(account, holding, result, txn)

        outcome = run_with_write_retry(db, apply, description=f"sell {symbol}")
        logger.info("Sold %s %s @ %s in account %s", data.quantity, symbol, data.price, account_id)
        return outcome

    @staticmethod
    def remove(db: Session, user_id: str, account_id: str, symbol: str, data: RemoveRequest) -> dict:
        """Take a holding out of the portfolio without proceeds.

        Without a quantity the whole holding goes; with one, lots are
        reduced FIFO as for a sale. Cash is never touched.
        """

        def apply() -> dict:
            account = InvestmentService.get_account(db, user_id, account_id)
            holding = InvestmentService.get_holding(account, symbol)
            quantity = data.quantity if data.quantity is not None else holding.total_quantity
            if data.quantity is None:
                result = DisposalResult(
                    remaining_lots=(),
                    consumed=tuple(
                        LotConsumption(lot.id, Decimal(lot.quantity), Decimal("0"))
                        for lot in holding.lots
                    ),
                    disposed_quantity=quantity,
                )
                account.holdings.remove(holding)
            else:
                result = InvestmentService._dispose(account, holding, quantity)
            txn = InvestmentService._record(
                account,
                "remove",
                symbol=holding.symbol,
                name=holding.name,
                quantity=quantity,
                price=Decimal("0"),
                notes=data.reason or "Removed from portfolio",
            )
            account.touch()
            db.flush()
            return InvestmentService._disposal_outcome(account, holding, result, txn)

        outcome = run_with_write_retry(db, apply, description=f"remove {symbol}")
        logger.info("Removed %s from account %s", symbol, account_id)
        return outcome

    @staticmethod
    def _disposal_outcome(
        account: Account, holding: Holding, result: DisposalResult, txn: InvestmentTransaction
    ) -> dict:
        return {
            "transaction": txn,
            "holding": None if result.holding_emptied else holding_summary(holding),
            "consumed": [
                {"lot_id": c.lot_id, "quantity": c.quantity, "remaining": c.remaining}
                for c in result.consumed
            ],
            "cash": Decimal(account.balance or 0),
        }

    # --- Cash and activity log ---

    @staticmethod
    def set_cash(db: Session, user_id: str, account_id: str, data: CashUpdate) -> Account:
        def apply() -> Account:
            account = InvestmentService.get_account(db, user_id, account_id)
            account.balance = data.cash
            account.touch()
            db.flush()
            return account

        return run_with_write_retry(db, apply, description=f"set cash on {account_id}")

    @staticmethod
    def log_transaction(
        db: Session, user_id: str, account_id: str, data: InvestmentTransactionCreate
    ) -> InvestmentTransaction:
        """Post a deposit, withdrawal or dividend and move cash accordingly.

        Raises:
            LedgerValidationError: a withdrawal exceeds the cash balance.
        """
        symbol = _symbol(data.symbol) if data.symbol else None
        cash_delta = _CASH_SIGN[data.type.value] * data.amount

        def apply() -> InvestmentTransaction:
            account = InvestmentService.get_account(db, user_id, account_id)
            cash = Decimal(account.balance or 0)
            if cash + cash_delta < 0:
                raise LedgerValidationError(
                    f"Withdrawal of {data.amount} exceeds cash balance {cash}"
                )
            txn = InvestmentService._record(
                account,
                data.type.value,
                amount=cash_delta,
                cash_delta=cash_delta,
                symbol=symbol,
                date=data.date,
                notes=data.notes,
            )
            account.touch()
            db.flush()
            return txn

        return run_with_write_retry(db, apply, description=f"{data.type.value} on {account_id}")

    @staticmethod
    def list_transactions(db: Session, user_id: str, account_id: str) -> list[InvestmentTransaction]:
        account = InvestmentService.get_account(db, user_id, account_id)
        return (
            db.query(InvestmentTransaction)
            .filter(InvestmentTransaction.account_id == account.id)
            .order_by(InvestmentTransaction.date.desc(), InvestmentTransaction.created_at.desc())
            .all()
        )

    @staticmethod
    def delete_transaction(db: Session, user_id: str, account_id: str, transaction_id: str) -> None:
        """Delete an activity record, reversing whatever it did to cash.

        Lots are not restored; they are corrected through the lot endpoints.
        """

        def apply() -> None:
            account = InvestmentService.get_account(db, user_id, account_id)
            txn = next(
                (t for t in account.investment_transactions if t.id == transaction_id), None
            )
            if txn is None:
                raise NotFoundError("Investment transaction", transaction_id)
            if txn.cash_delta:
                account.balance = Decimal(account.balance or 0) - Decimal(txn.cash_delta)
            account.investment_transactions.remove(txn)
            account.touch()
            db.flush()

        run_with_write_retry(db, apply, description=f"delete activity {transaction_id}")

    # --- Prices ---

    @staticmethod
    def refresh_prices(
        db: Session,
        user_id: str,
        account_id: str,
        price_service: PriceService,
        symbol: Optional[str] = None,
    ) -> Account:
        """Update ``current_price`` of every holding (or just ``symbol``).

        Quotes are fetched before the write unit so a version conflict
        replays only the database work.
        """
        account = InvestmentService.get_account(db, user_id, account_id)
        if symbol is not None:
            targets = [InvestmentService.get_holding(account, symbol)]
        else:
            targets = list(account.holdings)
        quotes = {
            h.symbol: price_service.get_price(h.symbol, h.asset_kind).price for h in targets
        }

        def apply() -> Account:
            account = InvestmentService.get_account(db, user_id, account_id)
            now = utcnow()
            for holding in account.holdings:
                if holding.symbol in quotes:
                    holding.current_price = quotes[holding.symbol]
                    holding.last_updated = now
            account.touch()
            db.flush()
            return account

        account = run_with_write_retry(db, apply, description=f"refresh prices on {account_id}")
        logger.info("Refreshed %d price(s) in account %s", len(quotes), account_id)
        return account
