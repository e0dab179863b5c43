"""Test fixtures and sample data."""
import pytest
from datetime import date
from decimal import Decimal

from models import Account, Asset, Budget, Holding, HoldingLot
from sqlalchemy.orm import Session

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def make_account(
    db: Session,
    account_type: str = "checking",
    balance: Decimal = Decimal("1000.00"),
    name: str | None = None,
    user_id: str = USER_ID,
) -> Account:
    """Create and commit an account.

    This is a helper function (not a fixture) for tests that need several
    accounts of different types.
    """
    acc = Account(
        user_id=user_id,
        name=name or f"Test {account_type}",
        account_type=account_type,
        balance=balance,
    )
    db.add(acc)
    db.commit()
    db.refresh(acc)
    return acc


def add_holding(
    db: Session,
    account: Account,
    symbol: str,
    lots: list[tuple[Decimal, Decimal, date]],
    asset_kind: str = "stock",
    current_price: Decimal = Decimal("0"),
) -> Holding:
    """Create a holding with lots given as (quantity, unit_price, purchase_date)."""
    holding = Holding(
        account_id=account.id,
        symbol=symbol,
        name=symbol,
        asset_kind=asset_kind,
        current_price=current_price,
    )
    for position, (quantity, unit_price, purchase_date) in enumerate(lots):
        holding.lots.append(
            HoldingLot(
                quantity=quantity,
                unit_price=unit_price,
                purchase_date=purchase_date,
                position=position,
            )
        )
    db.add(holding)
    db.commit()
    db.refresh(holding)
    return holding


@pytest.fixture
def checking(db: Session) -> Account:
    """Checking account holding 1000.00."""
    return make_account(db, "checking", Decimal("1000.00"), name="Everyday Checking")


@pytest.fixture
def credit_card(db: Session) -> Account:
    """Credit card owing 200.00."""
    return make_account(db, "credit_card", Decimal("200.00"), name="Rewards Card")


@pytest.fixture
def brokerage(db: Session) -> Account:
    """Investment account with 500.00 cash and no holdings."""
    return make_account(db, "investment", Decimal("500.00"), name="Brokerage")


@pytest.fixture
def budget(db: Session) -> Budget:
    """Monthly food budget of 400 with nothing spent."""
    b = Budget(
        user_id=USER_ID,
        name="Groceries",
        category="food",
        amount=Decimal("400.00"),
        spent=Decimal("0"),
        period="monthly",
        start_date=date(2025, 1, 1),
    )
    db.add(b)
    db.commit()
    db.refresh(b)
    return b


@pytest.fixture
def house(db: Session) -> Asset:
    """A home valued at 350,000."""
    a = Asset(
        user_id=USER_ID,
        category="real_estate",
        name="Home",
        quantity=Decimal("1"),
        value=Decimal("350000.00"),
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    return a
