"""Signed balance deltas for cash-ledger transactions.

Liability balances are stored positive-as-owed, so the same transaction
moves an asset and a liability account in opposite directions:

    type       asset source   liability source   target
    income     +amount        -amount            -
    expense    -amount        +amount            -
    payment    -amount        (rejected)         liability: -amount
    transfer   -amount        +amount            asset: +amount, liability: -amount
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from models.account import LIABILITY_ACCOUNT_TYPES
from services.exceptions import LedgerValidationError

TRANSACTION_TYPES = ("income", "expense", "payment", "transfer")
TYPES_WITH_TARGET = frozenset({"payment", "transfer"})


def is_liability(account_type: str) -> bool:
    """credit_card, loan and mortgage are liabilities; everything else is an asset."""
    return account_type in LIABILITY_ACCOUNT_TYPES


@dataclass(frozen=True)
class BalanceEffect:
    """Deltas to add to the source account and, for two-sided types, the target."""

    source_delta: Decimal
    target_delta: Optional[Decimal] = None

    def reversed(self) -> "BalanceEffect":
        return BalanceEffect(
            source_delta=-self.source_delta,
            target_delta=None if self.target_delta is None else -self.target_delta,
        )


def _outflow(account_type: str, amount: Decimal) -> Decimal:
    # Money leaving an asset lowers it; charging a liability raises what is owed.
    return amount if is_liability(account_type) else -amount


def _inflow(account_type: str, amount: Decimal) -> Decimal:
    return -amount if is_liability(account_type) else amount


def compute_balance_effect(
    transaction_type: str,
    amount: Decimal,
    source_type: str,
    target_type: Optional[str] = None,
) -> BalanceEffect:
    """Compute the balance deltas a transaction applies.

    Args:
        transaction_type: income, expense, payment or transfer.
        amount: Transaction amount; the sign is ignored.
        source_type: account_type of the account the transaction is recorded on.
        target_type: account_type of the target account (payment/transfer only).

    Raises:
        LedgerValidationError: unknown type, missing/unexpected target, a
            payment drawn from a liability, or a payment to an asset account.
    """
    amount = abs(Decimal(amount))

    if transaction_type not in TRANSACTION_TYPES:
        raise LedgerValidationError(f"Unsupported transaction type: {transaction_type!r}")

    if transaction_type in TYPES_WITH_TARGET:
        if target_type is None:
            raise LedgerValidationError(f"A {transaction_type} requires a target account")
    elif target_type is not None:
        raise LedgerValidationError(f"A {transaction_type} cannot have a target account")

    if transaction_type == "income":
        return BalanceEffect(source_delta=_inflow(source_type, amount))

    if transaction_type == "expense":
        return BalanceEffect(source_delta=_outflow(source_type, amount))

    if transaction_type == "payment":
        if is_liability(source_type):
            raise LedgerValidationError("Payment source must be an asset account")
        if not is_liability(target_type):
            raise LedgerValidationError(
                "Payment target must be a liability account (credit_card, loan, mortgage)"
            )
        return BalanceEffect(source_delta=-amount, target_delta=-amount)

    # transfer
    return BalanceEffect(
        source_delta=_outflow(source_type, amount),
        target_delta=_inflow(target_type, amount),
    )


def budget_increment(transaction_type: str, amount: Decimal) -> Decimal:
    """Amount a transaction adds to its budget's ``spent`` accumulator.

    Only expenses and payments count against a budget.
    """
    if transaction_type in ("expense", "payment"):
        return abs(Decimal(amount))
    return Decimal("0")
