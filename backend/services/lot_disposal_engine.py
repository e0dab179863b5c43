"""FIFO disposal engine for holding lots.

Pure functions over immutable lot snapshots: no session, no ORM objects.
The investment service converts HoldingLot rows to ``LotState``, calls
``dispose_fifo`` and writes the result back.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from services.exceptions import InsufficientQuantityError, LedgerValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LotState:
    """Snapshot of one purchase lot."""

    lot_id: str
    quantity: Decimal
    unit_price: Decimal
    purchase_date: date
    notes: Optional[str] = None


@dataclass(frozen=True)
class LotConsumption:
    """How much of one lot a disposal took."""

    lot_id: str
    quantity: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class DisposalResult:
    """Outcome of a FIFO disposal.

    Attributes:
        remaining_lots: Lots left after the disposal, FIFO-ordered, none at zero.
        consumed: Per-lot breakdown in the order lots were touched.
        disposed_quantity: Total quantity removed (equals the request).
        holding_emptied: True when no lots remain and the holding should go.
    """

    remaining_lots: tuple[LotState, ...]
    consumed: tuple[LotConsumption, ...]
    disposed_quantity: Decimal

    @property
    def holding_emptied(self) -> bool:
        return not self.remaining_lots


def total_quantity(lots: Sequence[LotState]) -> Decimal:
    """Sum of lot quantities."""
    return sum((lot.quantity for lot in lots), Decimal("0"))


def fifo_order(lots: Sequence[LotState]) -> list[LotState]:
    """Oldest purchase first; ``sorted`` is stable so ties keep input order."""
    return sorted(lots, key=lambda lot: lot.purchase_date)


def dispose_fifo(lots: Sequence[LotState], quantity: Decimal) -> DisposalResult:
    """Remove ``quantity`` from ``lots``, oldest lot first.

    Validation happens before any lot is touched, so a rejected request
    leaves the caller's data exactly as it was.

    Args:
        lots: Current lots of one holding, in insertion order.
        quantity: Amount to dispose; must be > 0 and <= the lots' total.

    Returns:
        DisposalResult with the new lot list and the per-lot breakdown.

    Raises:
        LedgerValidationError: quantity is not positive.
        InsufficientQuantityError: quantity exceeds the total held.
    """
    if quantity <= 0:
        raise LedgerValidationError(f"Disposal quantity must be positive, got {quantity}")

    available = total_quantity(lots)
    if quantity > available:
        raise InsufficientQuantityError(quantity, available)

    remaining = quantity
    consumed: list[LotConsumption] = []
    kept: list[LotState] = []

    for lot in fifo_order(lots):
        if remaining <= 0:
            kept.append(lot)
            continue

        if lot.quantity <= remaining:
            remaining -= lot.quantity
            consumed.append(LotConsumption(lot.lot_id, lot.quantity, Decimal("0")))
        else:
            left = lot.quantity - remaining
            consumed.append(LotConsumption(lot.lot_id, remaining, left))
            kept.append(replace(lot, quantity=left))
            remaining = Decimal("0")

    remaining_lots = tuple(lot for lot in kept if lot.quantity > 0)
    logger.debug(
        "FIFO disposal of %s across %d lots (%d remain)",
        quantity, len(consumed), len(remaining_lots),
    )
    return DisposalResult(
        remaining_lots=remaining_lots,
        consumed=tuple(consumed),
        disposed_quantity=quantity,
    )
