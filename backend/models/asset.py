"""Asset model - a manually valued possession outside any account."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String

from database import Base
from models.utils import generate_uuid, utcnow


class Asset(Base):
    """Something owned and valued by hand: a house, a car, a watch.

    ``value`` is the total value of the item (not per unit). ``symbol`` and
    ``price`` are optional reference fields for quoted items.
    """

    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint("value >= 0", name="ck_asset_value_non_negative"),
        CheckConstraint("quantity > 0", name="ck_asset_quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Numeric(18, 8), nullable=False, default=Decimal("1"))
    value = Column(Numeric(18, 2), nullable=False)
    symbol = Column(String, nullable=True)
    price = Column(Numeric(18, 8), nullable=True)
    date_added = Column(DateTime, default=utcnow, index=True)
    last_updated = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )
