"""Manually valued assets (property, vehicles, collectibles)."""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from models import Asset
from schemas.asset import AssetCreate, AssetUpdate
from services.exceptions import LedgerValidationError, NotFoundError
from utils.ticker import normalize_symbol

logger = logging.getLogger(__name__)


def _symbol(raw: Optional[str]) -> Optional[str]:
    if raw is None or not raw.strip():
        return None
    try:
        return normalize_symbol(raw)
    except ValueError as e:
        raise LedgerValidationError(str(e)) from e


class AssetService:
    """CRUD for a user's assets.

    Assets carry no balance effects, so writes follow the plain
    convention: services flush, the API layer commits.
    """

    @staticmethod
    def list_assets(db: Session, user_id: str) -> list[Asset]:
        """The caller's assets, most recently added first."""
        return (
            db.query(Asset)
            .filter(Asset.user_id == user_id)
            .order_by(Asset.date_added.desc(), Asset.name)
            .all()
        )

    @staticmethod
    def get_owned(db: Session, user_id: str, asset_id: str) -> Asset:
        asset = db.query(Asset).filter(Asset.id == asset_id, Asset.user_id == user_id).first()
        if asset is None:
            raise NotFoundError("Asset", asset_id)
        return asset

    @staticmethod
    def create_asset(db: Session, user_id: str, data: AssetCreate) -> Asset:
        asset = Asset(
            user_id=user_id,
            category=data.category.value,
            name=data.name,
            quantity=data.quantity,
            value=data.value,
            symbol=_symbol(data.symbol),
            price=data.price,
        )
        db.add(asset)
        db.flush()
        logger.info("Asset created: %s (id=%s)", asset.name, asset.id)
        return asset

    @staticmethod
    def update_asset(db: Session, user_id: str, asset_id: str, data: AssetUpdate) -> Asset:
        """Apply the set fields of ``data``; ``symbol`` and ``price`` may be cleared."""
        asset = AssetService.get_owned(db, user_id, asset_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("category", "name", "quantity", "value"):
                continue
            if field == "category":
                value = value.value
            elif field == "symbol":
                value = _symbol(value)
            setattr(asset, field, value)
        db.flush()
        return asset

    @staticmethod
    def delete_asset(db: Session, user_id: str, asset_id: str) -> None:
        asset = AssetService.get_owned(db, user_id, asset_id)
        db.delete(asset)
        db.flush()
        logger.info("Asset deleted: id=%s", asset_id)

    @staticmethod
    def total_value(db: Session, user_id: str) -> tuple[Decimal, int]:
        """Sum of asset values and the number of assets."""
        assets = AssetService.list_assets(db, user_id)
        return sum((Decimal(a.value) for a in assets), Decimal("0")), len(assets)
