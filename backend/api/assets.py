"""Manually valued assets API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.auth import get_current_user_id
from api.helpers import http_error
from database import get_db
from schemas import AssetCreate, AssetResponse, AssetUpdate
from services.asset_service import AssetService
from services.exceptions import LedgerError

router = APIRouter(prefix="/api/assets", tags=["assets"])


@router.get("", response_model=list[AssetResponse])
def list_assets(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List the caller's assets, newest first."""
    return AssetService.list_assets(db, user_id)


@router.post("", response_model=AssetResponse, status_code=201)
def create_asset(
    asset_data: AssetCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        asset = AssetService.create_asset(db, user_id, asset_data)
    except LedgerError as e:
        raise http_error(e)
    db.commit()
    db.refresh(asset)
    return asset


@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(
    asset_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return AssetService.get_owned(db, user_id, asset_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{asset_id}", response_model=AssetResponse)
def update_asset(
    asset_id: str,
    asset_data: AssetUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Revalue or edit an asset; ``last_updated`` is refreshed."""
    try:
        asset = AssetService.update_asset(db, user_id, asset_id, asset_data)
    except LedgerError as e:
        raise http_error(e)
    db.commit()
    db.refresh(asset)
    return asset


@router.delete("/{asset_id}", status_code=204)
def delete_asset(
    asset_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        AssetService.delete_asset(db, user_id, asset_id)
    except LedgerError as e:
        raise http_error(e)
    db.commit()
    return Response(status_code=204)
