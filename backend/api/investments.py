"""Investment account API endpoints: holdings, lots, disposals and activity."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.auth import get_current_user_id
from api.helpers import http_error
from api.market_data import get_price_service
from database import get_db
from schemas import (
    BuyRequest,
    CashUpdate,
    DisposalResponse,
    HoldingResponse,
    InvestmentAccountResponse,
    InvestmentTransactionCreate,
    InvestmentTransactionResponse,
    LotCreate,
    LotResponse,
    LotUpdate,
    RemoveRequest,
    SellRequest,
)
from services.exceptions import LedgerError
from services.investment_service import (
    InvestmentService,
    holding_summary,
    lot_summary,
    portfolio_summary,
)
from services.price_service import PriceService

router = APIRouter(prefix="/api/investments", tags=["investments"])


@router.get("/{account_id}", response_model=InvestmentAccountResponse)
def get_investment_account(
    account_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Account with holdings, lots and portfolio totals."""
    try:
        account = InvestmentService.get_account(db, user_id, account_id)
    except LedgerError as e:
        raise http_error(e)
    return portfolio_summary(account)


@router.put("/{account_id}/cash", response_model=InvestmentAccountResponse)
def set_cash(
    account_id: str,
    data: CashUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        account = InvestmentService.set_cash(db, user_id, account_id, data)
    except LedgerError as e:
        raise http_error(e)
    return portfolio_summary(account)


# --- Holdings and lots ---


@router.post("/{account_id}/holdings", response_model=HoldingResponse, status_code=201)
def buy_holding(
    account_id: str,
    data: BuyRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Buy: creates the holding on first purchase, otherwise appends a lot."""
    try:
        holding = InvestmentService.buy(db, user_id, account_id, data)
    except LedgerError as e:
        raise http_error(e)
    return holding_summary(holding)


@router.post(
    "/{account_id}/holdings/{symbol}/lots", response_model=LotResponse, status_code=201
)
def add_lot(
    account_id: str,
    symbol: str,
    data: LotCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        lot = InvestmentService.add_lot(db, user_id, account_id, symbol, data)
    except LedgerError as e:
        raise http_error(e)
    return lot_summary(lot)


@router.put("/{account_id}/holdings/{symbol}/lots/{lot_id}", response_model=LotResponse)
def update_lot(
    account_id: str,
    symbol: str,
    lot_id: str,
    data: LotUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        lot = InvestmentService.update_lot(db, user_id, account_id, symbol, lot_id, data)
    except LedgerError as e:
        raise http_error(e)
    return lot_summary(lot)


@router.delete("/{account_id}/holdings/{symbol}/lots/{lot_id}", status_code=204)
def delete_lot(
    account_id: str,
    symbol: str,
    lot_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete a lot; the holding is removed with its last lot."""
    try:
        InvestmentService.delete_lot(db, user_id, account_id, symbol, lot_id)
    except LedgerError as e:
        raise http_error(e)
    return Response(status_code=204)


@router.post("/{account_id}/holdings/{symbol}/sell", response_model=DisposalResponse)
def sell_holding(
    account_id: str,
    symbol: str,
    data: SellRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Sell FIFO across lots; proceeds are credited to the account's cash."""
    try:
        return InvestmentService.sell(db, user_id, account_id, symbol, data)
    except LedgerError as e:
        raise http_error(e)


@router.post("/{account_id}/holdings/{symbol}/remove", response_model=DisposalResponse)
def remove_holding(
    account_id: str,
    symbol: str,
    data: RemoveRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Remove all (or ``quantity``) of a holding without proceeds."""
    try:
        return InvestmentService.remove(db, user_id, account_id, symbol, data)
    except LedgerError as e:
        raise http_error(e)


# --- Prices ---


@router.post("/{account_id}/holdings/{symbol}/price", response_model=HoldingResponse)
def refresh_holding_price(
    account_id: str,
    symbol: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    price_service: PriceService = Depends(get_price_service),
):
    try:
        account = InvestmentService.refresh_prices(
            db, user_id, account_id, price_service, symbol=symbol
        )
        holding = InvestmentService.get_holding(account, symbol)
    except LedgerError as e:
        raise http_error(e)
    return holding_summary(holding)


@router.post("/{account_id}/prices/refresh", response_model=InvestmentAccountResponse)
def refresh_prices(
    account_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    price_service: PriceService = Depends(get_price_service),
):
    """Refresh the current price of every holding in the account."""
    try:
        account = InvestmentService.refresh_prices(db, user_id, account_id, price_service)
    except LedgerError as e:
        raise http_error(e)
    return portfolio_summary(account)


# --- Activity log ---


@router.get(
    "/{account_id}/transactions", response_model=list[InvestmentTransactionResponse]
)
def list_investment_transactions(
    account_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return InvestmentService.list_transactions(db, user_id, account_id)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/{account_id}/transactions",
    response_model=InvestmentTransactionResponse,
    status_code=201,
)
def create_investment_transaction(
    account_id: str,
    data: InvestmentTransactionCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Post a deposit, withdrawal or dividend."""
    try:
        return InvestmentService.log_transaction(db, user_id, account_id, data)
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{account_id}/transactions/{transaction_id}", status_code=204)
def delete_investment_transaction(
    account_id: str,
    transaction_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete an activity record, reversing its effect on cash."""
    try:
        InvestmentService.delete_transaction(db, user_id, account_id, transaction_id)
    except LedgerError as e:
        raise http_error(e)
    return Response(status_code=204)
