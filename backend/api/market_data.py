"""Market data API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas import AssetKind, QuoteResponse, SymbolMatchResponse
from services.price_service import PriceService
from utils.ticker import normalize_symbol

router = APIRouter(prefix="/api/market-data", tags=["market-data"])

# One process-wide instance so the quote and search memos are shared.
_price_service: Optional[PriceService] = None

# Dependency injection for testing
_price_service_override: Optional[PriceService] = None


def get_price_service() -> PriceService:
    """Get the PriceService instance, allowing for test overrides."""
    global _price_service
    if _price_service_override is not None:
        return _price_service_override
    if _price_service is None:
        _price_service = PriceService()
    return _price_service


def set_price_service_override(service: Optional[PriceService]) -> None:
    """Set a PriceService override for testing."""
    global _price_service_override
    _price_service_override = service


@router.get("/price", response_model=QuoteResponse)
def get_price(
    symbol: str = Query(..., min_length=1),
    kind: AssetKind = AssetKind.stock,
    service: PriceService = Depends(get_price_service),
):
    """Current price for a symbol.

    Always answers: when the live source is down the price comes from the
    reference table or is synthesised.
    """
    try:
        symbol = normalize_symbol(symbol)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    quote = service.get_price(symbol, kind.value)
    return QuoteResponse(
        symbol=quote.symbol,
        price=quote.price,
        currency=quote.currency,
        as_of=quote.as_of,
    )


@router.get("/search", response_model=list[SymbolMatchResponse])
def search_symbols(
    query: str = Query(..., min_length=1),
    kind: AssetKind = AssetKind.stock,
    service: PriceService = Depends(get_price_service),
):
    """Search symbols by ticker or name."""
    return [
        SymbolMatchResponse(
            symbol=m.symbol,
            name=m.name,
            exchange=m.exchange,
            image=m.image,
        )
        for m in service.search(query, kind.value)
    ]
