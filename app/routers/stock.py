"""
Stock Router
Company snapshot and name-to-ticker lookup backed by Yahoo Finance
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.schemas.common import ErrorResponse
from app.schemas.stock import StockSummary, TickerLookupRequest, TickerLookupResponse
from app.services.market_data_services import MarketDataService
from app.services.stock_summary import SUMMARY_MODULES, build_stock_summary

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stocks"])


# Dependency injection for services
def get_market_data_service(request: Request) -> MarketDataService:
    service = getattr(request.app.state, "market_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Market data service unavailable")
    return service


@router.get("/api/stock", include_in_schema=False)
@router.get("/api/stock/", include_in_schema=False)
async def stock_summary_without_ticker():
    raise HTTPException(status_code=400, detail="Invalid ticker")


@router.get(
    "/api/stock/{ticker}",
    response_model=StockSummary,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_stock_summary(
    ticker: str,
    market_service: MarketDataService = Depends(get_market_data_service)
):
    """
    Company snapshot: size, valuation ratios, balance sheet figures and
    analyst consensus, each rendered as display text or "N/A"
    """
    symbol = ticker.strip()
    if not symbol:
        raise HTTPException(status_code=400, detail="Invalid ticker")

    try:
        quote = await market_service.get_quote(symbol)
        summary = await market_service.get_quote_summary(symbol, SUMMARY_MODULES)
        return build_stock_summary(quote, summary)
    except Exception as e:
        logger.error(f"Error fetching stock data for {symbol}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch stock data")


@router.post(
    "/api/get-ticker",
    response_model=TickerLookupResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_ticker(
    payload: Optional[TickerLookupRequest] = None,
    market_service: MarketDataService = Depends(get_market_data_service)
):
    """Resolve a company name to the symbol of the best search match"""
    stock_name = payload.stockName if payload else None
    if not stock_name:
        raise HTTPException(status_code=400, detail="Stock name is required")

    try:
        quotes = await market_service.search_stocks(stock_name)
        ticker = quotes[0].get("symbol") if quotes else None
    except Exception as e:
        logger.error(f"Error searching Yahoo Finance for '{stock_name}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch stock data from Yahoo Finance")

    if not ticker:
        raise HTTPException(status_code=404, detail="Stock not found")

    return TickerLookupResponse(ticker=ticker)
