"""
Market Data Service
Yahoo Finance quote, quote-summary and symbol search lookups via yfinance
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import yfinance as yf

from app.core.exceptions import QuoteProviderError

logger = logging.getLogger(__name__)


class MarketDataService:
    """
    Thin async wrapper around yfinance.

    yfinance is blocking, so every lookup runs in a worker thread. Results are
    returned as plain dicts shaped like Yahoo's quote / quoteSummary payloads.
    """

    # Keys of Ticker.info that belong to each quoteSummary module
    MODULE_FIELDS = {
        "financialData": (
            "currentPrice",
            "targetHighPrice",
            "targetLowPrice",
            "targetMeanPrice",
            "targetMedianPrice",
            "recommendationMean",
            "recommendationKey",
            "numberOfAnalystOpinions",
            "totalCash",
            "totalCashPerShare",
            "ebitda",
            "totalDebt",
            "quickRatio",
            "currentRatio",
            "totalRevenue",
            "debtToEquity",
            "revenuePerShare",
            "returnOnAssets",
            "returnOnEquity",
            "grossProfits",
            "freeCashflow",
            "operatingCashflow",
            "earningsGrowth",
            "revenueGrowth",
            "grossMargins",
            "ebitdaMargins",
            "operatingMargins",
            "profitMargins",
            "financialCurrency",
        ),
        "defaultKeyStatistics": (
            "enterpriseValue",
            "forwardPE",
            "profitMargins",
            "floatShares",
            "sharesOutstanding",
            "sharesShort",
            "shortRatio",
            "heldPercentInsiders",
            "heldPercentInstitutions",
            "beta",
            "bookValue",
            "priceToBook",
            "trailingEps",
            "forwardEps",
            "pegRatio",
            "enterpriseToRevenue",
            "enterpriseToEbitda",
            "lastFiscalYearEnd",
            "mostRecentQuarter",
            "lastDividendValue",
            "lastDividendDate",
        ),
        "summaryDetail": (
            "previousClose",
            "open",
            "dayLow",
            "dayHigh",
            "dividendRate",
            "dividendYield",
            "payoutRatio",
            "beta",
            "trailingPE",
            "forwardPE",
            "volume",
            "averageVolume",
            "marketCap",
            "fiftyTwoWeekLow",
            "fiftyTwoWeekHigh",
            "currency",
        ),
    }

    def __init__(self, search_limit: int = 8):
        self.search_limit = search_limit

    async def get_quote(self, symbol: str) -> Dict[str, Any]:
        """General quote for a symbol as a flat mapping"""
        return await asyncio.to_thread(self._fetch_info, symbol)

    async def get_quote_summary(self, symbol: str, modules: Sequence[str]) -> Dict[str, Any]:
        """Selected quoteSummary modules for a symbol, keyed by module name"""
        return await asyncio.to_thread(self._fetch_summary, symbol, list(modules))

    async def search_stocks(self, query: str) -> List[Dict[str, Any]]:
        """Quotes matching a free-text query, best match first"""
        return await asyncio.to_thread(self._search, query)

    def _fetch_info(self, symbol: str) -> Dict[str, Any]:
        ticker = yf.Ticker(symbol.upper())
        return self._load_info(ticker, symbol)

    def _load_info(self, ticker: yf.Ticker, symbol: str) -> Dict[str, Any]:
        try:
            info = ticker.info
        except Exception as e:
            raise QuoteProviderError(f"Quote lookup failed for {symbol}: {e}") from e

        if not info or "symbol" not in info:
            raise QuoteProviderError(f"No quote data found for symbol: {symbol}")

        logger.info(f"Retrieved quote for {symbol}")
        return dict(info)

    def _fetch_summary(self, symbol: str, modules: List[str]) -> Dict[str, Any]:
        unknown = [m for m in modules if m not in self.MODULE_FIELDS and m != "recommendationTrend"]
        if unknown:
            raise QuoteProviderError(f"Unsupported quote summary modules: {', '.join(unknown)}")

        ticker = yf.Ticker(symbol.upper())
        summary: Dict[str, Any] = {}

        field_modules = [m for m in modules if m in self.MODULE_FIELDS]
        if field_modules:
            info = self._load_info(ticker, symbol)
            for module in field_modules:
                summary[module] = {
                    key: info[key] for key in self.MODULE_FIELDS[module] if key in info
                }

        if "recommendationTrend" in modules:
            summary["recommendationTrend"] = {"trend": self._recommendation_trend(ticker, symbol)}

        return summary

    def _recommendation_trend(self, ticker: yf.Ticker, symbol: str) -> List[Dict[str, Any]]:
        """Analyst rating counts per period, current period first"""
        try:
            frame = ticker.recommendations
        except Exception as e:
            raise QuoteProviderError(f"Recommendation trend lookup failed for {symbol}: {e}") from e

        if frame is None or getattr(frame, "empty", True):
            return []
        return frame.to_dict(orient="records")

    def _search(self, query: str) -> List[Dict[str, Any]]:
        try:
            results = yf.Search(query, max_results=self.search_limit, news_count=0)
        except Exception as e:
            raise QuoteProviderError(f"Search failed for '{query}': {e}") from e

        quotes: Optional[List[Dict[str, Any]]] = results.quotes
        logger.info(f"Stock search performed for: {query} ({len(quotes or [])} results)")
        return quotes or []
