"""
Stock Summary Builder
Merges a quote and a quote summary into the flat StockSummary record.

Numbers are rendered the way a JavaScript client expects them: two-decimal
values round half-up on the exact binary value (``Number.prototype.toFixed``)
and plain values print integral floats without a trailing ``.0``.
"""

import math
import numbers
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Mapping, Optional

from app.schemas.stock import StockSummary

NOT_AVAILABLE = "N/A"
MANUAL_INPUT_PLACEHOLDER = "Requires manual input or additional API"

SUMMARY_MODULES = ["financialData", "defaultKeyStatistics", "recommendationTrend"]

# Suffix thresholds, largest first
LARGE_NUMBER_SCALES = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
)


def as_number(value: Any) -> Optional[float]:
    """Return value as a real number, or None when it is missing or not numeric"""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, numbers.Real):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    value = float(value)
    if math.isnan(value):
        return None
    return value


def js_string(value: float) -> str:
    """
    Stringify a number like JavaScript's ``String(number)``.

    Uses the shortest round-tripping digits (same as ``repr``) but places
    the decimal point by the JavaScript rules: plain notation for magnitudes
    from 1e-6 up to 1e21, otherwise ``1.5e+22`` / ``1e-7`` style.
    """
    if isinstance(value, numbers.Integral) and abs(value) < 10 ** 21:
        return str(int(value))
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    # value == 0.<digits> * 10**point
    point = len(digits) + exponent
    prefix = "-" if sign else ""

    if len(digits) <= point <= 21:
        return prefix + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return prefix + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return prefix + "0." + "0" * -point + digits

    power = point - 1
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    return f"{prefix}{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"


def to_fixed(value: float, digits: int = 2) -> str:
    """Format like JavaScript's ``toFixed``"""
    if isinstance(value, float) and math.isinf(value):
        return js_string(value)
    if abs(value) >= 1e21:
        return js_string(value)
    if value == 0:
        value = 0
    with localcontext() as ctx:
        ctx.prec = 64
        quantum = Decimal(1).scaleb(-digits)
        return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_large_number(value: Any) -> str:
    """Scale to T/B/M with two decimals; smaller values print as-is"""
    num = as_number(value)
    if num is None:
        return NOT_AVAILABLE
    for threshold, suffix in LARGE_NUMBER_SCALES:
        if num >= threshold:
            return to_fixed(num / threshold) + suffix
    return js_string(num)


def format_ratio(value: Any) -> str:
    num = as_number(value)
    if num is None:
        return NOT_AVAILABLE
    return to_fixed(num)


def format_count(value: Any) -> str:
    num = as_number(value)
    if num is None:
        return NOT_AVAILABLE
    return js_string(num)


def format_text(value: Any) -> str:
    if isinstance(value, str) and value:
        return value
    return NOT_AVAILABLE


def format_implied_change(target_price: Any, current_price: Any) -> str:
    """
    Percentage move from the current price to the analysts' mean target.

    Returns "N/A" when either price is missing or the current price is zero.
    """
    target = as_number(target_price)
    current = as_number(current_price)
    if target is None or current is None or current == 0:
        return NOT_AVAILABLE
    return to_fixed((target / current - 1) * 100) + "%"


def recommendation_label(trend: Optional[List[Mapping[str, Any]]]) -> str:
    """Return "Buy" when the latest period has more strong buys than sells, otherwise "Sell"."""
    if not trend:
        return "Sell"
    latest = trend[0] or {}
    strong_buy = as_number(latest.get("strongBuy"))
    sell = as_number(latest.get("sell"))
    if strong_buy is not None and sell is not None and strong_buy > sell:
        return "Buy"
    return "Sell"


def build_stock_summary(quote: Mapping[str, Any], summary: Mapping[str, Any]) -> StockSummary:
    """Merge a flat quote and a module-keyed quote summary into a StockSummary"""
    financial_data: Dict[str, Any] = summary.get("financialData") or {}
    key_statistics: Dict[str, Any] = summary.get("defaultKeyStatistics") or {}
    trend = (summary.get("recommendationTrend") or {}).get("trend") or []

    return StockSummary(
        name=format_text(quote.get("longName")),
        description=format_text(quote.get("longBusinessSummary")),
        marketCap=format_large_number(quote.get("marketCap")),
        sharesOutstanding=format_large_number(quote.get("sharesOutstanding")),
        floatShares=format_large_number(key_statistics.get("floatShares")),
        evEbitda=format_ratio(key_statistics.get("enterpriseToEbitda")),
        peTtm=format_ratio(quote.get("trailingPE")),
        dividendRate=format_ratio(quote.get("dividendRate")),
        cashPosition=format_large_number(financial_data.get("totalCash")),
        totalDebt=format_large_number(financial_data.get("totalDebt")),
        debtToEquity=format_ratio(financial_data.get("debtToEquity")),
        currentRatio=format_ratio(financial_data.get("currentRatio")),
        strengthsAndCatalysts=MANUAL_INPUT_PLACEHOLDER,
        analystRating=format_ratio(financial_data.get("recommendationMean")),
        numberOfAnalysts=format_count(financial_data.get("numberOfAnalystOpinions")),
        meanTargetPrice=format_ratio(financial_data.get("targetMeanPrice")),
        impliedChange=format_implied_change(
            financial_data.get("targetMeanPrice"), quote.get("regularMarketPrice")
        ),
        risksAndMitigation=MANUAL_INPUT_PLACEHOLDER,
        recommendation=recommendation_label(trend),
    )
