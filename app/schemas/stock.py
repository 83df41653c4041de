from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

NA = "N/A"


class StockSummary(BaseModel):
    """Flat company snapshot; every value is display-ready text or "N/A" """

    model_config = ConfigDict(populate_by_name=True)

    name: str = NA
    description: str = NA
    marketCap: str = NA
    sharesOutstanding: str = NA
    # "float" on the wire; the attribute name would shadow the builtin
    floatShares: str = Field(default=NA, alias="float")
    evEbitda: str = NA
    peTtm: str = NA
    dividendRate: str = NA
    cashPosition: str = NA
    totalDebt: str = NA
    debtToEquity: str = NA
    currentRatio: str = NA
    strengthsAndCatalysts: str = NA
    analystRating: str = NA
    numberOfAnalysts: str = NA
    meanTargetPrice: str = NA
    impliedChange: str = NA
    risksAndMitigation: str = NA
    recommendation: str = "Sell"


class TickerLookupRequest(BaseModel):
    stockName: Optional[str] = None


class TickerLookupResponse(BaseModel):
    ticker: str
