"""Pydantic models for the market data exposed to clients."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field


class MarketListing(BaseModel):
    """One row of the top-by-market-cap listing."""

    id: Optional[str] = None
    name: Optional[str] = None
    symbol: str = ""
    image: Optional[str] = None
    current_price: Optional[Union[int, float]] = None
    price_change_percentage_24h: Optional[Union[int, float]] = None


class AssetListItem(MarketListing):
    is_favorite: bool = False


class CurrentPrice(BaseModel):
    usd: Optional[Union[int, float]] = None


class AssetMarketData(BaseModel):
    current_price: CurrentPrice = Field(default_factory=CurrentPrice)
    price_change_percentage_24h: Optional[Union[int, float]] = None


class AssetDetail(BaseModel):
    """Single-asset view; ``id`` is None when upstream returned nothing usable."""

    id: Optional[str] = None
    name: Optional[str] = None
    symbol: str = ""
    image: Optional[str] = None
    market_data: AssetMarketData = Field(default_factory=AssetMarketData)


class PricePoint(BaseModel):
    timestamp: int = Field(..., description="Unix epoch in milliseconds")
    price: Union[int, float]


class MarketChart(BaseModel):
    prices: list[PricePoint] = Field(default_factory=list)


class AssetHistory(BaseModel):
    id: str
    days: int
    prices: list[PricePoint]


class MessageResponse(BaseModel):
    message: str
