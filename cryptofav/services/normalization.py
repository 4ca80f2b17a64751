"""Map loosely shaped CoinGecko JSON into the fixed response records.

Every field is read with an explicit default: anything missing or of the
wrong JSON type becomes None, and fields we do not model are dropped.
"""

from __future__ import annotations

from typing import Any

from cryptofav.schemas.market import (
    AssetDetail,
    AssetMarketData,
    CurrentPrice,
    MarketChart,
    MarketListing,
    PricePoint,
)


MARKETS_LIMIT = 10


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _number(value: Any) -> float | int | None:
    # bool is an int subclass; JSON true/false is not a price
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _symbol(value: Any) -> str:
    return (_string(value) or "").upper()


def normalize_listing(item: dict[str, Any]) -> MarketListing:
    return MarketListing(
        id=_string(item.get("id")),
        name=_string(item.get("name")),
        symbol=_symbol(item.get("symbol")),
        image=_string(item.get("image")),
        current_price=_number(item.get("current_price")),
        price_change_percentage_24h=_number(item.get("price_change_percentage_24h")),
    )


def normalize_markets(raw: Any, limit: int = MARKETS_LIMIT) -> list[MarketListing]:
    """Upstream markets list -> at most ``limit`` listings, upstream order kept."""
    if not isinstance(raw, list):
        return []
    return [normalize_listing(item) for item in raw if isinstance(item, dict)][:limit]


def normalize_asset(raw: Any) -> AssetDetail:
    data = _mapping(raw)
    if not data:
        return AssetDetail()

    image = _mapping(data.get("image"))
    market_data = _mapping(data.get("market_data"))
    current_price = _mapping(market_data.get("current_price"))

    return AssetDetail(
        id=_string(data.get("id")),
        name=_string(data.get("name")),
        symbol=_symbol(data.get("symbol")),
        image=_string(image.get("large")) or _string(image.get("small")),
        market_data=AssetMarketData(
            current_price=CurrentPrice(usd=_number(current_price.get("usd"))),
            price_change_percentage_24h=_number(market_data.get("price_change_percentage_24h")),
        ),
    )


def normalize_price_row(row: Any) -> PricePoint | None:
    if not isinstance(row, (list, tuple)) or len(row) < 2:
        return None
    timestamp, price = _number(row[0]), _number(row[1])
    if timestamp is None or price is None:
        return None
    return PricePoint(timestamp=int(timestamp), price=price)


def normalize_market_chart(raw: Any) -> MarketChart:
    prices = _mapping(raw).get("prices")
    if not isinstance(prices, list):
        return MarketChart()

    points = []
    for row in prices:
        point = normalize_price_row(row)
        if point is not None:
            points.append(point)
    return MarketChart(prices=points)
