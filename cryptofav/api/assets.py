from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cryptofav.db.session import get_db
from cryptofav.errors import message_response
from cryptofav.schemas.market import AssetDetail, AssetHistory, AssetListItem, MessageResponse
from cryptofav.services.coingecko import CoinGeckoClient, clamp_days, get_market_client
from cryptofav.services.favorites import favorite_ids


logger = logging.getLogger("cryptofav.api.assets")

router = APIRouter(prefix="/assets", tags=["assets"])

FAILURE_RESPONSES = {500: {"model": MessageResponse}}
NOT_FOUND_RESPONSES = {404: {"model": MessageResponse}, **FAILURE_RESPONSES}


@router.get("", response_model=list[AssetListItem], responses=FAILURE_RESPONSES)
async def list_assets(
    client: CoinGeckoClient = Depends(get_market_client),
    db: AsyncSession = Depends(get_db),
):
    """Top 10 assets by market cap, each flagged with whether it is a favorite."""
    result = await client.list_markets()
    if not result.ok:
        logger.error("Assets index failed | error=%s", result.detail)
        return message_response("Failed to fetch assets", 500)

    listings = result.value
    favorites = await favorite_ids(db, (a.id for a in listings))

    return [
        AssetListItem(**listing.model_dump(), is_favorite=listing.id in favorites)
        for listing in listings
    ]


@router.get("/{asset_id}", response_model=AssetDetail, responses=NOT_FOUND_RESPONSES)
async def show_asset(asset_id: str, client: CoinGeckoClient = Depends(get_market_client)):
    result = await client.get_asset(asset_id)
    if result.not_found:
        return message_response("Asset not found", 404)
    if not result.ok:
        logger.error("Asset details failed | id=%s | error=%s", asset_id, result.detail)
        return message_response("Failed to fetch asset details", 500)
    return result.value


@router.get("/{asset_id}/history", response_model=AssetHistory, responses=NOT_FOUND_RESPONSES)
async def asset_history(
    asset_id: str,
    days: int = 7,
    client: CoinGeckoClient = Depends(get_market_client),
):
    """
    Historical USD prices.
    Example: /assets/bitcoin/history?days=30  (days is clamped to 1..365)
    """
    days = clamp_days(days)
    result = await client.get_market_chart(asset_id, days)
    if result.not_found:
        return message_response("Asset history not found", 404)
    if not result.ok:
        logger.error("Asset history failed | id=%s | days=%d | error=%s", asset_id, days, result.detail)
        return message_response("Failed to fetch asset history", 500)
    return AssetHistory(id=asset_id, days=days, prices=result.value.prices)
