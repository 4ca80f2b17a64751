from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cryptofav.db.session import get_db
from cryptofav.schemas.favorites import FavoriteCreateRequest, FavoriteOut
from cryptofav.services.favorites import add_favorite, list_favorites, remove_favorite


router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=list[FavoriteOut])
async def index_favorites(db: AsyncSession = Depends(get_db)):
    rows = await list_favorites(db)
    return [FavoriteOut.model_validate(row) for row in rows]


@router.post("", response_model=FavoriteOut, status_code=201)
async def store_favorite(payload: FavoriteCreateRequest, db: AsyncSession = Depends(get_db)):
    row = await add_favorite(db, payload.assetId)
    return FavoriteOut.model_validate(row)


@router.delete("/{asset_id}", status_code=204)
async def destroy_favorite(asset_id: str, db: AsyncSession = Depends(get_db)) -> Response:
    await remove_favorite(db, asset_id)
    return Response(status_code=204)
