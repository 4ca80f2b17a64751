from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from cryptofav.db.session import Base
from cryptofav.utils.time import utcnow


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("asset_id", name="uq_favorites_asset_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    asset_id = Column(String, nullable=False, index=True)  # upstream coin id, e.g. "bitcoin"

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
