"""SQLAlchemy ORM models for cached assets and user preferences."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from coinview_core.db.base import Base


class AssetRow(Base):
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Nullable so a damaged row can be skipped on load rather than break it.
    asset_id: Mapped[str | None] = mapped_column(Text, unique=True, index=True, nullable=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    type_is_crypto: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data_quote_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_quote_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_orderbook_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_orderbook_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_trade_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_trade_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    data_symbols_count: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    volume_1hrs_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    volume_1day_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    volume_1mth_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cache_last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PreferencesRow(Base):
    __tablename__ = "preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    search_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    favorites_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
