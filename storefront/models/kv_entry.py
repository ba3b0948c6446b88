"""
KeyValueEntry model: one JSON document per string key.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB

from storefront.core.config import settings
from storefront.db.base import Base


class KeyValueEntry(Base):
    __tablename__ = settings.KV_TABLE

    key: str = Column(String(512), primary_key=True)  # type: ignore[assignment]
    value: object = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
