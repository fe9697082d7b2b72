"""
Building Model

A building is stored as one row holding a document: free-form attributes
and the ordered list of embedded floors live in JSON columns (JSONB on
PostgreSQL).
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, DateTime, Index, JSON, Text
from sqlalchemy.dialects.postgresql import JSONB

from buildings_api.lib.database import Base

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Keys owned by the row itself; never kept among the free-form attributes.
RESERVED_KEYS = frozenset({"id", "floors", "modelPath", "createdAt", "updatedAt"})


class Building(Base):
    __tablename__ = "buildings"

    id = Column(Text, primary_key=True)  # any client-supplied string
    attributes = Column(JSONDocument, nullable=False, default=dict)  # {"name": "Tower A", ...}
    floors = Column(JSONDocument, nullable=False, default=list)  # [{"id": "...", "label": "L1"}]
    model_path = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index('ix_buildings_created_at', 'created_at'),
    )

    def to_document(self) -> Dict[str, Any]:
        return {
            **(self.attributes or {}),
            "id": self.id,
            "floors": list(self.floors or []),
            "modelPath": self.model_path,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
