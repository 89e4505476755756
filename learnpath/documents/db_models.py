"""Database models for the remote document store."""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, String

from learnpath.database.base import Base


class StoredDocument(Base):
    """One document of one collection, stored as JSON."""

    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    key = Column(String(255), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        """Return string representation of the document."""
        return f"<StoredDocument(collection={self.collection}, key={self.key})>"
