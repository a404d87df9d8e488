from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from bookstore.data.database import Base


class SnapshotModel(Base):
    __tablename__ = "snapshots"

    collection = Column(String(64), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
