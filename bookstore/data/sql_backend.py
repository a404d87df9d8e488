# bookstore/data/sql_backend.py
import json
from typing import Any, List

from sqlalchemy.orm import Session

from bookstore.data.database import Base, make_engine, make_session_factory
from bookstore.data.models.snapshot import SnapshotModel
from bookstore.data.snapshot import SnapshotBackend
from bookstore.utils.logging import get_logger
from bookstore.utils.retry import db_retry

logger = get_logger(__name__)


class SqlSnapshotBackend(SnapshotBackend):
    """
    Snapshots stored as JSON text, one row per collection.
    Not a relational model of the entities, the in-memory stores stay the system of record.
    """

    def __init__(self, url: str):
        self.engine = make_engine(url)
        self.SessionLocal = make_session_factory(self.engine)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Snapshot tables ready: {list(Base.metadata.tables.keys())}")

    @db_retry()
    def save(self, collection: str, records: List[dict[str, Any]]) -> None:
        db: Session = self.SessionLocal()
        try:
            row = db.get(SnapshotModel, collection)
            payload = json.dumps(records)
            if row:
                row.payload = payload
            else:
                db.add(SnapshotModel(collection=collection, payload=payload))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @db_retry()
    def load(self, collection: str) -> List[dict[str, Any]]:
        db: Session = self.SessionLocal()
        try:
            row = db.get(SnapshotModel, collection)
            return json.loads(row.payload) if row else []
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()
