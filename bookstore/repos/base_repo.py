# bookstore/repos/base_repo.py
import threading
from typing import Any, Generic, List, Type, TypeVar

from pydantic import BaseModel

from bookstore.data.snapshot import SnapshotBackend
from bookstore.domain.errors import NotFoundError, PersistenceError
from bookstore.utils.cancellation import CancelToken, check_cancelled
from bookstore.utils.logging import get_logger
from bookstore.utils.rwlock import RWLock

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class InMemoryRepo(Generic[T]):
    """
    Map of records keyed by a store-assigned integer id.

    - one coarse RWLock guards the whole map
    - ids come from a monotonic counter and are never reused
    - every mutation is followed by a full snapshot of the collection
    - records are copied on the way in and out, callers never share state with the store
    """

    collection: str = ""
    model: Type[T]
    not_found: Type[NotFoundError] = NotFoundError

    def __init__(self, backend: SnapshotBackend):
        self.backend = backend
        self.lock = RWLock()
        self._snapshot_lock = threading.Lock()
        self._records: dict[int, T] = {}
        self._next_id = 1

    # hooks, called with the write lock held

    def _prepare_create(self, record: T) -> T:
        return record

    def _prepare_update(self, existing: T, record: T) -> T:
        return record

    # queries

    def get(self, record_id: int, cancel: CancelToken | None = None) -> T:
        with self.lock.read():
            check_cancelled(cancel)
            record = self._records.get(record_id)
            if record is None:
                raise self.not_found(details={"id": record_id})
            return record.model_copy(deep=True)

    def list(self, cancel: CancelToken | None = None) -> List[T]:
        with self.lock.read():
            check_cancelled(cancel)
            return [self._records[i].model_copy(deep=True) for i in sorted(self._records)]

    def exists(self, record_id: int) -> bool:
        with self.lock.read():
            return record_id in self._records

    @property
    def next_id(self) -> int:
        with self.lock.read():
            return self._next_id

    # commands

    def create(self, record: T, cancel: CancelToken | None = None) -> T:
        with self.lock.write():
            check_cancelled(cancel)
            record = self._prepare_create(record.model_copy(deep=True))
            record.id = self._next_id
            self._next_id += 1
            self._records[record.id] = record
            created = record.model_copy(deep=True)

        logger.info(f"Created {self.collection} record {created.id}")
        self.persist_or_raise(created)
        return created

    def update(self, record_id: int, record: T, cancel: CancelToken | None = None) -> T:
        with self.lock.write():
            check_cancelled(cancel)
            existing = self._records.get(record_id)
            if existing is None:
                raise self.not_found(details={"id": record_id})
            record = self._prepare_update(existing, record.model_copy(deep=True))
            record.id = record_id
            self._records[record_id] = record
            updated = record.model_copy(deep=True)

        logger.info(f"Updated {self.collection} record {record_id}")
        self.persist_or_raise(updated)
        return updated

    def delete(self, record_id: int, cancel: CancelToken | None = None) -> None:
        with self.lock.write():
            check_cancelled(cancel)
            self.remove_unlocked(record_id)

        logger.info(f"Deleted {self.collection} record {record_id}")
        self.persist_or_raise(None)

    # caller holds self.lock (read for contains, write for remove)

    def contains_unlocked(self, record_id: int) -> bool:
        return record_id in self._records

    def remove_unlocked(self, record_id: int) -> None:
        if record_id not in self._records:
            raise self.not_found(details={"id": record_id})
        del self._records[record_id]

    # snapshots

    def dump(self) -> List[dict[str, Any]]:
        with self.lock.read():
            return [self._records[i].model_dump(mode="json") for i in sorted(self._records)]

    def persist(self) -> None:
        # serialized so an older copy can never overwrite a newer one
        with self._snapshot_lock:
            self.backend.save(self.collection, self.dump())

    def persist_or_raise(self, result: Any) -> None:
        try:
            self.persist()
        except Exception as e:
            logger.error(f"Failed to persist {self.collection} snapshot: {e}")
            err = PersistenceError(
                f"{self.collection} changed in memory but the snapshot write failed",
                debug=str(e),
            )
            err.result = result
            raise err from e

    def load(self) -> int:
        """Reseed the map from the backend, returns the number of loaded records."""
        raw_records = self.backend.load(self.collection)
        records = [self.model.model_validate(raw) for raw in raw_records]

        with self.lock.write():
            self._records.clear()
            for record in records:
                self._records[record.id] = record
            self._next_id = max(self._records, default=0) + 1

        logger.info(f"Loaded {len(records)} {self.collection} records, next id {self._next_id}")
        return len(records)
