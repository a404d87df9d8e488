# bookstore/data/snapshot.py
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List

from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class SnapshotBackend(ABC):
    """
    Durable side-store for whole collections.
    save() fully overwrites a collection, load() returns [] when nothing was saved yet.
    """

    @abstractmethod
    def save(self, collection: str, records: List[dict[str, Any]]) -> None:
        ...

    @abstractmethod
    def load(self, collection: str) -> List[dict[str, Any]]:
        ...


class JsonFileBackend(SnapshotBackend):
    """One indented JSON array per collection: <base_dir>/<collection>.json"""

    def __init__(self, base_dir: str | os.PathLike):
        self.base_dir = Path(base_dir)

    def path_for(self, collection: str) -> Path:
        return self.base_dir / f"{collection}.json"

    def save(self, collection: str, records: List[dict[str, Any]]) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(collection)
        fd, tmp = tempfile.mkstemp(dir=self.base_dir, prefix=f".{collection}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def load(self, collection: str) -> List[dict[str, Any]]:
        path = self.path_for(collection)
        if not path.exists():
            logger.info(f"No snapshot at {path}, starting empty")
            return []
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"Snapshot {path} is not a JSON array")
        return data


class InMemoryBackend(SnapshotBackend):
    """Keeps snapshots in a dict, used by tests and throwaway instances."""

    def __init__(self):
        self._lock = threading.Lock()
        self._data: dict[str, str] = {}

    def save(self, collection: str, records: List[dict[str, Any]]) -> None:
        payload = json.dumps(records)
        with self._lock:
            self._data[collection] = payload

    def load(self, collection: str) -> List[dict[str, Any]]:
        with self._lock:
            payload = self._data.get(collection)
        return json.loads(payload) if payload else []
