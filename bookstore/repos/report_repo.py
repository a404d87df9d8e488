# bookstore/repos/report_repo.py
import threading
from typing import List

from bookstore.data.snapshot import SnapshotBackend
from bookstore.domain.errors import PersistenceError
from bookstore.domain.schemas import SalesReport
from bookstore.utils.logging import get_logger
from bookstore.utils.rwlock import RWLock

logger = get_logger(__name__)


def merge_reports(*histories: List[SalesReport]) -> List[SalesReport]:
    """Union of report histories ordered by timestamp, identical reports kept once."""
    merged: dict[str, SalesReport] = {}
    for history in histories:
        for report in history:
            merged.setdefault(report.model_dump_json(), report)
    return sorted(merged.values(), key=lambda r: r.timestamp)


class ReportRepo:
    """Append-only history of sales reports plus the latest one."""

    collection = "sales_reports"

    def __init__(self, backend: SnapshotBackend):
        self.backend = backend
        self.lock = RWLock()
        self._snapshot_lock = threading.Lock()
        self._reports: List[SalesReport] = []

    def store(self, report: SalesReport) -> SalesReport:
        """
        Appends a report. The persisted history is re-read and merged before saving,
        so reports written by another process on the same backend are kept.
        """
        with self.lock.write():
            self._reports.append(report.model_copy(deep=True))

        try:
            with self._snapshot_lock:
                persisted = [SalesReport.model_validate(raw) for raw in self.backend.load(self.collection)]
                with self.lock.write():
                    self._reports = merge_reports(persisted, self._reports)
                    records = [r.model_dump(mode="json") for r in self._reports]
                self.backend.save(self.collection, records)
        except Exception as e:
            logger.error(f"Failed to persist sales reports: {e}")
            err = PersistenceError("sales report kept in memory but the snapshot write failed", debug=str(e))
            err.result = report
            raise err from e
        return report

    def latest(self) -> SalesReport | None:
        with self.lock.read():
            return self._reports[-1].model_copy(deep=True) if self._reports else None

    def recent(self, limit: int = 10) -> List[SalesReport]:
        with self.lock.read():
            newest_first = sorted(self._reports, key=lambda r: r.timestamp, reverse=True)
            return [r.model_copy(deep=True) for r in newest_first[:limit]]

    def load(self) -> int:
        reports = [SalesReport.model_validate(raw) for raw in self.backend.load(self.collection)]
        with self.lock.write():
            self._reports = sorted(reports, key=lambda r: r.timestamp)
        logger.info(f"Loaded {len(reports)} sales reports")
        return len(reports)
