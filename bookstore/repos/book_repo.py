# bookstore/repos/book_repo.py
from contextlib import contextmanager
from typing import Iterable, List

from bookstore.data.snapshot import SnapshotBackend
from bookstore.domain.errors import (
    BookDoesNotExistError,
    BookNotFoundError,
    InsufficientStockError,
    InvalidInputError,
)
from bookstore.domain.schemas import Book, SearchCriteria
from bookstore.repos.author_repo import AuthorRepo
from bookstore.repos.base_repo import InMemoryRepo
from bookstore.utils.cancellation import CancelToken, check_cancelled
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class BookRepo(InMemoryRepo[Book]):
    """
    Owns book records and the authoritative stock counters.
    Stock is only changed by apply_stock_changes, which the order store calls
    while holding its own write lock (lock order: orders, then books).
    Creates and updates hold the author read lock (lock order: authors, then books).
    """

    collection = "books"
    model = Book
    not_found = BookNotFoundError

    def __init__(self, backend: SnapshotBackend, author_repo: AuthorRepo | None = None):
        super().__init__(backend)
        self.author_repo = author_repo

    @contextmanager
    def _author_held(self, author_id: int):
        # the author cannot be deleted until the book write is done
        if self.author_repo is None:
            yield
            return
        with self.author_repo.lock.read():
            if not self.author_repo.contains_unlocked(author_id):
                raise InvalidInputError("author does not exist", details={"author_id": author_id})
            yield

    def create(self, record: Book, cancel: CancelToken | None = None) -> Book:
        with self._author_held(record.author_id):
            return super().create(record, cancel)

    def update(self, record_id: int, record: Book, cancel: CancelToken | None = None) -> Book:
        with self._author_held(record.author_id):
            return super().update(record_id, record, cancel)

    def count_by_author(self, author_id: int) -> int:
        with self.lock.read():
            return sum(1 for b in self._records.values() if b.author_id == author_id)

    def search(self, criteria: SearchCriteria, cancel: CancelToken | None = None) -> List[Book]:
        """
        Only one filter dimension is applied: titles, else authors, else genres,
        else the price range (when max_price > 0). Filters are never combined.
        """
        author_ids: set[int] = set()
        if not criteria.titles and criteria.authors:
            # resolved before taking our lock, the author lock is never taken while holding it
            names = set(criteria.authors)
            authors = self.author_repo.list(cancel) if self.author_repo else []
            author_ids = {a.id for a in authors if a.first_name in names or a.last_name in names}

        results: List[Book] = []
        with self.lock.read():
            check_cancelled(cancel)
            for book_id in sorted(self._records):
                check_cancelled(cancel)
                book = self._records[book_id]

                if criteria.titles:
                    matched = book.title in criteria.titles
                elif criteria.authors:
                    matched = book.author_id in author_ids
                elif criteria.genres:
                    matched = any(g in book.genres for g in criteria.genres)
                elif criteria.max_price > 0:
                    matched = criteria.min_price <= book.price <= criteria.max_price
                else:
                    matched = False

                if matched:
                    results.append(book.model_copy(deep=True))

        return results

    def apply_stock_changes(
        self,
        deltas: dict[int, int],
        required: Iterable[int] | None = None,
        cancel: CancelToken | None = None,
    ) -> dict[int, Book]:
        """
        Order-store internal. Adds deltas[book_id] to each book's stock as one unit.

        Phase 1 validates every book (must exist if listed in `required`, resulting stock >= 0),
        phase 2 applies all deltas. Nothing is applied if phase 1 fails.
        Books that are not required and no longer exist are skipped.
        Does not persist, the caller snapshots after releasing its own lock.
        """
        required_ids = set(deltas) if required is None else set(required)

        with self.lock.write():
            check_cancelled(cancel)

            plan: dict[int, Book] = {}
            for book_id, delta in deltas.items():
                book = self._records.get(book_id)
                if book is None:
                    if book_id in required_ids:
                        raise BookDoesNotExistError(details={"book_id": book_id})
                    logger.warning(f"Book {book_id} no longer exists, skipping stock change {delta:+d}")
                    continue
                if book.stock + delta < 0:
                    raise InsufficientStockError(
                        f"insufficient stock for book {book_id}",
                        details={"book_id": book_id, "available": book.stock, "requested": -delta},
                    )
                plan[book_id] = book

            # no checks past this point, phase 2 must run to completion
            applied: dict[int, Book] = {}
            for book_id, book in plan.items():
                changed = book.model_copy(update={"stock": book.stock + deltas[book_id]})
                self._records[book_id] = changed
                applied[book_id] = changed.model_copy(deep=True)

        logger.info(f"Applied stock changes {deltas}")
        return applied
