# bookstore/repos/order_repo.py
from datetime import datetime
from decimal import Decimal
from typing import List

from bookstore.data.snapshot import SnapshotBackend
from bookstore.domain.errors import OrderNotFoundError, PersistenceError
from bookstore.domain.schemas import Book, Order, as_utc, utcnow
from bookstore.repos.base_repo import InMemoryRepo
from bookstore.repos.book_repo import BookRepo
from bookstore.utils.cancellation import CancelToken, check_cancelled
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def _total(quantities: dict[int, int], books: dict[int, Book]) -> Decimal:
    total = sum((books[bid].price * qty for bid, qty in quantities.items()), Decimal("0.00"))
    return total.quantize(CENT)


class OrderRepo(InMemoryRepo[Order]):
    """
    Orders and their stock reservations.

    Every mutation runs under this store's write lock for its whole duration,
    including the nested call into the book store, so no two order mutations
    interleave their stock checks and changes. The stock side of each mutation
    is a single net delta plan applied by BookRepo.apply_stock_changes:

    - create: -new quantities
    - update: +old quantities -new quantities (one plan, so a failure leaves stock as it was)
    - delete: +old quantities
    """

    collection = "orders"
    model = Order
    not_found = OrderNotFoundError

    def __init__(self, backend: SnapshotBackend, book_repo: BookRepo):
        super().__init__(backend)
        self.book_repo = book_repo

    # queries

    def list_in_time_range(
        self, start: datetime, end: datetime, cancel: CancelToken | None = None
    ) -> List[Order]:
        """Orders with start <= created_at < end."""
        start, end = as_utc(start), as_utc(end)
        with self.lock.read():
            check_cancelled(cancel)
            return [
                self._records[i].model_copy(deep=True)
                for i in sorted(self._records)
                if self._records[i].created_at is not None
                and start <= as_utc(self._records[i].created_at) < end
            ]

    def owner_of(self, order_id: int) -> int:
        """Customer id of an order, 0 when the order does not exist."""
        with self.lock.read():
            order = self._records.get(order_id)
            return order.customer_id if order else 0

    # commands

    def create(self, order: Order, cancel: CancelToken | None = None) -> Order:
        with self.lock.write():
            check_cancelled(cancel)

            quantities = order.quantities()
            books = self.book_repo.apply_stock_changes(
                {bid: -qty for bid, qty in quantities.items()},
                cancel=cancel,
            )

            record = order.model_copy(deep=True)
            record.id = self._next_id
            record.total_price = _total(quantities, books)
            record.created_at = as_utc(order.created_at) if order.created_at else utcnow()
            self._next_id += 1
            self._records[record.id] = record
            created = record.model_copy(deep=True)

        logger.info(f"Order {created.id} created for customer {created.customer_id}, total {created.total_price}")
        self._persist_all(created)
        return created

    def update(self, order_id: int, order: Order, cancel: CancelToken | None = None) -> Order:
        with self.lock.write():
            check_cancelled(cancel)

            existing = self._records.get(order_id)
            if existing is None:
                raise OrderNotFoundError(details={"id": order_id})

            old = existing.quantities()
            new = order.quantities()
            deltas = {bid: old.get(bid, 0) - new.get(bid, 0) for bid in old.keys() | new.keys()}
            books = self.book_repo.apply_stock_changes(deltas, required=new.keys(), cancel=cancel)

            record = order.model_copy(deep=True)
            record.id = order_id
            record.total_price = _total(new, books)
            record.created_at = existing.created_at
            self._records[order_id] = record
            updated = record.model_copy(deep=True)

        logger.info(f"Order {order_id} updated, stock deltas {deltas}")
        self._persist_all(updated)
        return updated

    def delete(self, order_id: int, cancel: CancelToken | None = None) -> None:
        with self.lock.write():
            check_cancelled(cancel)

            existing = self._records.get(order_id)
            if existing is None:
                raise OrderNotFoundError(details={"id": order_id})

            # reserved quantities go back to stock
            self.book_repo.apply_stock_changes(existing.quantities(), required=(), cancel=cancel)
            del self._records[order_id]

        logger.info(f"Order {order_id} deleted, stock restored")
        self._persist_all(None)

    def _persist_all(self, result):
        # the in-memory commit already happened, both snapshots are attempted
        errors = []
        for repo in (self.book_repo, self):
            try:
                repo.persist()
            except Exception as e:
                logger.error(f"Failed to persist {repo.collection} snapshot: {e}")
                errors.append(f"{repo.collection}: {e}")

        if errors:
            err = PersistenceError("order committed in memory but the snapshot write failed", debug="; ".join(errors))
            err.result = result
            raise err
