# bookstore/services/report_service.py
from datetime import timedelta
from decimal import Decimal

from bookstore.domain.errors import NotFoundError
from bookstore.domain.schemas import BookSales, SalesReport, utcnow
from bookstore.repos.book_repo import BookRepo
from bookstore.repos.order_repo import OrderRepo
from bookstore.repos.report_repo import ReportRepo
from bookstore.utils.cancellation import CancelToken
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)

TOP_BOOKS_LIMIT = 10


class ReportService:
    """
    Builds sales summaries from the order and book stores.
    Takes one store's read lock at a time, never both.
    """

    def __init__(self, orders: OrderRepo, books: BookRepo, reports: ReportRepo):
        self.orders = orders
        self.books = books
        self.reports = reports

    def generate(self, window: timedelta, cancel: CancelToken | None = None) -> SalesReport:
        end = utcnow()
        orders = self.orders.list_in_time_range(end - window, end, cancel)

        revenue = Decimal("0.00")
        sold: dict[int, int] = {}
        for order in orders:
            revenue += order.total_price
            for book_id, qty in order.quantities().items():
                sold[book_id] = sold.get(book_id, 0) + qty

        top: list[BookSales] = []
        for book_id, qty in sold.items():
            try:
                book = self.books.get(book_id, cancel)
            except NotFoundError:
                logger.info(f"Book {book_id} was deleted, left out of the report")
                continue
            top.append(BookSales(book=book, quantity=qty))

        top.sort(key=lambda s: (-s.quantity, s.book.id))

        report = SalesReport(
            timestamp=utcnow(),
            total_revenue=revenue,
            total_orders=len(orders),
            top_selling_books=top[:TOP_BOOKS_LIMIT],
        )
        self.reports.store(report)

        logger.info(f"Sales report generated: {report.total_orders} orders, revenue {report.total_revenue}")
        return report
