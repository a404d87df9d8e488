# bookstore/services/container.py
from dataclasses import dataclass

from bookstore.data.snapshot import JsonFileBackend, SnapshotBackend
from bookstore.repos.author_repo import AuthorRepo
from bookstore.repos.book_repo import BookRepo
from bookstore.repos.customer_repo import CustomerRepo
from bookstore.repos.order_repo import OrderRepo
from bookstore.repos.report_repo import ReportRepo
from bookstore.repos.user_repo import UserRepo
from bookstore.services.auth_service import AuthService, TokenVerifier
from bookstore.services.author_service import AuthorService
from bookstore.services.report_service import ReportService
from bookstore.utils import settings
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


def build_backend() -> SnapshotBackend:
    if settings.PERSISTENCE_BACKEND == "sql":
        from bookstore.data.sql_backend import SqlSnapshotBackend

        return SqlSnapshotBackend(settings.DATABASE_URL)
    return JsonFileBackend(settings.DATA_DIR)


@dataclass
class Container:
    """Every store and service, built once per process and shared by reference."""

    backend: SnapshotBackend
    authors: AuthorRepo
    books: BookRepo
    customers: CustomerRepo
    orders: OrderRepo
    users: UserRepo
    reports: ReportRepo
    verifier: TokenVerifier
    auth_service: AuthService
    author_service: AuthorService
    report_service: ReportService

    @classmethod
    def build(cls, backend: SnapshotBackend | None = None, verifier: TokenVerifier | None = None) -> "Container":
        backend = backend or build_backend()
        verifier = verifier or TokenVerifier()

        authors = AuthorRepo(backend)
        books = BookRepo(backend, author_repo=authors)
        customers = CustomerRepo(backend)
        orders = OrderRepo(backend, book_repo=books)
        users = UserRepo(backend)
        reports = ReportRepo(backend)

        return cls(
            backend=backend,
            authors=authors,
            books=books,
            customers=customers,
            orders=orders,
            users=users,
            reports=reports,
            verifier=verifier,
            auth_service=AuthService(users, verifier),
            author_service=AuthorService(authors, books),
            report_service=ReportService(orders, books, reports),
        )

    def load_all(self) -> None:
        for repo in (self.authors, self.books, self.customers, self.orders, self.users, self.reports):
            try:
                repo.load()
            except Exception as e:
                # store starts empty, as with a missing snapshot
                logger.error(f"Failed to load {repo.collection}: {e}")
