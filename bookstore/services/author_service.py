# bookstore/services/author_service.py
from bookstore.domain.errors import ConflictError
from bookstore.repos.author_repo import AuthorRepo
from bookstore.repos.book_repo import BookRepo
from bookstore.utils.cancellation import CancelToken, check_cancelled
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class AuthorService:
    def __init__(self, authors: AuthorRepo, books: BookRepo):
        self.authors = authors
        self.books = books

    def delete_author(self, author_id: int, cancel: CancelToken | None = None) -> None:
        """
        Authors referenced by books cannot be deleted.

        The author write lock is held across the count and the removal, book
        writes take the author read lock first (lock order: authors, then books).
        """
        with self.authors.lock.write():
            check_cancelled(cancel)
            if not self.authors.contains_unlocked(author_id):
                raise self.authors.not_found(details={"id": author_id})

            book_count = self.books.count_by_author(author_id)
            if book_count > 0:
                logger.info(f"Refusing to delete author {author_id}, {book_count} books reference it")
                raise ConflictError(
                    "Cannot delete author with existing books",
                    details={"book_count": book_count},
                )

            self.authors.remove_unlocked(author_id)

        logger.info(f"Deleted authors record {author_id}")
        self.authors.persist_or_raise(None)
