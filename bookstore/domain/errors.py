# bookstore/domain/errors.py
from typing import Any


class AppError(Exception):
    """
    Base of every error the stores and the auth chain raise.
    The api layer maps status_code/code straight onto the response.
    """

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None, details: Any = None, debug: str | None = None):
        self.message = message or self.default_message()
        self.details = details
        self.debug = debug
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return "Internal server error"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    entity = "resource"

    @classmethod
    def default_message(cls) -> str:
        return f"{cls.entity} not found"


class BookNotFoundError(NotFoundError):
    entity = "book"


class AuthorNotFoundError(NotFoundError):
    entity = "author"


class CustomerNotFoundError(NotFoundError):
    entity = "customer"


class OrderNotFoundError(NotFoundError):
    entity = "order"


class UserNotFoundError(NotFoundError):
    entity = "user"


class InvalidInputError(AppError):
    status_code = 400
    code = "INVALID_INPUT"

    @classmethod
    def default_message(cls) -> str:
        return "Validation failed"


class BookDoesNotExistError(InvalidInputError):
    code = "BOOK_DOES_NOT_EXIST"

    @classmethod
    def default_message(cls) -> str:
        return "book does not exist"


class InsufficientStockError(AppError):
    status_code = 400
    code = "INSUFFICIENT_STOCK"

    @classmethod
    def default_message(cls) -> str:
        return "insufficient stock"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"

    @classmethod
    def default_message(cls) -> str:
        return "Resource already exists"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"

    @classmethod
    def default_message(cls) -> str:
        return "Unauthorized"


class MissingTokenError(UnauthorizedError):
    code = "MISSING_TOKEN"

    @classmethod
    def default_message(cls) -> str:
        return "Missing authorization token"


class InvalidTokenError(UnauthorizedError):
    code = "INVALID_TOKEN"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid token"


class ExpiredTokenError(UnauthorizedError):
    code = "EXPIRED_TOKEN"

    @classmethod
    def default_message(cls) -> str:
        return "Token has expired"


class InvalidCredentialsError(UnauthorizedError):
    code = "INVALID_CREDENTIALS"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid credentials"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"

    @classmethod
    def default_message(cls) -> str:
        return "Forbidden"


class PersistenceError(AppError):
    """Raised after the in-memory change committed but the snapshot write failed."""

    code = "PERSISTENCE_ERROR"
    result = None

    @classmethod
    def default_message(cls) -> str:
        return "Change applied but could not be persisted"


class CancelledError(AppError):
    status_code = 499
    code = "CANCELLED"

    @classmethod
    def default_message(cls) -> str:
        return "Operation cancelled"
