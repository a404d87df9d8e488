# bookstore/domain/schemas.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bookstore.domain.roles import Role


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# books


class BookIn(BaseModel):
    """Payload for creating or replacing a book."""

    title: str = Field(..., min_length=1, max_length=200)
    author_id: int = Field(..., gt=0, description="ID of the author")
    genres: List[str] = Field(..., min_length=1, description="Genres, e.g. ['Fantasy', 'Adventure']")
    published_at: datetime
    price: Decimal = Field(..., gt=0, decimal_places=2)
    stock: int = Field(..., ge=0)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("genres")
    @classmethod
    def non_empty_genres(cls, v: List[str]) -> List[str]:
        genres = [g.strip() for g in v]
        if any(not g for g in genres):
            raise ValueError("genres cannot contain empty values")
        return genres

    @field_validator("published_at")
    @classmethod
    def not_in_future(cls, v: datetime) -> datetime:
        v = as_utc(v)
        if v > utcnow():
            raise ValueError("published_at cannot be in the future")
        return v


class Book(BookIn):
    id: int = 0

    model_config = ConfigDict(from_attributes=True)


class SearchCriteria(BaseModel):
    """
    Book search filters. Only one dimension is applied per search,
    in the order titles, authors, genres, price range.
    """

    titles: List[str] = Field(default_factory=list)
    authors: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    min_price: Decimal = Field(Decimal("0"), ge=0)
    max_price: Decimal = Field(Decimal("0"), ge=0)


# authors


class AuthorIn(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    bio: str = Field("", max_length=1000)


class Author(AuthorIn):
    id: int = 0

    model_config = ConfigDict(from_attributes=True)


# customers


class Address(BaseModel):
    street: str = Field(..., min_length=5, max_length=100)
    city: str = Field(..., min_length=2, max_length=50)
    state: str = Field(..., min_length=2, max_length=50)
    postal_code: str = Field(..., min_length=4, max_length=10)
    country: str = Field(..., min_length=2, max_length=50)


class CustomerIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    address: Address


class Customer(CustomerIn):
    id: int = 0
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# orders


class OrderItem(BaseModel):
    book_id: int = Field(..., gt=0, description="ID of the ordered book")
    quantity: int = Field(..., gt=0, description="Ordered quantity (> 0)")


class OrderIn(BaseModel):
    """Payload for placing or replacing an order."""

    customer_id: int = Field(..., gt=0)
    items: List[OrderItem] = Field(..., min_length=1)
    status: OrderStatus = OrderStatus.PENDING


class Order(OrderIn):
    id: int = 0
    total_price: Decimal = Field(Decimal("0.00"), ge=0)
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    def quantities(self) -> dict[int, int]:
        """Quantity per book, items referencing the same book are summed."""
        totals: dict[int, int] = {}
        for item in self.items:
            totals[item.book_id] = totals.get(item.book_id, 0) + item.quantity
        return totals


# reports


class BookSales(BaseModel):
    book: Book
    quantity: int


class SalesReport(BaseModel):
    timestamp: datetime
    total_revenue: Decimal = Field(Decimal("0.00"), ge=0)
    total_orders: int = Field(0, ge=0)
    top_selling_books: List[BookSales] = Field(default_factory=list)


# users and auth


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    role: Role = Role.USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: Role

    model_config = ConfigDict(from_attributes=True)


class User(UserRead):
    password_hash: str


class TokenOut(BaseModel):
    token: str
    user: UserRead


class Claims(BaseModel):
    """Verified payload of a bearer token."""

    user_id: int
    email: str = ""
    name: str = ""
    role: Role
    permissions: List[str] = Field(default_factory=list)
    iat: int | None = None
    exp: int | None = None


class ErrorOut(BaseModel):
    code: str
    message: str
    details: Any = None
    debug: str | None = None
