# bookstore/api/routers/books.py
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query, Response

from bookstore.api.security import get_cancel_token, get_container, require_permission, require_role
from bookstore.domain.errors import InvalidInputError
from bookstore.domain.roles import Role
from bookstore.domain.schemas import Book, BookIn, SearchCriteria
from bookstore.services.container import Container
from bookstore.utils.cancellation import CancelToken

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=List[Book], dependencies=[Depends(require_permission("read:books"))])
def search_books(
    title: List[str] = Query(default=[]),
    author: List[str] = Query(default=[]),
    genre: List[str] = Query(default=[]),
    min_price: Decimal = Query(default=Decimal("0"), ge=0),
    max_price: Decimal = Query(default=Decimal("0"), ge=0),
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    """
    Without filters lists every book. With filters only one dimension applies:
    title, else author, else genre, else the price range.
    A price range needs max_price, min_price alone is rejected with 400.
    """
    if min_price > 0 and max_price == 0:
        raise InvalidInputError("max_price is required with min_price", details={"min_price": str(min_price)})
    if not (title or author or genre or max_price > 0):
        return container.books.list(cancel)

    criteria = SearchCriteria(titles=title, authors=author, genres=genre, min_price=min_price, max_price=max_price)
    return container.books.search(criteria, cancel)


@router.get("/{book_id}", response_model=Book, dependencies=[Depends(require_permission("read:books"))])
def get_book(
    book_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.books.get(book_id, cancel)


@router.post("", response_model=Book, status_code=201, dependencies=[Depends(require_role(Role.MANAGER))])
def create_book(
    payload: BookIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.books.create(Book(**payload.model_dump()), cancel)


@router.put("/{book_id}", response_model=Book, dependencies=[Depends(require_role(Role.MANAGER))])
def update_book(
    book_id: int,
    payload: BookIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.books.update(book_id, Book(**payload.model_dump()), cancel)


@router.delete("/{book_id}", status_code=204, dependencies=[Depends(require_role(Role.ADMIN))])
def delete_book(
    book_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    container.books.delete(book_id, cancel)
    return Response(status_code=204)
