# bookstore/api/routers/authors.py
from typing import List

from fastapi import APIRouter, Depends, Response

from bookstore.api.security import get_cancel_token, get_container, require_permission, require_role
from bookstore.domain.roles import Role
from bookstore.domain.schemas import Author, AuthorIn
from bookstore.services.container import Container
from bookstore.utils.cancellation import CancelToken

router = APIRouter(prefix="/authors", tags=["authors"])


@router.get("", response_model=List[Author], dependencies=[Depends(require_permission("read:authors"))])
def list_authors(
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.authors.list(cancel)


@router.get("/{author_id}", response_model=Author, dependencies=[Depends(require_permission("read:authors"))])
def get_author(
    author_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.authors.get(author_id, cancel)


@router.post("", response_model=Author, status_code=201, dependencies=[Depends(require_role(Role.MANAGER))])
def create_author(
    payload: AuthorIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.authors.create(Author(**payload.model_dump()), cancel)


@router.put("/{author_id}", response_model=Author, dependencies=[Depends(require_role(Role.MANAGER))])
def update_author(
    author_id: int,
    payload: AuthorIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.authors.update(author_id, Author(**payload.model_dump()), cancel)


@router.delete("/{author_id}", status_code=204, dependencies=[Depends(require_role(Role.ADMIN))])
def delete_author(
    author_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    container.author_service.delete_author(author_id, cancel)
    return Response(status_code=204)
