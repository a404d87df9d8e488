# bookstore/repos/author_repo.py
from bookstore.domain.errors import AuthorNotFoundError
from bookstore.domain.schemas import Author
from bookstore.repos.base_repo import InMemoryRepo


class AuthorRepo(InMemoryRepo[Author]):
    collection = "authors"
    model = Author
    not_found = AuthorNotFoundError
