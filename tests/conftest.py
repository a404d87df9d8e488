from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from bookstore.data.snapshot import JsonFileBackend
from bookstore.domain.roles import Role, permissions_for_role
from bookstore.domain.schemas import Address, Author, Book, Claims, Customer
from bookstore.main import create_app
from bookstore.services.auth_service import TokenVerifier
from bookstore.services.container import Container

PUBLISHED = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def backend(tmp_path):
    return JsonFileBackend(tmp_path)


@pytest.fixture
def verifier():
    return TokenVerifier(secret="test-secret", ttl_seconds=3600)


@pytest.fixture
def container(backend, verifier):
    return Container.build(backend=backend, verifier=verifier)


@pytest.fixture
def client(container):
    app = create_app(container=container, load_snapshots=False, start_scheduler=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def author(container):
    return container.authors.create(Author(first_name="Ursula", last_name="LeGuin"))


@pytest.fixture
def customer(container):
    return container.customers.create(
        Customer(
            name="Jan Kowalski",
            email="jan@example.com",
            address=Address(
                street="Main Street 1",
                city="Krakow",
                state="Malopolska",
                postal_code="30-001",
                country="Poland",
            ),
        )
    )


@pytest.fixture
def make_book(container, author):
    def _make(stock=5, price="10.00", title="A Wizard of Earthsea", genres=("Fantasy",)):
        return container.books.create(
            Book(
                title=title,
                author_id=author.id,
                genres=list(genres),
                published_at=PUBLISHED,
                price=Decimal(price),
                stock=stock,
            )
        )

    return _make


@pytest.fixture
def auth_header(verifier):
    def _header(role=Role.USER, user_id=1, permissions=None):
        claims = Claims(
            user_id=user_id,
            email="someone@example.com",
            name="Someone",
            role=role,
            permissions=permissions if permissions is not None else permissions_for_role(role),
            exp=int(datetime.now(timezone.utc).timestamp()) + 600,
        )
        return {"Authorization": f"Bearer {verifier.encode(claims)}"}

    return _header
