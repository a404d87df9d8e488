from fastapi.testclient import TestClient

from bookstore.domain.roles import Role
from bookstore.main import create_app
from bookstore.utils import settings

BOOK_PAYLOAD = {
    "title": "The Left Hand of Darkness",
    "genres": ["Science Fiction"],
    "published_at": "1969-03-01T00:00:00Z",
    "price": "15.50",
    "stock": 4,
}


def order_payload(customer_id, *items, status="pending"):
    return {
        "customer_id": customer_id,
        "items": [{"book_id": b, "quantity": q} for b, q in items],
        "status": status,
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_missing_and_bad_tokens(client, make_book):
    book = make_book()

    resp = client.get(f"/books/{book.id}")
    assert resp.status_code == 401
    assert resp.json()["code"] == "MISSING_TOKEN"

    resp = client.get(f"/books/{book.id}", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "INVALID_TOKEN"


def test_read_only_user_cannot_create_books(client, auth_header, make_book):
    book = make_book()
    headers = auth_header(Role.USER, permissions=["read:books"])

    resp = client.post("/books", json={**BOOK_PAYLOAD, "author_id": book.author_id}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"

    resp = client.get(f"/books/{book.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == book.title


def test_book_crud_as_manager(client, auth_header, author):
    headers = auth_header(Role.MANAGER)

    resp = client.post("/books", json={**BOOK_PAYLOAD, "author_id": author.id}, headers=headers)
    assert resp.status_code == 201
    book = resp.json()
    assert book["id"] == 1
    assert book["stock"] == 4

    resp = client.put(
        f"/books/{book['id']}",
        json={**BOOK_PAYLOAD, "author_id": author.id, "title": "The Dispossessed"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "The Dispossessed"

    # deleting needs admin
    assert client.delete(f"/books/{book['id']}", headers=headers).status_code == 403
    assert client.delete(f"/books/{book['id']}", headers=auth_header(Role.ADMIN)).status_code == 204
    assert client.get(f"/books/{book['id']}", headers=headers).status_code == 404


def test_book_with_unknown_author_is_rejected(client, auth_header):
    resp = client.post("/books", json={**BOOK_PAYLOAD, "author_id": 99}, headers=auth_header(Role.MANAGER))
    assert resp.status_code == 400
    assert resp.json()["details"] == {"author_id": 99}


def test_invalid_book_payload(client, auth_header, author):
    resp = client.post(
        "/books",
        json={**BOOK_PAYLOAD, "author_id": author.id, "stock": -1},
        headers=auth_header(Role.MANAGER),
    )
    assert resp.status_code == 422


def test_book_listing_and_search(client, auth_header, make_book):
    make_book(title="A Wizard of Earthsea", genres=("Fantasy",), price="12.00")
    make_book(title="Tehanu", genres=("Fantasy", "Drama"), price="25.00")
    headers = auth_header(Role.USER)

    assert len(client.get("/books", headers=headers).json()) == 2

    resp = client.get("/books", params={"genre": "Drama"}, headers=headers)
    assert [b["title"] for b in resp.json()] == ["Tehanu"]

    # title takes precedence over genre
    resp = client.get("/books", params={"title": "A Wizard of Earthsea", "genre": "Drama"}, headers=headers)
    assert [b["title"] for b in resp.json()] == ["A Wizard of Earthsea"]

    resp = client.get("/books", params={"min_price": "20", "max_price": "30"}, headers=headers)
    assert [b["title"] for b in resp.json()] == ["Tehanu"]

    resp = client.get("/books", params={"title": "Nothing Like It"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == []


def test_min_price_without_max_price_is_rejected(client, auth_header, make_book):
    make_book(title="A Wizard of Earthsea", price="12.00")
    make_book(title="Tehanu", price="60.00")
    headers = auth_header(Role.USER)

    resp = client.get("/books", params={"min_price": "50"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_INPUT"

    resp = client.get("/books", params={"min_price": "50", "max_price": "100"}, headers=headers)
    assert [b["title"] for b in resp.json()] == ["Tehanu"]


def test_order_flow(client, auth_header, customer, make_book):
    book = make_book(stock=5)
    headers = auth_header(Role.USER, user_id=customer.id)

    resp = client.post("/orders", json=order_payload(customer.id, (book.id, 5)), headers=headers)
    assert resp.status_code == 201
    order = resp.json()
    assert order["total_price"] == "50.00"

    resp = client.post("/orders", json=order_payload(customer.id, (book.id, 1)), headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INSUFFICIENT_STOCK"

    resp = client.post("/orders", json=order_payload(customer.id, (999, 1)), headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "book does not exist"

    staff = auth_header(Role.EMPLOYEE)
    assert client.get(f"/books/{book.id}", headers=staff).json()["stock"] == 0
    assert client.get(f"/orders/{order['id']}", headers=staff).status_code == 200

    # owner may shrink the order
    resp = client.put(
        f"/orders/{order['id']}",
        json=order_payload(customer.id, (book.id, 2), status="processing"),
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "processing"
    assert client.get(f"/books/{book.id}", headers=staff).json()["stock"] == 3

    assert client.delete(f"/orders/{order['id']}", headers=headers).status_code == 204
    assert client.get(f"/books/{book.id}", headers=staff).json()["stock"] == 5
    assert client.get(f"/orders/{order['id']}", headers=staff).status_code == 404


def test_order_for_unknown_customer(client, auth_header, make_book):
    book = make_book()
    resp = client.post("/orders", json=order_payload(42, (book.id, 1)), headers=auth_header(Role.USER))
    assert resp.status_code == 400
    assert client.get(f"/books/{book.id}", headers=auth_header(Role.USER)).json()["stock"] == 5


def test_only_owner_or_admin_can_change_orders(client, auth_header, customer, make_book):
    book = make_book(stock=5)
    owner = auth_header(Role.USER, user_id=customer.id)
    order = client.post("/orders", json=order_payload(customer.id, (book.id, 1)), headers=owner).json()

    stranger = auth_header(Role.USER, user_id=customer.id + 1)
    manager = auth_header(Role.MANAGER, user_id=customer.id + 2)
    body = order_payload(customer.id, (book.id, 2))

    assert client.put(f"/orders/{order['id']}", json=body, headers=stranger).status_code == 403
    assert client.put(f"/orders/{order['id']}", json=body, headers=manager).status_code == 403
    assert client.delete(f"/orders/{order['id']}", headers=stranger).status_code == 403

    # unknown order resolves to owner 0
    assert client.delete("/orders/999", headers=owner).status_code == 403
    assert client.delete("/orders/999", headers=auth_header(Role.ADMIN)).status_code == 404

    assert client.put(f"/orders/{order['id']}", json=body, headers=auth_header(Role.ADMIN)).status_code == 200


def test_owner_can_change_and_cancel_their_order(client, auth_header, customer, make_book):
    book = make_book(stock=5)
    owner = auth_header(Role.USER, user_id=customer.id)
    staff = auth_header(Role.EMPLOYEE)
    order = client.post("/orders", json=order_payload(customer.id, (book.id, 2)), headers=owner).json()

    resp = client.put(f"/orders/{order['id']}", json=order_payload(customer.id, (book.id, 4)), headers=owner)
    assert resp.status_code == 200
    assert resp.json()["total_price"] == "40.00"
    assert client.get(f"/books/{book.id}", headers=staff).json()["stock"] == 1

    assert client.delete(f"/orders/{order['id']}", headers=owner).status_code == 204
    assert client.get(f"/books/{book.id}", headers=staff).json()["stock"] == 5
    assert client.get(f"/orders/{order['id']}", headers=staff).status_code == 404


def test_listing_orders_needs_staff_role(client, auth_header, customer, make_book):
    book = make_book()
    client.post("/orders", json=order_payload(customer.id, (book.id, 1)), headers=auth_header(Role.USER))

    assert client.get("/orders", headers=auth_header(Role.USER)).status_code == 403
    resp = client.get("/orders", headers=auth_header(Role.EMPLOYEE))
    assert resp.status_code == 200
    assert len(resp.json()) == 1

    resp = client.get(
        "/orders",
        params={"start": "2000-01-01T00:00:00Z", "end": "2001-01-01T00:00:00Z"},
        headers=auth_header(Role.EMPLOYEE),
    )
    assert resp.json() == []

    resp = client.get("/orders", params={"start": "2000-01-01T00:00:00Z"}, headers=auth_header(Role.EMPLOYEE))
    assert resp.status_code == 400


def test_author_delete_guard(client, auth_header, author, make_book):
    make_book()
    resp = client.delete(f"/authors/{author.id}", headers=auth_header(Role.ADMIN))
    assert resp.status_code == 409
    assert resp.json()["details"] == {"book_count": 1}


def test_customers(client, auth_header):
    body = {
        "name": "Anna Nowak",
        "email": "anna@example.com",
        "address": {
            "street": "Long Street 12",
            "city": "Gdansk",
            "state": "Pomorskie",
            "postal_code": "80-001",
            "country": "Poland",
        },
    }
    employee = auth_header(Role.EMPLOYEE)

    assert client.post("/customers", json=body, headers=auth_header(Role.USER)).status_code == 403

    resp = client.post("/customers", json=body, headers=employee)
    assert resp.status_code == 201
    assert resp.json()["created_at"] is not None

    resp = client.post("/customers", json=body, headers=employee)
    assert resp.status_code == 409

    # updates need manager
    assert client.put("/customers/1", json=body, headers=employee).status_code == 403
    assert client.put("/customers/1", json=body, headers=auth_header(Role.MANAGER)).status_code == 200


def test_register_login_and_use_token(client):
    resp = client.post(
        "/register",
        json={"name": "Piotr", "email": "piotr@example.com", "password": "long-enough", "role": "employee"},
    )
    assert resp.status_code == 201
    assert "password" not in resp.json()

    resp = client.post("/login", json={"email": "piotr@example.com", "password": "long-enough"})
    assert resp.status_code == 200
    token = resp.json()["token"]

    resp = client.get("/customers", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200

    resp = client.post("/login", json={"email": "piotr@example.com", "password": "wrong-password"})
    assert resp.status_code == 401

    resp = client.post(
        "/register",
        json={"name": "Piotr", "email": "piotr@example.com", "password": "long-enough", "role": "root"},
    )
    assert resp.status_code == 422


def test_sales_reports_endpoint(client, auth_header, customer, make_book):
    book = make_book(stock=5, price="10.00")
    client.post("/orders", json=order_payload(customer.id, (book.id, 2)), headers=auth_header(Role.USER))

    assert client.post("/sales-reports", headers=auth_header(Role.EMPLOYEE)).status_code == 403

    resp = client.post("/sales-reports", headers=auth_header(Role.MANAGER))
    assert resp.status_code == 201
    assert resp.json()["total_orders"] == 1
    assert resp.json()["total_revenue"] == "20.00"

    resp = client.get("/sales-reports", headers=auth_header(Role.MANAGER))
    assert resp.status_code == 200
    assert len(resp.json()) == 1
    assert resp.json()[0]["top_selling_books"][0]["quantity"] == 2


def test_persistence_failure_maps_to_500(client, auth_header, container, author, monkeypatch):
    def broken(collection, records):
        raise OSError("disk full")

    monkeypatch.setattr(container.backend, "save", broken)

    resp = client.post("/books", json={**BOOK_PAYLOAD, "author_id": author.id}, headers=auth_header(Role.MANAGER))

    assert resp.status_code == 500
    assert resp.json()["code"] == "PERSISTENCE_ERROR"
    assert "debug" not in resp.json()
    # the book exists in memory
    assert container.books.get(1).title == BOOK_PAYLOAD["title"]


def test_unexpected_errors_are_hidden(container, auth_header, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(container.books, "get", explode)
    app = create_app(container=container, load_snapshots=False, start_scheduler=False)

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/books/1", headers=auth_header(Role.USER))

    assert resp.status_code == 500
    assert resp.json() == {"code": "INTERNAL_ERROR", "message": "Internal server error"}


def test_debug_mode_exposes_details(client, auth_header, container, author, monkeypatch):
    monkeypatch.setattr(settings, "DEBUG", True)

    def broken(collection, records):
        raise OSError("disk full")

    monkeypatch.setattr(container.backend, "save", broken)
    resp = client.post("/authors", json={"first_name": "Octavia", "last_name": "Butler"}, headers=auth_header(Role.ADMIN))

    assert resp.status_code == 500
    assert "disk full" in resp.json()["debug"]
