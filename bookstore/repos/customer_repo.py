# bookstore/repos/customer_repo.py
from bookstore.domain.errors import ConflictError, CustomerNotFoundError
from bookstore.domain.schemas import Customer, utcnow
from bookstore.repos.base_repo import InMemoryRepo


class CustomerRepo(InMemoryRepo[Customer]):
    """Customers, email is unique (case-insensitive) across the store."""

    collection = "customers"
    model = Customer
    not_found = CustomerNotFoundError

    def _check_email(self, email: str, exclude_id: int | None = None):
        wanted = email.lower()
        for customer in self._records.values():
            if customer.id != exclude_id and customer.email.lower() == wanted:
                raise ConflictError(
                    "Customer with this email already exists",
                    details={"email": email},
                )

    def _prepare_create(self, record: Customer) -> Customer:
        self._check_email(record.email)
        if record.created_at is None:
            record.created_at = utcnow()
        return record

    def _prepare_update(self, existing: Customer, record: Customer) -> Customer:
        self._check_email(record.email, exclude_id=existing.id)
        record.created_at = existing.created_at
        return record
