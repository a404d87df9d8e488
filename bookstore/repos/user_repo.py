# bookstore/repos/user_repo.py
from bookstore.domain.errors import ConflictError, UserNotFoundError
from bookstore.domain.schemas import User
from bookstore.repos.base_repo import InMemoryRepo


class UserRepo(InMemoryRepo[User]):
    collection = "users"
    model = User
    not_found = UserNotFoundError

    def get_by_email(self, email: str) -> User | None:
        wanted = email.lower()
        with self.lock.read():
            for user in self._records.values():
                if user.email.lower() == wanted:
                    return user.model_copy(deep=True)
        return None

    def _prepare_create(self, record: User) -> User:
        wanted = record.email.lower()
        if any(u.email.lower() == wanted for u in self._records.values()):
            raise ConflictError("User with this email already exists", details={"email": record.email})
        return record
