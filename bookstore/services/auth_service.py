# bookstore/services/auth_service.py
import time

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from bookstore.domain.errors import (
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
)
from bookstore.domain.roles import permissions_for_role
from bookstore.domain.schemas import Claims, TokenOut, User, UserCreate, UserLogin, UserRead
from bookstore.repos.user_repo import UserRepo
from bookstore.utils import settings
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class TokenVerifier:
    """
    Issues and verifies HS256 bearer tokens carrying Claims.
    Injectable: the api layer only relies on verify().
    """

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        ttl_seconds: int | None = None,
    ):
        self.secret = secret or settings.JWT_SECRET
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.TOKEN_TTL_SECONDS

    def issue(self, user: UserRead) -> str:
        now = int(time.time())
        claims = Claims(
            user_id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            permissions=permissions_for_role(user.role),
            iat=now,
            exp=now + self.ttl_seconds,
        )
        return self.encode(claims)

    def encode(self, claims: Claims) -> str:
        return jwt.encode(claims.model_dump(mode="json", exclude_none=True), self.secret, algorithm=self.algorithm)

    def verify(self, authorization: str | None) -> Claims:
        """Authorization header value -> Claims."""
        if not authorization:
            raise MissingTokenError()
        if not authorization.startswith(BEARER_PREFIX):
            raise InvalidTokenError(debug="Invalid token format")

        token = authorization[len(BEARER_PREFIX):].strip()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except JWTError as e:
            raise InvalidTokenError(debug=str(e))

        try:
            return Claims.model_validate(payload)
        except ValidationError as e:
            raise InvalidTokenError("Invalid token claims", debug=str(e))


class AuthService:
    def __init__(self, repo: UserRepo, verifier: TokenVerifier):
        self.repo = repo
        self.verifier = verifier

    def register(self, payload: UserCreate) -> UserRead:
        user = User(
            id=0,
            name=payload.name,
            email=payload.email,
            role=payload.role,
            password_hash=hash_password(payload.password),
        )
        created = self.repo.create(user)
        logger.info(f"Registered user {created.id} with role {created.role.value}")
        return UserRead.model_validate(created.model_dump())

    def login(self, payload: UserLogin) -> TokenOut:
        user = self.repo.get_by_email(payload.email)
        if user is None or not check_password(payload.password, user.password_hash):
            logger.warning(f"Failed login for {payload.email}")
            raise InvalidCredentialsError()

        read = UserRead.model_validate(user.model_dump())
        return TokenOut(token=self.verifier.issue(read), user=read)
