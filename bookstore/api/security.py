# bookstore/api/security.py
"""
Authorization chain as FastAPI dependencies.

Every gated route depends on exactly one of require_role / require_permission /
require_owner_or_admin, each of which depends on require_auth, so the token is
always verified before the policy check and the policy check always runs before
the handler body.
"""
from typing import Callable, Iterable

from fastapi import Depends, Header, Request

from bookstore.domain.errors import ForbiddenError
from bookstore.domain.roles import PermissionSet, Role
from bookstore.domain.schemas import Claims
from bookstore.services.container import Container
from bookstore.utils import settings
from bookstore.utils.cancellation import CancelToken

OwnerExtractor = Callable[[Request, Container], int]


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_cancel_token() -> CancelToken | None:
    if settings.REQUEST_TIMEOUT_SECONDS > 0:
        return CancelToken(timeout=settings.REQUEST_TIMEOUT_SECONDS)
    return None


# policy checks


def check_role(claims: Claims, roles: Iterable[Role]) -> None:
    if claims.role.is_admin:
        return
    allowed = list(roles)
    if claims.role not in allowed:
        raise ForbiddenError(f"Access denied. Required roles: {[r.value for r in allowed]}")


def check_permission(claims: Claims, permission: str) -> None:
    if not PermissionSet(claims.permissions).implies(permission):
        raise ForbiddenError("Insufficient permissions", details={"required": permission})


def check_owner_or_admin(claims: Claims, owner_id: int) -> None:
    if claims.role.is_admin:
        return
    if owner_id == 0 or owner_id != claims.user_id:
        raise ForbiddenError("Access denied: you are not the owner of this resource")


# dependencies


def require_auth(
    request: Request,
    authorization: str | None = Header(default=None),
    container: Container = Depends(get_container),
) -> Claims:
    claims = container.verifier.verify(authorization)
    request.state.claims = claims
    return claims


def require_role(*roles: Role):
    def dependency(claims: Claims = Depends(require_auth)) -> Claims:
        check_role(claims, roles)
        return claims

    return dependency


def require_permission(permission: str):
    def dependency(claims: Claims = Depends(require_auth)) -> Claims:
        check_permission(claims, permission)
        return claims

    return dependency


def require_owner_or_admin(extract_owner_id: OwnerExtractor):
    def dependency(
        request: Request,
        claims: Claims = Depends(require_auth),
        container: Container = Depends(get_container),
    ) -> Claims:
        if claims.role.is_admin:
            return claims
        check_owner_or_admin(claims, extract_owner_id(request, container))
        return claims

    return dependency


def extract_order_owner_id(request: Request, container: Container) -> int:
    try:
        order_id = int(request.path_params.get("order_id", ""))
    except ValueError:
        return 0
    return container.orders.owner_of(order_id)
