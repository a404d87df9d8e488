# bookstore/api/routers/orders.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Response

from bookstore.api.security import (
    extract_order_owner_id,
    get_cancel_token,
    get_container,
    require_owner_or_admin,
    require_permission,
    require_role,
)
from bookstore.domain.errors import InvalidInputError
from bookstore.domain.roles import Role
from bookstore.domain.schemas import Order, OrderIn
from bookstore.services.container import Container
from bookstore.utils.cancellation import CancelToken

router = APIRouter(prefix="/orders", tags=["orders"])

owner_or_admin = require_owner_or_admin(extract_order_owner_id)


def _check_customer(container: Container, customer_id: int):
    if not container.customers.exists(customer_id):
        raise InvalidInputError("customer does not exist", details={"customer_id": customer_id})


@router.get("", response_model=List[Order], dependencies=[Depends(require_role(Role.MANAGER, Role.EMPLOYEE))])
def list_orders(
    start: datetime | None = Query(default=None, description="created_at >= start"),
    end: datetime | None = Query(default=None, description="created_at < end"),
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    if start is None and end is None:
        return container.orders.list(cancel)
    if start is None or end is None:
        raise InvalidInputError("start and end must be given together")
    return container.orders.list_in_time_range(start, end, cancel)


@router.get("/{order_id}", response_model=Order, dependencies=[Depends(require_permission("read:orders"))])
def get_order(
    order_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.orders.get(order_id, cancel)


@router.post("", response_model=Order, status_code=201, dependencies=[Depends(require_permission("write:orders"))])
def create_order(
    payload: OrderIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    """
    Reserves stock for every item and stores the order, all or nothing.
    400 when a book is missing or its stock is insufficient.
    """
    _check_customer(container, payload.customer_id)
    return container.orders.create(Order(**payload.model_dump()), cancel)


@router.put("/{order_id}", response_model=Order, dependencies=[Depends(owner_or_admin)])
def update_order(
    order_id: int,
    payload: OrderIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    _check_customer(container, payload.customer_id)
    return container.orders.update(order_id, Order(**payload.model_dump()), cancel)


@router.delete("/{order_id}", status_code=204, dependencies=[Depends(owner_or_admin)])
def delete_order(
    order_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    container.orders.delete(order_id, cancel)
    return Response(status_code=204)
