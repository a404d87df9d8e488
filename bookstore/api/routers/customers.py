# bookstore/api/routers/customers.py
from typing import List

from fastapi import APIRouter, Depends, Response

from bookstore.api.security import get_cancel_token, get_container, require_role
from bookstore.domain.roles import Role
from bookstore.domain.schemas import Customer, CustomerIn
from bookstore.services.container import Container
from bookstore.utils.cancellation import CancelToken

router = APIRouter(prefix="/customers", tags=["customers"])

staff = require_role(Role.MANAGER, Role.EMPLOYEE)


@router.get("", response_model=List[Customer], dependencies=[Depends(staff)])
def list_customers(
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.customers.list(cancel)


@router.get("/{customer_id}", response_model=Customer, dependencies=[Depends(staff)])
def get_customer(
    customer_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.customers.get(customer_id, cancel)


@router.post("", response_model=Customer, status_code=201, dependencies=[Depends(staff)])
def create_customer(
    payload: CustomerIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.customers.create(Customer(**payload.model_dump()), cancel)


@router.put("/{customer_id}", response_model=Customer, dependencies=[Depends(require_role(Role.MANAGER))])
def update_customer(
    customer_id: int,
    payload: CustomerIn,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    return container.customers.update(customer_id, Customer(**payload.model_dump()), cancel)


@router.delete("/{customer_id}", status_code=204, dependencies=[Depends(require_role(Role.ADMIN))])
def delete_customer(
    customer_id: int,
    container: Container = Depends(get_container),
    cancel: CancelToken | None = Depends(get_cancel_token),
):
    container.customers.delete(customer_id, cancel)
    return Response(status_code=204)
