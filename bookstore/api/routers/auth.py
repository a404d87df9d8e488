# bookstore/api/routers/auth.py
from fastapi import APIRouter, Depends

from bookstore.api.security import get_container
from bookstore.domain.schemas import TokenOut, UserCreate, UserLogin, UserRead
from bookstore.services.container import Container

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=201)
def register(payload: UserCreate, container: Container = Depends(get_container)):
    return container.auth_service.register(payload)


@router.post("/login", response_model=TokenOut)
def login(payload: UserLogin, container: Container = Depends(get_container)):
    return container.auth_service.login(payload)
