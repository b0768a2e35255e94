# subsapi/web/user_routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from subsapi.services.user_service import UserService
from subsapi.web.deps import get_user_service
from subsapi.web.schemas import Confirmation, LoginIn, TokenOut, UserCreate

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=Confirmation)
async def create_user(body: UserCreate, svc: UserService = Depends(get_user_service)):
    user = await svc.register(body.username, body.password, str(body.email))
    return Confirmation(message="User created successfully", id=user.id)


@router.post("/authenticate", response_model=TokenOut)
async def authenticate(body: LoginIn, svc: UserService = Depends(get_user_service)):
    token = await svc.authenticate(body.username, body.password)
    return TokenOut(token=token)
