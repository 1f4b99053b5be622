# planner/api/v1/auth.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from planner.core.auth.schemas import LoginRequest, RegisterRequest, Token, UserOut
from planner.core.auth.security import create_access_token, get_current_user
from planner.core.users.models import User
from planner.core.users.service import (
    InvalidCredentialsError,
    UserAlreadyExistsError,
    UsersService,
)
from planner.db.base import get_async_db_session

router = APIRouter(prefix="/v1/auth", tags=["Authentication"])
log = logging.getLogger(__name__)


def _user_out(user: User, with_token: bool = True) -> UserOut:
    out = UserOut.model_validate(user)
    if with_token:
        out.token = create_access_token(data={"user_id": user.id})
    return out


@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> UserOut:
    service = UsersService(db)
    try:
        user = await service.register(
            email=payload.email,
            username=payload.username,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    log.info("Registered user id=%s", user.id)
    return _user_out(user)


@router.post(
    "/login",
    response_model=Token,
    summary="Exchange credentials for a JWT",
)
async def login(
    payload: LoginRequest = Body(...),
    db: AsyncSession = Depends(get_async_db_session),
) -> Token:
    service = UsersService(db)
    try:
        user = await service.authenticate(payload.username_or_email, payload.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    log.info("User id=%s logged in", user.id)
    return Token(access_token=create_access_token(data={"user_id": user.id}))


@router.get("/me", response_model=UserOut, summary="Current user")
async def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return _user_out(current_user)
