"""
Route definitions for accounts.

Endpoints under /auth:
- POST /register : create an account
- POST /login    : exchange email + password for a bearer token
- GET  /me       : the account behind the bearer token
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ..config import Settings, get_settings
from ..models import ApiResponse
from ..storage import get_session_factory, read_session, unit_of_work
from ..tables import UserRow
from .schemas import LoginRequest, RegisterRequest, TokenOut, UserOut
from .security import create_access_token, current_identity, hash_password, verify_password


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _email_taken(session, email: str) -> bool:
    return session.scalar(select(UserRow.id).where(UserRow.email == email)) is not None


@router.post("/register", response_model=ApiResponse[UserOut], status_code=201)
def register(
    req: RegisterRequest,
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[UserOut]:
    email = req.email.strip().lower()
    with unit_of_work(factory) as session:
        if _email_taken(session, email):
            raise HTTPException(status_code=400, detail="Email already exists")
        user = UserRow(username=req.username, email=email, password=hash_password(req.password))
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            # a concurrent registration won the unique index
            raise HTTPException(status_code=400, detail="Email already exists")
        logger.info("Registered user %s", user.id)
        data = UserOut.model_validate(user)
    return ApiResponse(message="User registered successfully", data=data)


@router.post("/login", response_model=ApiResponse[TokenOut])
def login(
    req: LoginRequest,
    factory: sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[TokenOut]:
    with read_session(factory) as session:
        user = session.scalars(
            select(UserRow).where(UserRow.email == req.email.strip().lower())
        ).first()
        if user is None or not verify_password(req.password, user.password):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        user_id = user.id
    token = create_access_token(user_id, settings)
    return ApiResponse(message="Login successfully", data=TokenOut(access_token=token))


@router.get("/me", response_model=ApiResponse[UserOut])
def me(
    identity: str = Depends(current_identity),
    factory: sessionmaker = Depends(get_session_factory),
) -> ApiResponse[UserOut]:
    with read_session(factory) as session:
        user = session.get(UserRow, identity)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        data = UserOut.model_validate(user)
    return ApiResponse(message="Get me successfully", data=data)
