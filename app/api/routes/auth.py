"""Account routes: registration, login and the current user."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_token_service
from app.core.security import TokenService, hash_password, verify_password
from app.db.models import User
from app.db.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class RegisterBody(BaseModel):
    username: str | None = None
    password: str | None = None
    email: str | None = None


class LoginBody(BaseModel):
    username: str | None = None
    password: str | None = None


@router.post("/register", summary="Register a new user")
def register(body: RegisterBody, db: Session = Depends(get_db)):
    username = (body.username or "").strip()
    password = body.password or ""
    email = (body.email or "").strip().lower() or None
    if not username or not password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    users = UserRepository(db)
    if users.get_by_username(username) is not None:
        raise HTTPException(status_code=409, detail="Username already taken")
    if email is not None and users.get_by_email(email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = users.create(username=username, email=email, password_hash=hash_password(password))
    logger.info("Registered user %s", user.id)
    return {"message": "User registered successfully"}


@router.post("/login", summary="Exchange credentials for a bearer token")
def login(
    body: LoginBody,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    username = (body.username or "").strip()
    if not username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = UserRepository(db).get_by_username(username)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid password")

    access = tokens.create_access_token(user.username)
    return {"auth": True, "token": access.token}


@router.get("/me", summary="Current authenticated user")
def me(user: User = Depends(get_current_user)):
    return {
        "id": str(user.id),
        "username": user.username,
        "email": user.email,
    }
