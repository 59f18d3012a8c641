"""Operator account routes: create, login, current account."""
from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select

import config
from arena.errors import AccountNotFound, Conflict, Unauthorized, ValidationError
from arena.models import Account
from arena.models.base import async_session_factory, utcnow
from web.auth import (
    ROLE_ADMIN,
    ROLE_USER,
    create_access_token,
    get_account_by_username,
    hash_password,
    require_account,
    verify_password,
)

logger = logging.getLogger("arena.auth")

router = APIRouter(prefix="/account", tags=["account"])

# At least one lowercase, one uppercase and one digit, 8-24 characters
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9]).{8,24}$")


class Credentials(BaseModel):
    rUsername: str
    rPassword: str


def _login_payload(account: Account) -> dict:
    return {
        "code": 0,
        "msg": "Login successful",
        "data": {
            "Username": account.username,
            "role": account.role,
            "access_token": create_access_token(account),
            "token_type": "bearer",
        },
    }


@router.post("/create", status_code=201)
async def create_account(body: Credentials):
    """Create an operator account with the default role."""
    username = body.rUsername.strip()
    if len(username) < 3:
        raise ValidationError("rUsername", "Invalid Credentials")
    if not PASSWORD_RE.match(body.rPassword):
        raise ValidationError("rPassword", "Password Not Secure")
    async with async_session_factory() as session:
        existing = await session.execute(select(Account.id).where(Account.username == username))
        if existing.first():
            raise Conflict("Account already exists", field="rUsername")
        account = Account(username=username, password_hash=hash_password(body.rPassword), role=ROLE_USER)
        session.add(account)
        await session.commit()
    logger.info("Created account %s", username)
    return {"code": 0, "msg": "Account Created", "data": {"Username": username}}


@router.post("/login")
async def login(body: Credentials):
    """Authenticate and return a JWT."""
    username = body.rUsername.strip()
    if not username or not body.rPassword.strip():
        raise ValidationError("rUsername", "Username and password are required")
    account = await get_account_by_username(username)
    if account is None:
        account = await _bootstrap_admin(username, body.rPassword)
        if account is None:
            logger.info("Login for unknown account %s", username)
            raise AccountNotFound(username)
        return _login_payload(account)
    if not verify_password(body.rPassword, account.password_hash):
        logger.info("Wrong password for %s", username)
        raise Unauthorized("Invalid credentials")
    async with async_session_factory() as session:
        stored = await session.get(Account, account.id)
        stored.last_authentication = utcnow()
        await session.commit()
    return _login_payload(account)


async def _bootstrap_admin(username: str, password: str) -> Optional[Account]:
    """Create the initial admin on its first login when INITIAL_ADMIN_PASSWORD matches."""
    if not (
        config.INITIAL_ADMIN_PASSWORD
        and username == config.INITIAL_ADMIN_USERNAME
        and password == config.INITIAL_ADMIN_PASSWORD
    ):
        return None
    async with async_session_factory() as session:
        account = Account(
            username=username,
            password_hash=hash_password(password),
            role=ROLE_ADMIN,
            last_authentication=utcnow(),
        )
        session.add(account)
        await session.commit()
        await session.refresh(account)
    logger.info("Bootstrapped initial admin %s", account.username)
    return account


@router.get("/me")
async def get_me(account: Account = Depends(require_account)):
    """Current authenticated account."""
    return {"code": 0, "data": {"Username": account.username, "role": account.role}}
