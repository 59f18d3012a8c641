"""Operator authentication: bcrypt password hashes and bearer JWTs.

Routes that need an operator depend on ``require_account``; the admin
session listing depends on ``require_admin_account``. Failures raise
``Unauthorized``/``Forbidden`` so they leave through the same error
envelope as every other rejection.
"""
from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy import select

import config
from arena.errors import Forbidden, Unauthorized
from arena.models import Account
from arena.models.base import async_session_factory

logger = logging.getLogger("arena.auth")

ROLE_ADMIN = "admin"
ROLE_USER = "user"
BCRYPT_MAX_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def _bcrypt_input(password: str) -> str:
    # bcrypt ignores bytes past 72, so longer passwords are digested first
    raw = password.encode("utf-8")
    return hashlib.sha256(raw).hexdigest() if len(raw) > BCRYPT_MAX_BYTES else password


def hash_password(password: str) -> str:
    return pwd_context.hash(_bcrypt_input(password))


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(_bcrypt_input(plain), hashed)


def create_access_token(account: Account) -> str:
    """Signed token naming the account and its role, valid for JWT_EXPIRE_DAYS."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": account.username,
        "role": account.role,
        "iat": issued,
        "exp": issued + timedelta(days=config.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def read_token_subject(token: str) -> str:
    """Username carried by a valid token. Raises Unauthorized otherwise."""
    try:
        claims = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")
    subject = claims.get("sub")
    if not subject:
        raise Unauthorized("Invalid token")
    return subject


async def get_account_by_username(username: str) -> Optional[Account]:
    async with async_session_factory() as session:
        return await session.scalar(select(Account).where(Account.username == username))


async def require_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Account:
    """Account behind the ``Authorization: Bearer`` token."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authenticated")
    username = read_token_subject(credentials.credentials)
    account = await get_account_by_username(username)
    if account is None:
        logger.info("Token for unknown account %s rejected", username)
        raise Unauthorized("Not authenticated")
    return account


async def require_admin_account(account: Account = Depends(require_account)) -> Account:
    if account.role != ROLE_ADMIN:
        raise Forbidden("Admin access required")
    return account
