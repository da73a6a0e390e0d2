from __future__ import annotations

import hmac
import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.requests import Request

from photoblog.config import Settings
from photoblog.db_sa import Admin, AdminRepo
from photoblog.deps import get_session, get_settings
from photoblog.errors import BadRequest, Conflict, InvalidCredentials, Unauthorized
from photoblog.schemas import AdminOut, InitAdminIn, InitAdminOut, LoginIn, LoginOut

logger = logging.getLogger("auth")

router = APIRouter(prefix="/api", tags=["auth"])

BCRYPT_ROUNDS = 10
JWT_ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


# ---- Password hashing ----


def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    if len(raw) > _BCRYPT_MAX_BYTES:
        raise BadRequest("Password must be at most 72 bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode(
        "ascii"
    )


def verify_password(password: str, password_hash: str) -> bool:
    raw = password.encode("utf-8")
    if len(raw) > _BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode("ascii"))
    except ValueError:
        # Malformed stored hash.
        logger.error("Stored password hash is not a valid bcrypt hash")
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


# ---- Tokens ----


def issue_token(
    admin_id: int,
    secret: str,
    *,
    ttl_hours: int = 12,
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(UTC)
    payload = {
        "id": int(admin_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """Verify signature and expiry. Raises jwt.InvalidTokenError."""
    return jwt.decode(
        token,
        secret,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["exp", "id"]},
    )


def extract_bearer(header: str | None) -> str | None:
    auth = (header or "").strip()
    if not auth.lower().startswith("bearer "):
        return None
    token = auth[7:].strip()
    return token if token else None


# ---- Operations ----


def init_admin(repo: AdminRepo, settings: Settings, payload: InitAdminIn) -> Admin:
    if not hmac.compare_digest(
        payload.secret_key.encode("utf-8"),
        settings.admin_secret_key.encode("utf-8"),
    ):
        logger.warning("init-admin rejected: bad secret key")
        raise Unauthorized("Unauthorized: Invalid secret key")

    if repo.any_exists():
        raise Conflict("Admin already initialized")

    password_hash = hash_password(payload.password)
    try:
        return repo.create(payload.username, password_hash)
    except IntegrityError:
        repo.s.rollback()
        logger.info("init-admin lost a race with a concurrent insert")
        raise Conflict("Admin already initialized")


def login(
    repo: AdminRepo, settings: Settings, username: str, password: str
) -> tuple[Admin, str]:
    admin = repo.get_by_username(username)
    if admin is None:
        # Spend the same hashing time as a real comparison.
        verify_password(password, _dummy_hash())
        logger.info("Login failed")
        raise InvalidCredentials()
    if not verify_password(password, admin.password):
        logger.info("Login failed")
        raise InvalidCredentials()

    token = issue_token(
        admin.id, settings.jwt_secret, ttl_hours=settings.token_ttl_hours
    )
    logger.info("Login ok admin_id=%s", admin.id)
    return admin, token


def resolve_admin(
    repo: AdminRepo, settings: Settings, authorization: str | None
) -> Admin:
    token = extract_bearer(authorization)
    if token is None:
        raise Unauthorized("Unauthorized: No token provided")
    try:
        claims = decode_token(token, settings.jwt_secret)
        admin_id = int(claims["id"])
    except (jwt.InvalidTokenError, TypeError, ValueError):
        raise Unauthorized("Unauthorized: Invalid token")

    admin = repo.get(admin_id)
    if admin is None:
        raise Unauthorized("Unauthorized: Invalid token")
    return admin


def require_admin(
    request: Request,
    s: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> Admin:
    admin = resolve_admin(
        AdminRepo(s), settings, request.headers.get("authorization")
    )
    request.state.admin = admin
    return admin


# ---- Routes ----


@router.post(
    "/init-admin",
    response_model=InitAdminOut,
    status_code=status.HTTP_201_CREATED,
)
def init_admin_route(
    payload: InitAdminIn,
    s: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> InitAdminOut:
    admin = init_admin(AdminRepo(s), settings, payload)
    return InitAdminOut(message="Admin created successfully", admin_id=admin.id)


@router.post("/login", response_model=LoginOut)
def login_route(
    payload: LoginIn,
    s: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> LoginOut:
    admin, token = login(AdminRepo(s), settings, payload.username, payload.password)
    return LoginOut(
        message="Login successful",
        token=token,
        admin=AdminOut.model_validate(admin),
    )


@router.get("/me", response_model=AdminOut)
def me(admin: Admin = Depends(require_admin)) -> AdminOut:
    return AdminOut.model_validate(admin)
