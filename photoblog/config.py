from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger("api")

REQUIRED_ENV_VARS = (
    "DATABASE_URL",
    "JWT_SECRET",
    "ADMIN_SECRET_KEY",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
)

DEFAULT_TOKEN_TTL_HOURS = 12
DEFAULT_UPLOAD_FOLDER = "noticing_eye_photos"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    admin_secret_key: str
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    cloudinary_folder: str = DEFAULT_UPLOAD_FOLDER
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"


def _env(name: str, default: str | None = None) -> str | None:
    v = os.environ.get(name)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.error("Invalid %s value: %r", name, raw)
        return default
    if value <= 0:
        logger.error("Invalid %s value: %r", name, raw)
        return default
    return value


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env, if present).

    Raises ConfigError naming every required variable that is missing.
    """
    # In containers the environment is already populated; load_dotenv is harmless.
    load_dotenv(override=False)

    missing = [name for name in REQUIRED_ENV_VARS if not _env(name)]
    if missing:
        raise ConfigError(
            "Missing required environment variables: " + ", ".join(missing)
        )

    origins = tuple(
        o.strip()
        for o in (_env("CORS_ORIGINS", "*") or "*").split(",")
        if o.strip()
    )

    return Settings(
        database_url=_env("DATABASE_URL") or "",
        jwt_secret=_env("JWT_SECRET") or "",
        admin_secret_key=_env("ADMIN_SECRET_KEY") or "",
        cloudinary_cloud_name=_env("CLOUDINARY_CLOUD_NAME") or "",
        cloudinary_api_key=_env("CLOUDINARY_API_KEY") or "",
        cloudinary_api_secret=_env("CLOUDINARY_API_SECRET") or "",
        cloudinary_folder=_env("CLOUDINARY_FOLDER", DEFAULT_UPLOAD_FOLDER)
        or DEFAULT_UPLOAD_FOLDER,
        token_ttl_hours=_int_env("TOKEN_TTL_HOURS", DEFAULT_TOKEN_TTL_HOURS),
        host=_env("HOST", "0.0.0.0") or "0.0.0.0",
        port=_int_env("PORT", 5000),
        cors_origins=origins or ("*",),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
