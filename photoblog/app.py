from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response

from photoblog.auth import router as auth_router
from photoblog.config import Settings, configure_logging, load_settings
from photoblog.db import init_db
from photoblog.db_sa import Db
from photoblog.errors import ApiError
from photoblog.photos import router as photos_router
from photoblog.schemas import HealthOut
from photoblog.storage import CloudinaryStorage, PhotoStorage

logger = logging.getLogger("api")

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        where = ".".join(loc)
        msg = err.get("msg", "invalid value")
        parts.append(f"{where}: {msg}" if where else msg)
    return "; ".join(parts) or "Invalid request"


def create_app(
    *,
    settings: Settings | None = None,
    db: Db | None = None,
    storage: PhotoStorage | None = None,
) -> FastAPI:
    """Build the API.

    Settings not passed in are loaded here, before logging and CORS are
    set up from them. The database (init_db(), which also migrates) and
    Cloudinary storage are built at startup unless injected.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("API starting")
        owns_db = False
        cfg: Settings = app.state.settings

        if getattr(app.state, "db", None) is None:
            app.state.db = init_db(database_url=cfg.database_url)
            owns_db = True
            logger.info("DB initialized for API")
        else:
            logger.info("DB injected for API")

        if getattr(app.state, "storage", None) is None:
            app.state.storage = CloudinaryStorage.from_settings(cfg)

        yield

        if owns_db:
            app.state.db.dispose()
        logger.info("API stopping")

    app = FastAPI(title="photoblog API", lifespan=lifespan)

    # Injected handles are usable even when the lifespan never runs
    # (TestClient used without a `with` block).
    app.state.settings = settings
    app.state.db = db
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(photos_router)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> Response:
        return JSONResponse(
            status_code=exc.status_code, content={"message": exc.message}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        return JSONResponse(
            status_code=422,
            content={"message": _validation_message(exc)},
        )

    @app.middleware("http")
    async def access_log_middleware(request: Request, call_next) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            logger.exception(
                "%s %s -> 500 (%.1fms)",
                request.method,
                request.url.path,
                elapsed_ms,
            )
            # Error details stay in the log, not in the response.
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"message": INTERNAL_ERROR_MESSAGE},
            )

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.get("/health", response_model=HealthOut)
    def health() -> HealthOut:
        return HealthOut(status="ok", message="Server is running")

    return app
