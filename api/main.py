import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from content import router as content_router
from core import db
from core.errors import ContentError
from core.settings import Settings, log_level_from_name, settings_from_env
from items import router as items_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # Initialize the DB pool once per process.
    await db.init_pool(settings.database_url)
    logger.info("content_root path=%s files_dir=%s", settings.site_root, settings.files_dir)
    try:
        yield
    finally:
        await db.close_pool()


async def content_error_handler(_: Request, exc: ContentError) -> JSONResponse:
    logger.error("content_error type=%s error=%s", type(exc).__name__, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": type(exc).__name__, "message": str(exc)},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or settings_from_env()
    logging.basicConfig(level=log_level_from_name(settings.log_level))

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings

    # Allow the admin frontend to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Origin", "Content-Type"],
        expose_headers=["Content-Length"],
        max_age=12 * 60 * 60,
    )
    app.add_exception_handler(ContentError, content_error_handler)

    app.include_router(items_router.router, tags=["items"])
    app.include_router(content_router.router, tags=["content"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
