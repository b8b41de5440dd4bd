import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core import db, errors, settings
from core.log_config import configure_logging
from streams import router as streams_router
from streams.repository import InMemoryStreamRepository, PostgresStreamRepository, StreamRepository

logger = logging.getLogger(__name__)


def create_app(
    *,
    stream_repository: StreamRepository | None = None,
    app_settings: settings.Settings | None = None,
) -> FastAPI:
    cfg = app_settings or settings.get_settings()
    configure_logging(cfg.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # An injected repository owns its own storage; no pool needed.
        if stream_repository is not None:
            app.state.stream_repository = stream_repository
            yield
            return

        if cfg.repository_backend == "memory":
            logger.warning("stream_repository backend=memory data is not persisted")
            app.state.stream_repository = InMemoryStreamRepository()
            yield
            return

        # Initialize the DB pool once per process.
        await db.init_pool(cfg)
        try:
            await db.check_connection()
            logger.info("database_ready pool_max=%s", cfg.db_pool_max_size)
            app.state.stream_repository = PostgresStreamRepository()
            yield
        finally:
            await db.close_pool()
            logger.info("database_closed")

    app = FastAPI(title="stream-api", lifespan=lifespan)
    if stream_repository is not None:
        app.state.stream_repository = stream_repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials="*" not in cfg.cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # Unhandled exceptions are answered with 500 further out.
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "http_request method=%s path=%s status=%s duration_ms=%.1f",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
            )

    errors.register_exception_handlers(app)
    app.include_router(streams_router.router, prefix=cfg.api_prefix, tags=["streams"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "stream api"}

    return app


def run() -> None:
    import uvicorn

    cfg = settings.get_settings()
    logger.info("server_starting host=%s port=%s backend=%s", cfg.host, cfg.port, cfg.repository_backend)
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_config=None)


app = create_app()


if __name__ == "__main__":
    run()
