import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calllog.config import MAX_BODY_BYTES, Settings, settings
from calllog.database import build_engine, build_session_factory, init_db
from calllog.routers import frontend, logs
from calllog.services.log_store import CallLogStore

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(app_settings.sqlalchemy_url)
        await init_db(engine)
        app.state.log_store = CallLogStore(build_session_factory(engine))
        logger.info("Database ready, serving static files from %s", app_settings.static_dir)

        yield

        await engine.dispose()
        logger.info("Database engine disposed")

    app = FastAPI(title="Call Log Server", lifespan=lifespan)
    app.state.static_dir = app_settings.static_dir

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_BODY_BYTES:
            logger.warning("Rejected %s byte body on %s %s", content_length, request.method, request.url.path)
            return JSONResponse(status_code=413, content={"message": "Request entity too large."})
        return await call_next(request)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    app.include_router(logs.router, prefix="/api")
    # Catch-all, must stay last
    app.include_router(frontend.router)

    return app


app = create_app()
