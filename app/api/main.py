from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.api.routes_greeting import router as greeting_router
from app.api.routes_health import router as health_router
from app.api.routes_metrics import router as metrics_router
from app.api.routes_vat import router as vat_router
from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logger import init_logging
from app.db.base_class import Base
from app.db.redis_client import close_redis_pool
from app.db.session import engine
from app.models import greeting_models  # noqa: F401  (registers the counter table)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The counter table is the only schema this service owns
    Base.metadata.create_all(bind=engine)
    yield
    close_redis_pool()


def create_app() -> FastAPI:
    init_logging()

    # Disable interactive docs in production
    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    register_error_handlers(app)
    app.include_router(vat_router, prefix="/vat", tags=["vat"])
    app.include_router(greeting_router, prefix="/tenants", tags=["greetings"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)
    return app


app = create_app()
