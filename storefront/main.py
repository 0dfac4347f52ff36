import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from storefront.core import exceptions as service_exceptions
from storefront.core.config import get_settings
from storefront.core.database_init import init_database_schema
from storefront.core.db import get_engine
from storefront.core.logging import configure_logging
from storefront.core.middleware import RequestContextMiddleware
from storefront.routers import get_api_router
from storefront.routers.errors import status_for
from storefront.services.bootstrap import ensure_default_catalog


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    logger = logging.getLogger("storefront.app")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_SCHEMA:
            init_database_schema(get_engine())
        ensure_default_catalog()
        yield

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error on %s %s detail=%s",
            request.method,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        error = service_exceptions.classify_db_error(exc) or service_exceptions.ServiceError("Database error")
        logger.error("Database failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_for(error.error_type),
            content={"detail": str(error), "errorType": error.error_type},
        )

    api_router = get_api_router()
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_app()
