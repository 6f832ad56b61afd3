# app/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import uvicorn

from app.api.routers import auth, users, products, carts, orders, health
from app.data.database import Database
from app.domain.errors import AppError, AuthError
from app.services.lock_service import LockService
from app.utils.settings import DATABASE_URL, API_PREFIX
from app.utils.logging import get_logger

logger = get_logger(__name__)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # walidacja przed jakimkolwiek zapisem, 400 zamiast domyslnego 422
    return JSONResponse(status_code=400, content={"errors": jsonable_encoder(exc.errors())})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    database_url: str | None = None,
    lock_service: LockService | None = None,
) -> FastAPI:
    db = Database(database_url or DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing database...")
        db.create_all()
        logger.info("Shop service started")
        yield
        db.dispose()
        logger.info("Shop service stopped")

    app = FastAPI(
        title="Shop Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.db = db
    app.state.lock_service = lock_service or LockService()

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(products.router, prefix=API_PREFIX)
    app.include_router(carts.router, prefix=API_PREFIX)
    app.include_router(orders.router, prefix=API_PREFIX)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
