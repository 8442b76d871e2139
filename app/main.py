# app/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import uvicorn

from app.api.routers import health, products, carts
from app.data.database import init_db
from app.data.seed import seed
from app.utils.settings import SEED_CATALOG
from app.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()
    if SEED_CATALOG:
        seed()
    yield


async def request_validation_handler(request: Request, exc: RequestValidationError):
    #malformed payloads are a plain 400 for this api, not fastapi's 422
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
