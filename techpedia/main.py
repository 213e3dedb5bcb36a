# techpedia/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from techpedia.core.config import get_settings
from techpedia.core.errors import AppError, PersistenceError, ValidationError
from techpedia.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from techpedia.models import user as _user_models  # noqa: F401
from techpedia.models import product as _product_models  # noqa: F401
from techpedia.models import cart as _cart_models  # noqa: F401
from techpedia.models import order as _order_models  # noqa: F401

# Routers
from techpedia.routers.auth import router as auth_router
from techpedia.routers.users import router as users_router
from techpedia.routers.products import router as products_router
from techpedia.routers.brands import router as brands_router
from techpedia.routers.categories import router as categories_router
from techpedia.routers.cart import router as cart_router
from techpedia.routers.checkout import router as checkout_router
from techpedia.routers.orders import router as orders_router
from techpedia.routers.dependencies import auth_service

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Purge revoked tokens that have already expired.
    """
    logger.info("🔄 Startup: Connecting to database...")
    try:
        create_db_and_tables()
        with Session(engine) as session:
            auth_service.sweep_expired_tokens(session)
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# --- Error responses: {"error": ..., "code": ..., ...extra} ---


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_dict()),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    issues = [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
        for err in exc.errors()
    ]
    error = ValidationError("Invalid input", issues=issues)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    error = PersistenceError("Database error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.to_dict(),
    )


# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(brands_router, prefix=settings.API_V1_STR)
app.include_router(categories_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(checkout_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "techpedia-backend"}
