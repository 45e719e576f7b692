# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from app.models import user as _user_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401
from app.models import cart as _cart_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401


# Routers
from app.routers.auth import router as auth_router
from app.routers.addresses import router as addresses_router
from app.routers.cart import router as cart_router
from app.routers.orders import router as orders_router
from app.routers.shop_orders import router as shop_orders_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: verify the database is reachable and create missing tables.
    Shutdown: release pooled connections.
    """
    db = engine.url.render_as_string(hide_password=True)
    logger.info("Startup: connecting to %s", db)
    try:
        create_db_and_tables()
    except Exception:
        logger.exception("Startup: database unavailable (%s)", db)
        raise
    logger.info("Startup: tables verified (%s mode)", settings.ENVIRONMENT)
    yield
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    # Clients must be able to read the guest id we hand out
    expose_headers=[settings.GUEST_ID_HEADER],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(addresses_router, prefix=settings.API_PREFIX)
app.include_router(cart_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(shop_orders_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "local-market-backend",
        "environment": settings.ENVIRONMENT,
    }
