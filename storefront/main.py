# storefront/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.core.exception_handler import setup_exception_handlers
from storefront.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import user as _user_models  # noqa: F401
from storefront.models import address as _address_models  # noqa: F401
from storefront.models import product as _product_models  # noqa: F401
from storefront.models import inventory as _inventory_models  # noqa: F401
from storefront.models import order as _order_models  # noqa: F401
from storefront.models import wallet as _wallet_models  # noqa: F401
from storefront.models import delivery as _delivery_models  # noqa: F401

# Routers
from storefront.routers.users import router as users_router
from storefront.routers.categories import router as categories_router
from storefront.routers.products import router as products_router, service as product_service
from storefront.routers.orders import router as orders_router
from storefront.routers.wallet import router as wallet_router
from storefront.routers.delivery import router as delivery_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Make sure the fulfillment location row exists.
    """
    logger.info("🔄 Startup: Connecting to database...")
    try:
        create_db_and_tables()
        with Session(engine) as session:
            product_service.ensure_fulfillment_location(
                session, settings.FULFILLMENT_LOCATION_NAME
            )
        logger.info(
            "✅ Startup: DB connection OK, fulfilling from %s.",
            settings.FULFILLMENT_LOCATION_ID,
        )
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

setup_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(categories_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(wallet_router, prefix=settings.API_V1_STR)
app.include_router(delivery_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "storefront-backend"}
