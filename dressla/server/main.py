"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import dressla
from dressla.core.database import init_db
from dressla.core.logging_config import get_logger, setup_logging
from dressla.core.monitoring import initialize_logfire

from .api.v1 import (
    admin,
    auth,
    author,
    cart,
    categories,
    chat,
    delivery_cities,
    health,
    orders,
    payments,
    products,
    rentals,
    reviews,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup. Production schemas are managed by
    Alembic; ``init_db`` only fills the gaps of a development database.
    """
    # Startup
    try:
        logger.info("Starting up Dressla Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Dressla Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Dressla Marketplace API

    Backend of a clothing marketplace where sellers list garments for sale or rent.
    It covers accounts and seller verification, the catalog, cart and checkout with
    Bank of Georgia payments, rentals, reviews, chat and the admin back office.
    """,
    version=dressla.__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

api = constant.API_V1_STR
app.include_router(health.router, prefix=api, tags=["health"])
app.include_router(auth.router, prefix=f"{api}/auth")
app.include_router(users.router, prefix=f"{api}/user")
app.include_router(products.router, prefix=f"{api}/products")
app.include_router(reviews.router, prefix=api)
app.include_router(categories.router, prefix=f"{api}/categories")
app.include_router(cart.router, prefix=f"{api}/cart")
app.include_router(orders.router, prefix=f"{api}/orders")
app.include_router(payments.router, prefix=api)
app.include_router(rentals.router, prefix=f"{api}/rental")
app.include_router(chat.router, prefix=f"{api}/chat")
app.include_router(delivery_cities.router, prefix=api)
app.include_router(author.router, prefix=f"{api}/author")
app.include_router(admin.router, prefix=f"{api}/admin")
app.include_router(orders.admin_router, prefix=f"{api}/admin")
app.include_router(chat.admin_router, prefix=f"{api}/admin")
app.include_router(delivery_cities.admin_router, prefix=f"{api}/admin")
