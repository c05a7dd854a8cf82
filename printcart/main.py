# printcart/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from printcart.api.routers import health, pricing, carts, checkout, orders, webhooks
from printcart.data.database import Base, engine
from printcart.utils.logging import get_logger

#models must be imported before create_all
import printcart.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db():
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Printcart Checkout Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(pricing.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(webhooks.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
