from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.errors import register_exception_handlers
from app.api.health import router as health_router
from app.api.routes_cart import router as cart_router
from app.api.routes_catalogue import promotions_router
from app.api.routes_catalogue import router as catalogue_router
from app.api.routes_order import router as order_router
from app.api.routes_reviews import router as reviews_router
from app.api.routes_shipping import router as shipping_router
from app.config import settings
from app.db import import_models, init_db
from app.utils.logging import configure_logging, get_logger

configure_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)

# relationships between models are resolved by name; register them all up front
import_models()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Payment gateway: %s", settings.PAYMENT_GATEWAY)
    yield


app = FastAPI(title="Vinatería - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health_router, tags=["health"])

app.include_router(catalogue_router, prefix="/products", tags=["catalogue"])

app.include_router(promotions_router, prefix="/promociones", tags=["catalogue"])

app.include_router(cart_router, prefix="/cart", tags=["cart"])

app.include_router(order_router, prefix="/orders", tags=["orders"])

app.include_router(shipping_router, prefix="/shipping", tags=["shipping"])

app.include_router(reviews_router, prefix="/reviews", tags=["reviews"])

app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_DIR, check_dir=False), name="media")


if __name__ == "__main__":
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
