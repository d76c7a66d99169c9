from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.adapters.mock_payment import PaymentGateway
from app.api.deps import get_payment_gateway
from app.db import engine
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
def health(gateway: PaymentGateway = Depends(get_payment_gateway)):
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except SQLAlchemyError as e:
        logger.warning("Health check could not reach the database: %s", e)

    payment_ok = gateway.health_check()
    return {
        "status": "ok" if db_ok and payment_ok else "degraded",
        "db": db_ok,
        "payment_gateway": gateway.name,
        "payment_gateway_ok": payment_ok,
    }
