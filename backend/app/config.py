from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    FRONTEND_URL: str = "http://localhost:3000"

    # "paypal" talks to the REST API, "mock" keeps orders in memory
    PAYMENT_GATEWAY: str = "mock"
    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_CLIENT_SECRET: str = ""
    PAYPAL_BASE_URL: str = "https://api-m.sandbox.paypal.com"
    CURRENCY: str = "USD"

    SHIPPING_SERVICE_URL: str = "https://vinateria-envios.bwet7p.easypanel.host"
    RATING_SERVICE_URL: str = "https://vinateria-reviews.bwet7p.easypanel.host"
    RECOMMENDATION_SERVICE_URL: str = "https://vinateria-recomendaciones.bwet7p.easypanel.host"
    HTTP_TIMEOUT_SECONDS: float = 5.0
    HTTP_RETRY_ATTEMPTS: int = 3

    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("500")
    DEFAULT_BOTTLE_ML: int = 750
    TOTAL_TOLERANCE: Decimal = Decimal("0.01")
    DEFAULT_REVIEW_RATING: int = 3
    LOW_STOCK_THRESHOLD: int = 3

    MEDIA_DIR: str = "./media"
    MEDIA_URL: str = "/media"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
