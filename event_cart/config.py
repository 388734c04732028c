from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str
    api_base_url: str
    request_timeout: float
    cache_ttl: float
    debounce_window: float
    tax_rate: Decimal
    service_fee_rate: Decimal
    partial_payment_rate: Decimal
    outstation_marker: str
    outstation_surcharge: Decimal
    log_level: str


settings = Settings(
    database_url=os.getenv("DATABASE_URL", "sqlite+pysqlite:///./event_cart.db"),
    api_base_url=os.getenv("CART_API_URL", "http://localhost:5001/api"),
    request_timeout=float(os.getenv("CART_REQUEST_TIMEOUT", "10")),
    cache_ttl=float(os.getenv("CART_CACHE_TTL", "30")),
    debounce_window=float(os.getenv("CART_DEBOUNCE_WINDOW", "0.3")),
    tax_rate=Decimal(os.getenv("CART_TAX_RATE", "0.18")),
    service_fee_rate=Decimal(os.getenv("CART_SERVICE_FEE_RATE", "0.05")),
    partial_payment_rate=Decimal(os.getenv("CART_PARTIAL_PAYMENT_RATE", "0.20")),
    outstation_marker=os.getenv("CART_OUTSTATION_MARKER", "outstation"),
    outstation_surcharge=Decimal(os.getenv("CART_OUTSTATION_SURCHARGE", "2000")),
    log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
)


def setup_logging() -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
