# settings.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Default values
DEFAULT_DATA_DIR = os.path.join(BASE_DIR, "user_data")
DEFAULT_PAYMENT_INTERVAL = 30 * 24 * 60 * 60  # seconds, not a calendar month
DEFAULT_RATE_MAX_AGE = 3600
DEFAULT_REFERENCE_PRICE = 3000 * 10 ** 8  # reference units per settlement unit
DEFAULT_YIELD_RATE_BPS = 500
DEFAULT_INFLATION_RATE_BPS = 200
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PORT = 8000

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class EngineSettings:
    data_dir: str = DEFAULT_DATA_DIR
    payment_interval: int = DEFAULT_PAYMENT_INTERVAL
    rate_max_age: int = DEFAULT_RATE_MAX_AGE
    reference_price: int = DEFAULT_REFERENCE_PRICE
    log_level: str = DEFAULT_LOG_LEVEL
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            data_dir=os.getenv("PENSION_DATA_DIR", "").strip() or DEFAULT_DATA_DIR,
            payment_interval=_env_int("PENSION_PAYMENT_INTERVAL", DEFAULT_PAYMENT_INTERVAL),
            rate_max_age=_env_int("PENSION_RATE_MAX_AGE", DEFAULT_RATE_MAX_AGE),
            reference_price=_env_int("PENSION_REFERENCE_PRICE", DEFAULT_REFERENCE_PRICE),
            log_level=os.getenv("PENSION_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL,
            port=_env_int("PENSION_PORT", DEFAULT_PORT),
        )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
