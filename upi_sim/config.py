"""
Runtime configuration for the UPI simulator.

Values come from environment variables; a `.env` file in the project root is
loaded first when present. Every knob of the simulated backend (failure rate,
latency window, demo OTP, amount ceiling) lives here so tests and the API can
build a service from the same source.
"""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_ROOT = Path(__file__).resolve().parent.parent
_ENV_PATH = _ROOT / ".env"


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Configuration settings for the simulator."""

    database_url: str = "sqlite:///./upi_sim.db"

    # Simulated network behaviour
    failure_rate: float = 0.05
    min_delay_ms: int = 300
    max_delay_ms: int = 1200

    # Business rules
    demo_otp: str = "123456"
    max_amount: int = 100_000
    demo_balance: str = "125000.50"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def delay_range(self) -> tuple:
        """Latency window in seconds."""
        return self.min_delay_ms / 1000, self.max_delay_ms / 1000

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from the environment.

        Raises:
            ValueError: If a numeric variable cannot be parsed or the
                latency/failure settings are out of range.
        """
        load_dotenv(_ENV_PATH)

        settings = cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url).strip() or cls.database_url,
            failure_rate=_float_env("UPI_FAILURE_RATE", cls.failure_rate),
            min_delay_ms=_int_env("UPI_MIN_DELAY_MS", cls.min_delay_ms),
            max_delay_ms=_int_env("UPI_MAX_DELAY_MS", cls.max_delay_ms),
            demo_otp=os.getenv("UPI_DEMO_OTP", cls.demo_otp).strip() or cls.demo_otp,
            max_amount=_int_env("UPI_MAX_AMOUNT", cls.max_amount),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).strip().upper() or cls.log_level,
            log_format=os.getenv("LOG_FORMAT", cls.log_format).strip().lower() or cls.log_format,
        )

        if not 0.0 <= settings.failure_rate <= 1.0:
            raise ValueError("UPI_FAILURE_RATE must be between 0 and 1")
        if settings.min_delay_ms < 0 or settings.max_delay_ms < settings.min_delay_ms:
            raise ValueError("UPI_MIN_DELAY_MS/UPI_MAX_DELAY_MS must form a non-negative range")
        return settings
