# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration, all env-driven.
Single source of truth for every capacity rule and display tunable.
"""

import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    """Engine settings loaded from environment variables."""

    def __init__(self) -> None:
        self.SERVICE_NAME: str = os.getenv("SERVICE_NAME", "chair-allocation")
        self.SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # ── Capacity model ──
        self.FULL_CAPACITY: float = float(os.getenv("FULL_CAPACITY", "100"))
        self.MIN_WORKLOAD_PERCENTAGE: float = float(
            os.getenv("MIN_WORKLOAD_PERCENTAGE", "1")
        )
        self.MAX_WORKLOAD_PERCENTAGE: float = min(
            float(os.getenv("MAX_WORKLOAD_PERCENTAGE", "100")),
            self.FULL_CAPACITY,
        )
        self.DEFAULT_WORKLOAD_PERCENTAGE: float = float(
            os.getenv("DEFAULT_WORKLOAD_PERCENTAGE", "20")
        )
        self.HIGH_CAPACITY_WARNING_THRESHOLD: float = float(
            os.getenv("HIGH_CAPACITY_WARNING_THRESHOLD", "80")
        )
        self.ALLOW_OVER_ALLOCATION: bool = _env_bool("ALLOW_OVER_ALLOCATION", "true")

        # ── Display ──
        self.DECIMAL_PRECISION: int = int(os.getenv("DECIMAL_PRECISION", "1"))


settings = Settings()
