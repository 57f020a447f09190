"""
Configuration settings for the SKU Specification Resolution Service.
"""

import os
from dotenv import load_dotenv

# Load .env (container env overrides file values)
load_dotenv()


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    """Application configuration settings"""

    # Service
    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "SKU Specification Resolution Service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Purchase limits
    DEFAULT_MAX_PURCHASE: int = _get_int("DEFAULT_MAX_PURCHASE", 99)

    # Variant key encoding
    VARIANT_KEY_DELIMITER: str = os.getenv("VARIANT_KEY_DELIMITER", ",")

    # Display text
    SUMMARY_SEPARATOR: str = os.getenv("SUMMARY_SEPARATOR", " / ")
    PRICE_RANGE_SEPARATOR: str = os.getenv("PRICE_RANGE_SEPARATOR", "-")
    SCORE_UNIT_LABEL: str = os.getenv("SCORE_UNIT_LABEL", "pts")


settings = Settings()
