# terraai/core/logging.py
"""
Logging configuration for the backend
"""
import logging
import sys
from .config import get_settings


def setup_logging():
    """Setup logging configuration"""
    settings = get_settings()

    # Configure root logger
    logging.basicConfig(
        level=getattr(logging, settings.log_level.value),
        format=settings.log_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set specific logger levels
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    # aiohttp logs every connection problem we already report as a fallback
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
