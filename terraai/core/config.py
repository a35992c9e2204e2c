# terraai/core/config.py
"""
Configuration management for the agricultural data service
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Dict, Any
import logging
from functools import lru_cache
from enum import Enum

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class WeightPolicy(str, Enum):
    FIXED = "fixed"
    RENORMALIZE = "renormalize"


class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True

    # API Configuration
    api_title: str = "TerraAI Agricultural Data Service"
    api_version: str = "1.0.0"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # External providers
    nasa_api_key: Optional[str] = "DEMO_KEY"
    nasa_power_url: str = "https://power.larc.nasa.gov/api/temporal/daily/point"
    stac_api_url: str = "https://planetarycomputer.microsoft.com/api/stac/v1"
    provider_timeout_seconds: float = 8.0
    user_agent: str = "TerraAI/1.0 (NASA Farm Navigators)"

    # Cache Configuration
    cache_enabled: bool = True
    cache_ttl_seconds: int = 1800  # 30 minutes

    # Fusion
    satellite_weight: float = 0.6
    high_res_weight: float = 0.4
    weight_policy: WeightPolicy = WeightPolicy.FIXED

    # Imagery search
    imagery_buffer_km: float = 2.0
    max_cloud_cover: float = 20.0
    imagery_recent_days: int = 10
    satellite_window_days: int = 30

    # Salt mixed into coordinate seeds for simulated readings
    simulation_seed: int = 0

    def get_agent_config(self, agent_name: str) -> Dict[str, Any]:
        """Get configuration for specific agent"""
        config_map = {
            "agricultural_data": {
                "satellite_weight": self.satellite_weight,
                "high_res_weight": self.high_res_weight,
                "weight_policy": self.weight_policy.value,
                "provider_timeout_seconds": self.provider_timeout_seconds,
                "imagery_buffer_km": self.imagery_buffer_km,
            },
            "satellite": {
                "base_url": self.nasa_power_url,
                "api_key": self.nasa_api_key,
                "timeout": self.provider_timeout_seconds,
                "window_days": self.satellite_window_days,
                "user_agent": self.user_agent,
                "seed": self.simulation_seed,
            },
            "imagery": {
                "base_url": self.stac_api_url,
                "timeout": self.provider_timeout_seconds,
                "max_cloud_cover": self.max_cloud_cover,
                "recent_days": self.imagery_recent_days,
                "user_agent": self.user_agent,
                "seed": self.simulation_seed,
            },
        }
        return config_map.get(agent_name, {})

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def validate_api_keys(settings: Settings) -> None:
    """Validate required API keys based on environment"""
    missing = []

    if not settings.nasa_api_key:
        missing.append("NASA_API_KEY")
    elif settings.nasa_api_key == "DEMO_KEY":
        logger.warning("NASA_API_KEY is DEMO_KEY; satellite requests are rate limited")

    if missing and settings.is_production:
        raise ValueError(f"Missing required API keys in production: {', '.join(missing)}")

    if missing:
        logger.warning(f"Missing API keys: {', '.join(missing)}")
        logger.warning("Satellite readings will fall back to simulated data")
    else:
        logger.info("All required API keys are present")
