# run.py
"""
Main entry point for the TerraAI agricultural data service
"""

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

import uvicorn
import logging
from contextlib import asynccontextmanager

from terraai.api.app import create_app
from terraai.core.cache import ResponseCache
from terraai.core.config import get_settings, validate_api_keys
from terraai.core.logging import setup_logging
from terraai.agents.fusion.agent import AgriculturalDataAgent
from terraai.agents.base import agent_registry

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app):
    """Application lifespan management"""
    settings = get_settings()

    # Startup
    logger.info("🚀 Starting TerraAI agricultural data service")
    validate_api_keys(settings)

    logger.info("Initializing agents...")
    try:
        cache = ResponseCache(ttl=settings.cache_ttl_seconds) if settings.cache_enabled else None
        agent_registry.register(AgriculturalDataAgent(cache=cache, settings=settings))
        logger.info("✅ Agricultural data agent registered")

        health_results = await agent_registry.health_check_all()
        for agent_name, health in health_results.items():
            status = "✅" if health["status"] == "healthy" else "❌"
            logger.info(f"{status} {agent_name}: {health['status']}")

    except Exception as e:
        logger.error(f"❌ Failed to initialize agents: {e}")
        raise

    yield

    # Shutdown
    agent_registry.unregister("agricultural_data")
    logger.info("🛑 Shutting down TerraAI agricultural data service")

def create_application():
    """Create FastAPI application with all configurations"""
    return create_app(lifespan=lifespan)

def main():
    """Main entry point"""
    settings = get_settings()

    logger.info(f"Starting server on {settings.api_host}:{settings.api_port}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")

    if settings.debug:
        # Import string so reload can re-import the factory
        uvicorn.run(
            "run:create_application",
            factory=True,
            host=settings.api_host,
            port=settings.api_port,
            reload=True,
            log_level=settings.log_level.value.lower(),
            access_log=True
        )
    else:
        uvicorn.run(
            create_application(),
            host=settings.api_host,
            port=settings.api_port,
            reload=False,
            log_level=settings.log_level.value.lower(),
            access_log=True
        )

if __name__ == "__main__":
    main()
