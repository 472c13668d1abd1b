"""
FastAPI application exposing the sandbox chat agent.
"""

import logging

from fastapi import FastAPI

from sandbox_agent import __version__
from sandbox_agent.api.routers import router as api_router
from sandbox_agent.config.settings import settings

# Create FastAPI app
app = FastAPI(title="Sandbox Agent API", version=__version__)
app.include_router(api_router)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)
logger.info(
    f"Serving sandboxes from {settings.sandbox_root} "
    f"(router: {settings.router_type}, formatter: {settings.formatter})"
)
