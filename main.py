"""
Composition Server Main Application

This is the entry point for the composition server.
It wires together the module registry, the template composer and API routes.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Composition engine
from composition_engine.config import EngineConfig
from composition_engine.generators import TemplateComposer
from composition_engine.modules import create_default_registry
from composition_engine.presets import load_presets_file

# API routes
from api.routes_composition import setup_composition_routes

# Config
from config import (
    DEFAULT_BASE_URL, DEFAULT_VIEWPORT_WIDTH, DEFAULT_VIEWPORT_HEIGHT,
    PRESETS_FILE, DEFAULT_PORT, PRODUCTION_PORT
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def create_composer() -> TemplateComposer:
    """Build the composer from process configuration"""
    engine_config = EngineConfig(
        base_viewport_width=DEFAULT_VIEWPORT_WIDTH,
        base_viewport_height=DEFAULT_VIEWPORT_HEIGHT,
    )
    registry = create_default_registry()
    logging.info(f"Registered modules: {', '.join(registry.list_module_ids())}")
    return TemplateComposer(registry, engine_config, base_url=DEFAULT_BASE_URL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan management for FastAPI application.
    Handles startup and shutdown tasks.
    """
    # STARTUP
    logging.info("Starting composition server...")

    try:
        logging.info(f"Loading layout presets from {PRESETS_FILE}...")
        load_presets_file(PRESETS_FILE)
    except Exception as e:
        logging.error(f"Failed to load layout presets: {e}")
        raise

    logging.info("Composition server started successfully!")

    yield  # Application is running

    # SHUTDOWN
    logging.info("Composition server shut down")


# Create FastAPI app with lifespan
app = FastAPI(
    title="Composition Server",
    description="Module composition and layout engine for social-media graphics",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(setup_composition_routes(create_composer()))


if __name__ == "__main__":
    import argparse
    import uvicorn

    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Composition Server - module layout engine')
    parser.add_argument('--production', action='store_true',
                       help='Run in production mode (port 80)')
    parser.add_argument('--port', type=int, default=None,
                       help='Custom port (overrides --production)')
    args = parser.parse_args()

    # Determine port
    if args.port:
        port = args.port
    elif args.production:
        port = PRODUCTION_PORT
    else:
        port = DEFAULT_PORT

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        log_level="info",
        reload=False
    )
