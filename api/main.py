"""
CMDB API - Main Application
Configuration items, relationships and runtime-declared type schemas
"""
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import cmdb
from cmdb.database import close_db_connections, configure_database, init_db
from cmdb.utils.config import Config
from cmdb.utils.logger import configure_from_settings, setup_logger
from api.dependencies import AppState
from api.exceptions import register_exception_handlers
from api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from api.routers import cis, health, relationships, schemas

# Load environment variables
load_dotenv()

logger = setup_logger(__name__)


# ============================================
# APPLICATION LIFECYCLE
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Creates tables on startup and releases the connection pool on shutdown
    """
    config: Config = app.state.config
    configure_from_settings(config.logging)

    configure_database(config.database)
    init_db()
    logger.info("[OK] Database initialized successfully")

    yield

    close_db_connections()
    logger.info("Shutting down CMDB API")


# ============================================
# APPLICATION SETUP
# ============================================

def create_app(config: Config = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        config: Settings to use; loaded from config/config.yaml and the
            environment when omitted
    """
    config = config or AppState.get_config()
    AppState.set_config(config)

    app = FastAPI(
        title="CMDB API",
        description="Configuration items and relationships validated against runtime-declared schemas",
        version=cmdb.__version__,
        lifespan=lifespan
    )
    app.state.config = config

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allowed_origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=config.cors.allowed_methods,
        allow_headers=config.cors.allowed_headers,
        max_age=config.cors.max_age,
    )

    # Add middleware in reverse order (last added = first executed)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)

    app.include_router(health.router)         # Health checks
    app.include_router(cis.router)            # Configuration items
    app.include_router(relationships.router)  # CI relationships
    app.include_router(schemas.router)        # Type schemas, templates and dry-run validation

    return app


app = create_app()


# ============================================
# MAIN ENTRY POINT
# ============================================

if __name__ == "__main__":
    import uvicorn

    server = AppState.get_config().server
    host = os.getenv("HOST", server.host)
    port = int(os.getenv("PORT", str(server.port)))

    logger.info(f" API will be available at: http://{host}:{port}")
    logger.info(f" Docs available at: http://{host}:{port}/docs")

    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=AppState.get_config().logging.level.lower()
    )
