"""
FastAPI main application for the Cirec article search service.
"""

import logging
import logging.config
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routes import router
from src.ingestion.database import init_database
from src.search.search_engine import SearchEngine
from config.search_config import (
    LOG_CONFIG,
    DATABASE_PATH,
    CONCURRENCY_CONFIG,
    CORS_ORIGINS,
    API_CONFIG,
    ENVIRONMENT,
    DEBUG
)

# Configure logging
logging.config.dictConfig(LOG_CONFIG)
logger = logging.getLogger('api')


# ============================================================================
# Application Factory
# ============================================================================

def create_app(database_path: str = None) -> FastAPI:
    """
    Build the API application.

    Args:
        database_path: SQLite file to serve (defaults to DATABASE_PATH)

    Returns:
        Configured FastAPI application
    """
    db_path = database_path or DATABASE_PATH

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Creates the database handle, search engine and thread pool at
        startup and releases them at shutdown.
        """
        # Startup
        logger.info("Starting Cirec Search API...")
        logger.info(f"Environment: {ENVIRONMENT}")
        logger.info(f"Debug mode: {DEBUG}")

        try:
            database = init_database(db_path)
            app.state.database = database
            app.state.search_engine = SearchEngine(database)
            app.state.search_executor = ThreadPoolExecutor(
                max_workers=CONCURRENCY_CONFIG['search_thread_pool_size']
            )
            logger.info(f"Search engine ready on {db_path} (tables: {', '.join(database.list_tables())})")

        except Exception as e:
            logger.error(f"Failed to initialize search engine: {e}")
            raise

        logger.info("API startup complete")

        yield

        # Shutdown
        logger.info("Shutting down Cirec Search API...")
        app.state.search_executor.shutdown(wait=True)
        app.state.search_engine = None
        app.state.database.close()
        app.state.database = None
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Cirec Search API",
        description="Keyword search API for Cirec articles",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None
    )

    # ========================================================================
    # CORS Configuration
    # ========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # ========================================================================
    # Root Endpoint
    # ========================================================================

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "name": "Cirec Search API",
            "version": "1.0.0",
            "description": "Keyword search over Cirec articles",
            "endpoints": {
                "search": "/api/v1/search",
                "health": "/api/v1/health"
            },
            "documentation": "/docs" if DEBUG else None
        }

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request, exc):
        """Reject malformed requests before they reach the search core."""
        errors = exc.errors()
        fields = ", ".join(
            str(error['loc'][-1]) for error in errors if error.get('loc')
        )
        logger.warning(f"Rejected request to {request.url.path}: {fields or 'invalid parameters'}")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": f"Invalid request parameters: {fields}" if fields else "Invalid request parameters"
            }
        )

    @app.exception_handler(404)
    async def not_found_handler(request, exc):
        """Handle 404 errors."""
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "message": f"Resource not found: {request.url.path}"
            }
        )

    @app.exception_handler(500)
    async def internal_error_handler(request, exc):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": str(exc) if DEBUG else "An unexpected error occurred"
            }
        )

    return app


app = create_app()


# ============================================================================
# Development Server
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",  # Use fully qualified module path
        host=API_CONFIG['host'],
        port=API_CONFIG['port'],
        reload=API_CONFIG['reload'],
        log_level=API_CONFIG['log_level']
    )
