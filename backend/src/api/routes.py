"""
FastAPI route handlers for the article search API.
"""

import asyncio
import logging
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor
from fastapi import APIRouter, HTTPException, Query, Depends, Request
from fastapi.responses import JSONResponse

from .models import (
    SearchResponse,
    SearchErrorResponse,
    HealthResponse
)
from src.ingestion.database import Database, StoreExecutionError
from src.search.search_engine import SearchEngine, assemble_response
from config.search_config import SEARCH_CONFIG

logger = logging.getLogger('api')

# Track service start time
service_start_time = datetime.now()


# ============================================================================
# Dependency Injection
# ============================================================================

def get_search_engine(request: Request) -> SearchEngine:
    """Get the search engine created by the application lifespan."""
    engine = getattr(request.app.state, 'search_engine', None)
    if engine is None:
        raise HTTPException(
            status_code=503,
            detail="Search engine not initialized"
        )
    return engine


def get_search_executor(request: Request) -> ThreadPoolExecutor:
    """Get the thread pool that runs blocking store calls."""
    executor = getattr(request.app.state, 'search_executor', None)
    if executor is None:
        raise HTTPException(
            status_code=503,
            detail="Search executor not initialized"
        )
    return executor


def get_database(request: Request) -> Database:
    """Get the database handle, if the application has one."""
    return getattr(request.app.state, 'database', None)


# ============================================================================
# API Router
# ============================================================================

router = APIRouter(prefix="/api/v1", tags=["search"])


# ============================================================================
# Search Endpoints
# ============================================================================

@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        404: {"model": SearchResponse, "description": "No article matched the keyword"},
        400: {"model": SearchErrorResponse, "description": "Invalid request parameters"},
        500: {"model": SearchErrorResponse, "description": "Search process failed"},
    }
)
async def search_articles(
    keyword: str = Query(
        ...,
        min_length=1,
        max_length=SEARCH_CONFIG['max_keyword_length'],
        description="Free-text keyword"
    ),
    page: int = Query(1, ge=1, description="1-based page number"),
    fulltext: bool = Query(False, description="Use ranked full-text matching instead of substring matching"),
    engine: SearchEngine = Depends(get_search_engine),
    executor: ThreadPoolExecutor = Depends(get_search_executor)
):
    """
    Search articles by keyword.

    Substring mode matches the keyword anywhere in the title or content and
    orders by publication date. Full-text mode ranks by relevance and also
    accepts title substring matches.

    Answers 404 when nothing matched; the keyword is then recorded for
    curation and a curated suggestion is returned when one exists.
    """
    try:
        logger.info(f"Search request: keyword='{keyword}', page={page}, fulltext={fulltext}")

        # Offload blocking store calls to thread pool
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(
            executor,
            lambda: engine.search(keyword=keyword, page=page, fulltext=fulltext)
        )

    except Exception as e:
        statement = e.label if isinstance(e, StoreExecutionError) else "n/a"
        logger.error(
            f"[search-route] Search process failed: keyword='{keyword}', page={page}, "
            f"fulltext={fulltext}, statement={statement}: {e}",
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Search process failed"}
        )

    status_code, body = assemble_response(result)

    logger.info(
        f"Search answered {status_code}: {body['totalArticles']} total, "
        f"{len(body['articles'])} on page {page}"
    )

    # rank is only part of the article shape in full-text mode
    exclude = None if fulltext else {'articles': {'__all__': {'rank'}}}
    return JSONResponse(
        status_code=status_code,
        content=SearchResponse(**body).model_dump(exclude=exclude)
    )


# ============================================================================
# Health Check Endpoint
# ============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(database: Database = Depends(get_database)):
    """
    Health check endpoint.

    Returns service status and basic metrics.
    """
    uptime = (datetime.now() - service_start_time).total_seconds()

    db_connected = database.ping() if database is not None else False
    status = "healthy" if db_connected else "degraded"

    return {
        "status": status,
        "database_connected": db_connected,
        "uptime_seconds": int(uptime)
    }
