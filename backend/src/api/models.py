"""
Pydantic models for API responses.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


# ============================================================================
# Search Models
# ============================================================================

class ArticleResult(BaseModel):
    """Individual search result."""

    id: int = Field(..., description="Article ID")
    title: str = Field(..., description="Article title")
    timestamp: str = Field(..., description="Publication date")
    rank: Optional[float] = Field(None, description="Relevance rank (ranked full-text mode only)")


class Pagination(BaseModel):
    """Pagination metadata."""

    currentPage: int = Field(..., description="Requested page number")
    totalPages: int = Field(..., description="Number of pages in the full result set")
    pageSize: int = Field(..., description="Articles per page")


class SearchResponse(BaseModel):
    """Search response."""

    success: bool = Field(..., description="True when at least one article matched")
    totalArticles: int = Field(..., description="Total matching articles")
    articles: List[ArticleResult] = Field(..., description="Articles on the requested page")
    pagination: Pagination = Field(..., description="Pagination metadata")
    suggestedKeyword: Optional[str] = Field(None, description="Curated alternative keyword")


class SearchErrorResponse(BaseModel):
    """Failed search or rejected request."""

    success: bool = Field(False, description="Always false")
    message: str = Field(..., description="Error message")


# ============================================================================
# Health Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    database_connected: bool = Field(..., description="Database connection status")
    uptime_seconds: Optional[int] = Field(None, description="Service uptime in seconds")
