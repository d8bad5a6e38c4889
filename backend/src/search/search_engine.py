"""
Core article search: counting, ranked pagination, suggestions and miss tracking.
"""

import math
from typing import List, Dict, Optional, Any, Tuple
from dataclasses import dataclass, field
from datetime import datetime
import logging

from .query_parser import QueryParser, SearchQuery, SearchMode
from .statements import StatementBuilder
from .keyword_tracker import KeywordTracker
from ..ingestion.database import Database

logger = logging.getLogger('search')


@dataclass
class SearchResultPage:
    """Result of one search request, before it is shaped for the API."""
    query: SearchQuery
    total_count: int
    articles: List[Dict[str, Any]] = field(default_factory=list)
    suggested_keyword: Optional[str] = None
    miss_tracked: bool = False

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.query.page_size)

    @property
    def success(self) -> bool:
        return self.total_count > 0


class SearchEngine:
    """
    Keyword search over the articles table.

    Features:
    - Substring search (title or content contains the keyword)
    - Ranked full-text search (FTS5 relevance, falling back to title substring)
    - Window-function pagination over the ranked match set
    - Curated keyword suggestions
    - Tracking of keywords that found nothing

    The database handle is injected; the engine neither opens nor closes it.
    """

    def __init__(
        self,
        database: Database,
        query_parser: QueryParser = None,
        statement_builder: StatementBuilder = None,
        keyword_tracker: KeywordTracker = None
    ):
        """
        Initialize search engine.

        Args:
            database: Initialized database handle
            query_parser: Parser for request values (default page size from config)
            statement_builder: Builder for count/page statements
            keyword_tracker: Suggestion lookup and miss tracking
        """
        self.db = database
        self.query_parser = query_parser or QueryParser()
        self.statement_builder = statement_builder or StatementBuilder()
        self.keyword_tracker = keyword_tracker or KeywordTracker(database)

    def count_articles(self, query: SearchQuery) -> int:
        """
        Count every article matching the query (not just one page).

        Uses the same predicate as fetch_page for the query's mode.
        """
        statement = self.statement_builder.count(query)
        rows = self.db.execute_query(statement.sql, statement.params, label=statement.label)
        return rows[0]['total_count'] if rows else 0

    def fetch_page(self, query: SearchQuery) -> List[Dict[str, Any]]:
        """
        Fetch the requested page of ranked matches.

        A page past the end of the match set yields an empty list.

        Returns:
            Article dictionaries with id, title, timestamp and, in ranked
            full-text mode, a relevance rank
        """
        statement = self.statement_builder.page(query)
        rows = self.db.execute_query(statement.sql, statement.params, label=statement.label)
        return [self._format_article(row, query.mode) for row in rows]

    def search(self, keyword: str, page: int = 1, fulltext: bool = False) -> SearchResultPage:
        """
        Execute a keyword search.

        Args:
            keyword: Raw keyword from the request
            page: 1-based page number
            fulltext: True for ranked full-text mode, False for substring mode

        Returns:
            SearchResultPage with count, page of articles and suggestion

        Raises:
            StoreExecutionError: If any statement fails; no partial result is returned
        """
        query = self.query_parser.parse(keyword, page=page, fulltext=fulltext)

        logger.info(
            f"Executing search: keyword='{query.keyword}', "
            f"mode={query.mode.value}, page={query.page}"
        )

        start_time = datetime.now()

        total_count = self.count_articles(query)
        articles = self.fetch_page(query)
        suggested_keyword = self.keyword_tracker.resolve_suggestion(query.keyword)

        miss_tracked = False
        if total_count == 0:
            miss_tracked = self.keyword_tracker.track_miss(query.keyword)

        query_time_ms = int((datetime.now() - start_time).total_seconds() * 1000)

        logger.info(
            f"Search completed: {total_count} total articles, "
            f"{len(articles)} returned for page {query.page}, {query_time_ms}ms"
        )

        return SearchResultPage(
            query=query,
            total_count=total_count,
            articles=articles,
            suggested_keyword=suggested_keyword,
            miss_tracked=miss_tracked
        )

    @staticmethod
    def _format_article(row, mode: SearchMode) -> Dict[str, Any]:
        """Convert a page row into the article shape returned to callers."""
        article = {
            'id': row['id'],
            'title': row['title'],
            'timestamp': str(row['published_date']),
        }
        if mode is SearchMode.RANKED_FULL_TEXT:
            # Title-only matches carry no relevance score
            relevance = row['relevance']
            article['rank'] = float(relevance) if relevance is not None else 0.0
        return article


def assemble_response(result: SearchResultPage) -> Tuple[int, Dict[str, Any]]:
    """
    Shape a SearchResultPage into the API body and pick the status code.

    A search with no matching articles answers 404, not 200 with an empty
    list; clients rely on that status.

    Returns:
        (status_code, body)
    """
    body = {
        'success': result.success,
        'totalArticles': result.total_count,
        'articles': result.articles,
        'pagination': {
            'currentPage': result.query.page,
            'totalPages': result.total_pages,
            'pageSize': result.query.page_size,
        },
        'suggestedKeyword': result.suggested_keyword,
    }
    return (200 if result.success else 404), body
