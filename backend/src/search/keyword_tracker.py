"""
Suggested-keyword tracking for searches.

This module handles:
- Resolving a curated "did you mean" keyword for a normalized query
- Recording keywords whose search returned no articles, so curators can
  attach a suggestion later
- Curator operations over the suggestion table (listing, setting suggestions)
"""

from typing import Dict, List, Optional
import logging

from ..ingestion.database import Database
from .query_parser import normalize_keyword

logger = logging.getLogger("search")


RESOLVE_SUGGESTION = """
    SELECT suggested_keyword
    FROM search_keywords
    WHERE user_keyword = :keyword
      AND display = 1
      AND suggested_keyword != ''
    LIMIT 1
"""

# One statement, so the existence check and the insert cannot interleave with
# another writer. OR IGNORE covers the unique index on user_keyword.
TRACK_MISS = """
    INSERT OR IGNORE INTO search_keywords (id, user_keyword, suggested_keyword, display)
    SELECT
        (SELECT COALESCE(MAX(id), 0) + 1 FROM search_keywords),
        :keyword,
        '',
        0
    WHERE NOT EXISTS (
        SELECT 1 FROM search_keywords WHERE user_keyword = :keyword
    )
"""

SET_SUGGESTION = """
    INSERT INTO search_keywords (id, user_keyword, suggested_keyword, display)
    VALUES (
        (SELECT COALESCE(MAX(id), 0) + 1 FROM search_keywords),
        :user_keyword,
        :suggested_keyword,
        :display
    )
    ON CONFLICT(user_keyword) DO UPDATE SET
        suggested_keyword = excluded.suggested_keyword,
        display = excluded.display
"""


class KeywordTracker:
    """
    Reads and seeds the search_keywords table.

    The search path only ever resolves suggestions and inserts misses;
    list_keywords and set_suggestion are curator tools.
    """

    def __init__(self, database: Database):
        """
        Initialize keyword tracker.

        Args:
            database: Database handle shared with the search engine
        """
        self.db = database

    def resolve_suggestion(self, keyword: str) -> Optional[str]:
        """
        Look up the displayable suggestion for a normalized keyword.

        Args:
            keyword: Normalized keyword (no wildcard markers)

        Returns:
            Suggested keyword, or None when no displayable row exists
        """
        rows = self.db.execute_query(
            RESOLVE_SUGGESTION,
            {'keyword': keyword},
            label="suggestion"
        )
        if not rows:
            return None
        return rows[0]['suggested_keyword']

    def track_miss(self, keyword: str) -> bool:
        """
        Record a keyword that returned no articles, unless already recorded.

        Args:
            keyword: Normalized keyword

        Returns:
            True if a new row was inserted
        """
        inserted = self.db.execute_write(
            TRACK_MISS,
            {'keyword': keyword},
            label="track_miss"
        ) > 0

        if inserted:
            logger.info(f"Tracked zero-result keyword: {keyword!r}")
        else:
            logger.debug(f"Zero-result keyword already tracked: {keyword!r}")

        return inserted

    def list_keywords(self, pending_only: bool = False) -> List[Dict]:
        """
        List tracked keywords.

        Args:
            pending_only: Only rows that still have no suggestion

        Returns:
            List of keyword dictionaries ordered by id
        """
        statement = "SELECT id, user_keyword, suggested_keyword, display FROM search_keywords"
        if pending_only:
            statement += " WHERE suggested_keyword = ''"
        statement += " ORDER BY id"

        rows = self.db.execute_query(statement, label="list_keywords")
        return [
            {
                'id': row['id'],
                'user_keyword': row['user_keyword'],
                'suggested_keyword': row['suggested_keyword'],
                'display': bool(row['display'])
            }
            for row in rows
        ]

    def set_suggestion(self, user_keyword: str, suggested_keyword: str, display: bool = True) -> str:
        """
        Attach a suggestion to a user keyword, creating the row if needed.

        Returns:
            The normalized user keyword the suggestion was stored under
        """
        keyword = normalize_keyword(user_keyword)
        self.db.execute_write(
            SET_SUGGESTION,
            {
                'user_keyword': keyword,
                'suggested_keyword': suggested_keyword,
                'display': 1 if display else 0
            },
            label="set_suggestion"
        )
        logger.info(f"Suggestion for {keyword!r} set to {suggested_keyword!r} (display={display})")
        return keyword

    def count_keywords(self) -> Dict[str, int]:
        """Totals for tracked and still-pending keywords."""
        rows = self.db.execute_query(
            """
            SELECT
                COUNT(*) AS total,
                COALESCE(SUM(CASE WHEN suggested_keyword = '' THEN 1 ELSE 0 END), 0) AS pending
            FROM search_keywords
            """,
            label="count_keywords"
        )
        return {'total': rows[0]['total'], 'pending': rows[0]['pending']}
