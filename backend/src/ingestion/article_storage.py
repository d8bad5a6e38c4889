"""
Article storage module for loading articles into the database.
"""

import json
from typing import List, Dict, Optional
from datetime import datetime
from pathlib import Path
import logging

from .database import Database, StoreExecutionError

logger = logging.getLogger(__name__)


class ArticleStorage:
    """Manages storing and reading articles in the SQLite database."""

    def __init__(self, database: Database):
        """
        Initialize article storage.

        Args:
            database: Initialized database handle
        """
        self.db = database

    def save_article(self, article: Dict) -> Optional[int]:
        """
        Save a single article to the database.

        Args:
            article: Dictionary with title, content and published_date.
                An explicit id is honoured when present.

        Returns:
            Article ID if saved, None on error
        """
        published_date = article.get('published_date') or datetime.utcnow()
        if isinstance(published_date, datetime):
            published_date = published_date.isoformat(sep=' ', timespec='seconds')

        params = {
            'id': article.get('id'),
            'title': article['title'],
            'content': article.get('content', ''),
            'published_date': published_date,
        }

        try:
            article_id = self.db.execute_insert(
                """
                INSERT INTO articles (id, title, content, published_date)
                VALUES (:id, :title, :content, :published_date)
                """,
                params,
                label="save_article"
            )
            logger.debug(f"Saved article: {article['title'][:50]} (ID: {article_id})")
            return article_id

        except StoreExecutionError as e:
            logger.warning(f"Could not save article {article['title'][:50]!r}: {e}")
            return None

    def save_articles_batch(self, articles: List[Dict]) -> Dict[str, int]:
        """
        Save multiple articles in a batch.

        Returns:
            Dictionary with statistics (saved, errors)
        """
        stats = {
            'saved': 0,
            'errors': 0
        }

        for article in articles:
            if self.save_article(article) is not None:
                stats['saved'] += 1
            else:
                stats['errors'] += 1

        logger.info(f"Batch save complete - Saved: {stats['saved']}, Errors: {stats['errors']}")
        return stats

    def get_article_count(self) -> int:
        """Get count of articles in database."""
        rows = self.db.execute_query("SELECT COUNT(*) AS count FROM articles", label="article_count")
        return rows[0]['count']

    def get_recent_articles(self, limit: int = 10) -> List[Dict]:
        """
        Get most recent articles.

        Args:
            limit: Maximum number of articles to return

        Returns:
            List of article dictionaries
        """
        rows = self.db.execute_query(
            """
            SELECT id, title, published_date
            FROM articles
            ORDER BY published_date DESC
            LIMIT :limit
            """,
            {'limit': limit},
            label="recent_articles"
        )
        return [
            {
                'id': row['id'],
                'title': row['title'],
                'published_date': row['published_date']
            }
            for row in rows
        ]


def load_articles_file(path: str) -> List[Dict]:
    """
    Read articles from a JSON array or JSON-lines file.

    Args:
        path: File to read

    Returns:
        List of article dictionaries
    """
    text = Path(path).read_text(encoding='utf-8').strip()
    if not text:
        return []

    if text.startswith('['):
        return json.loads(text)

    return [json.loads(line) for line in text.splitlines() if line.strip()]
