"""
Statement builder for article keyword search.

Each search mode is a MatchStrategy that contributes fixed SQL fragments
(source tables, match predicate, rank column, window order). The builder
composes those fragments into the count and page templates; every value that
comes from the user is a bound named parameter.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
from dataclasses import dataclass, field
import logging

from .query_parser import SearchMode, SearchQuery
from config.search_config import SEARCH_CONFIG

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "ESCAPE '\\'"


@dataclass
class Statement:
    """SQL text plus its bound parameters."""
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)
    label: str = "query"


class MatchStrategy(ABC):
    """Fragments shared by the count and page statements of one mode."""

    mode: SearchMode

    @abstractmethod
    def source(self, query: SearchQuery) -> str:
        pass

    @abstractmethod
    def predicate(self, query: SearchQuery) -> str:
        pass

    def rank_column(self, query: SearchQuery) -> str:
        return "NULL"

    @abstractmethod
    def order_clause(self, query: SearchQuery) -> str:
        pass

    def params(self, query: SearchQuery) -> Dict[str, Any]:
        return {'pattern': query.like_pattern}


class SubstringStrategy(MatchStrategy):
    """Title or content contains the keyword; newest articles first."""

    mode = SearchMode.SUBSTRING

    def source(self, query):
        return "articles AS a"

    def predicate(self, query):
        return f"(a.title LIKE :pattern {LIKE_ESCAPE} OR a.content LIKE :pattern {LIKE_ESCAPE})"

    def order_clause(self, query):
        return "a.published_date DESC, a.id DESC"


class RankedFullTextStrategy(MatchStrategy):
    """
    FTS5 relevance over title+content, or a title substring match.

    Articles that only match through the title substring have no relevance
    score and rank after every scored article.
    """

    mode = SearchMode.RANKED_FULL_TEXT

    def __init__(self, title_weight: float = None, content_weight: float = None):
        self.title_weight = SEARCH_CONFIG['title_weight'] if title_weight is None else title_weight
        self.content_weight = SEARCH_CONFIG['content_weight'] if content_weight is None else content_weight

    def source(self, query):
        if not query.terms:
            return "articles AS a"
        # bm25() is lower-is-better, negate it so relevance sorts descending
        return """articles AS a
                LEFT OUTER JOIN (
                    SELECT rowid AS article_id,
                           -bm25(articles_fts, :title_weight, :content_weight) AS score
                    FROM articles_fts
                    WHERE articles_fts MATCH :fts_query
                ) AS fts ON fts.article_id = a.id"""

    def predicate(self, query):
        if not query.terms:
            return f"a.title LIKE :pattern {LIKE_ESCAPE}"
        return f"(fts.article_id IS NOT NULL OR a.title LIKE :pattern {LIKE_ESCAPE})"

    def rank_column(self, query):
        return "fts.score" if query.terms else "NULL"

    def order_clause(self, query):
        # Secondary key keeps equal-score pages stable
        return "fts.score DESC, a.id DESC" if query.terms else "a.id DESC"

    def params(self, query):
        params = super().params(query)
        if query.terms:
            params.update({
                'fts_query': query.fts_expression,
                'title_weight': self.title_weight,
                'content_weight': self.content_weight,
            })
        return params


COUNT_TEMPLATE = """
    SELECT COUNT(*) AS total_count
    FROM {source}
    WHERE {predicate}
"""

PAGE_TEMPLATE = """
    WITH ranked_articles AS (
        SELECT
            a.id,
            a.title,
            a.published_date,
            {rank_column} AS relevance,
            ROW_NUMBER() OVER (ORDER BY {order_clause}) AS row_num
        FROM {source}
        WHERE {predicate}
    )
    SELECT id, title, published_date, relevance
    FROM ranked_articles
    WHERE row_num BETWEEN :offset + 1 AND :offset + :page_size
    ORDER BY row_num
"""


class StatementBuilder:
    """Compose count and page statements for a SearchQuery."""

    def __init__(self, strategies: Dict[SearchMode, MatchStrategy] = None):
        self.strategies = strategies or {
            SearchMode.SUBSTRING: SubstringStrategy(),
            SearchMode.RANKED_FULL_TEXT: RankedFullTextStrategy(),
        }

    def strategy_for(self, query: SearchQuery) -> MatchStrategy:
        return self.strategies[query.mode]

    def count(self, query: SearchQuery) -> Statement:
        """Statement returning one row with total_count."""
        strategy = self.strategy_for(query)
        sql = COUNT_TEMPLATE.format(
            source=strategy.source(query),
            predicate=strategy.predicate(query)
        )
        return Statement(sql=sql, params=strategy.params(query), label="count")

    def page(self, query: SearchQuery) -> Statement:
        """Statement returning the requested window of ranked matches."""
        strategy = self.strategy_for(query)
        sql = PAGE_TEMPLATE.format(
            source=strategy.source(query),
            predicate=strategy.predicate(query),
            rank_column=strategy.rank_column(query),
            order_clause=strategy.order_clause(query)
        )
        params = strategy.params(query)
        params.update({'offset': query.offset, 'page_size': query.page_size})
        logger.debug(f"Built page statement: mode={query.mode.value}, rows {query.offset + 1}-{query.offset + query.page_size}")
        return Statement(sql=sql, params=params, label="page")
