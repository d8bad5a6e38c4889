"""
Query parsing for article keyword search.

Turns the raw request values (keyword, page, full-text flag) into a
SearchQuery:
- the keyword is normalized by removing markup-sensitive characters
- the full-text flag selects the match strategy (substring or ranked)
- the bound values used by the statements (LIKE pattern, FTS5 expression,
  window offset) are derived here, never spliced into SQL text
"""

import re
from enum import Enum
from typing import List
from dataclasses import dataclass
import logging

from config.search_config import SEARCH_CONFIG

logger = logging.getLogger(__name__)

PAGE_SIZE = SEARCH_CONFIG['page_size']

_STRIPPED = re.escape(SEARCH_CONFIG['stripped_characters'])
_STRIPPED_RUN = re.compile(rf'(\s*)[{_STRIPPED}](?:\s*[{_STRIPPED}])*(\s*)')
_WORD_PATTERN = re.compile(r'[^\W_]+', re.UNICODE)  # same split as the unicode61 tokenizer
_LIKE_SPECIALS = re.compile(r'([\\%_])')

# Window offsets must stay bindable as a signed 64-bit SQLite INTEGER
MAX_OFFSET = 2 ** 62


class SearchMode(str, Enum):
    """Match-and-rank strategy for a search request."""
    SUBSTRING = "substring"
    RANKED_FULL_TEXT = "ranked_full_text"


def normalize_keyword(keyword: str) -> str:
    """
    Remove markup-sensitive characters from a user keyword.

    The characters & < > " ' are dropped. Where a dropped run sat between
    two gaps only the leading gap is kept; other whitespace is left as typed.

    >>> normalize_keyword("O'Brien & Sons")
    'OBrien Sons'
    """
    if not keyword:
        return ""
    return _STRIPPED_RUN.sub(lambda m: m.group(1) or m.group(2), keyword)


def select_mode(fulltext: bool) -> SearchMode:
    """Map the caller's full-text flag to a search mode."""
    return SearchMode.RANKED_FULL_TEXT if fulltext else SearchMode.SUBSTRING


@dataclass
class SearchQuery:
    """Per-request search parameters."""
    raw_keyword: str
    keyword: str          # normalized
    mode: SearchMode
    page: int = 1
    page_size: int = PAGE_SIZE

    @property
    def offset(self) -> int:
        """Number of ranked rows that precede the requested page."""
        return min((self.page - 1) * self.page_size, MAX_OFFSET)

    @property
    def like_pattern(self) -> str:
        """Case-insensitive substring pattern (escape character is a backslash)."""
        escaped = _LIKE_SPECIALS.sub(r'\\\1', self.keyword)
        return f"%{escaped}%"

    @property
    def terms(self) -> List[str]:
        """Word tokens of the normalized keyword."""
        return _WORD_PATTERN.findall(self.keyword)

    @property
    def fts_expression(self) -> str:
        """
        FTS5 MATCH expression: any term may match, each term quoted so
        user text is never read as FTS5 query syntax.
        """
        return " OR ".join(f'"{term}"' for term in self.terms)


class QueryParser:
    """
    Build SearchQuery objects from request values.

    Validation of the raw values (non-empty keyword, page >= 1) happens at the
    request boundary; the parser re-checks the page so the core never computes
    a negative window.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        """Initialize query parser."""
        self.page_size = page_size

    def parse(self, keyword: str, page: int = 1, fulltext: bool = False) -> SearchQuery:
        """
        Parse request values into a SearchQuery.

        Args:
            keyword: Raw keyword from the user
            page: 1-based page number
            fulltext: True selects ranked full-text mode

        Returns:
            SearchQuery with normalized keyword and selected mode

        Raises:
            ValueError: If page is not a positive integer
        """
        if page < 1:
            raise ValueError(f"Page must be a positive integer, got {page}")

        query = SearchQuery(
            raw_keyword=keyword,
            keyword=normalize_keyword(keyword),
            mode=select_mode(fulltext),
            page=page,
            page_size=self.page_size
        )

        logger.debug(f"Parsed query: keyword={query.keyword!r}, mode={query.mode.value}, page={query.page}")
        return query
