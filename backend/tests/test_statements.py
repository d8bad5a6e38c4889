"""Tests for the count/page statement builder."""

import pytest

from src.search.query_parser import QueryParser
from src.search.statements import (
    MatchStrategy,
    RankedFullTextStrategy,
    StatementBuilder,
    SubstringStrategy,
)


def parse(keyword, page=1, fulltext=False):
    return QueryParser().parse(keyword, page=page, fulltext=fulltext)


class TestStrategySelection:
    def test_substring_mode_uses_substring_strategy(self):
        builder = StatementBuilder()
        assert isinstance(builder.strategy_for(parse("x")), SubstringStrategy)

    def test_fulltext_mode_uses_ranked_strategy(self):
        builder = StatementBuilder()
        assert isinstance(builder.strategy_for(parse("x", fulltext=True)), RankedFullTextStrategy)


class TestBoundParameters:
    KEYWORD = "robert'); DROP TABLE articles;--"

    def test_user_text_never_in_count_sql(self):
        for fulltext in (False, True):
            statement = StatementBuilder().count(parse(self.KEYWORD, fulltext=fulltext))
            assert "robert" not in statement.sql
            assert "DROP" not in statement.sql

    def test_user_text_never_in_page_sql(self):
        for fulltext in (False, True):
            statement = StatementBuilder().page(parse(self.KEYWORD, fulltext=fulltext))
            assert "robert" not in statement.sql
            assert "DROP" not in statement.sql

    def test_substring_params(self):
        statement = StatementBuilder().page(parse("polymer", page=2))
        assert statement.params == {"pattern": "%polymer%", "offset": 20, "page_size": 20}
        assert statement.label == "page"

    def test_ranked_params(self):
        statement = StatementBuilder().count(parse("polymer prices", fulltext=True))
        assert statement.params["pattern"] == "%polymer prices%"
        assert statement.params["fts_query"] == '"polymer" OR "prices"'
        assert "title_weight" in statement.params
        assert statement.label == "count"


class TestFragments:
    def test_count_and_page_share_predicate(self):
        builder = StatementBuilder()
        for fulltext in (False, True):
            query = parse("polymer", fulltext=fulltext)
            predicate = builder.strategy_for(query).predicate(query)
            assert predicate in builder.count(query).sql
            assert predicate in builder.page(query).sql

    def test_substring_orders_by_recency(self):
        sql = StatementBuilder().page(parse("polymer")).sql
        assert "ORDER BY a.published_date DESC" in sql
        assert "ROW_NUMBER() OVER" in sql

    def test_ranked_orders_by_relevance(self):
        sql = StatementBuilder().page(parse("polymer", fulltext=True)).sql
        assert "articles_fts MATCH :fts_query" in sql
        assert "ORDER BY fts.score DESC" in sql

    def test_ranked_without_terms_falls_back_to_title_match(self):
        query = parse("%%", fulltext=True)
        statement = StatementBuilder().count(query)
        assert "MATCH" not in statement.sql
        assert "fts_query" not in statement.params


class TestMatchStrategyInterface:
    def test_incomplete_strategy_cannot_be_created(self):
        class TitleOnlyStrategy(MatchStrategy):
            def source(self, query):
                return "articles AS a"

        with pytest.raises(TypeError):
            TitleOnlyStrategy()

    def test_huge_page_binds_capped_offset(self):
        statement = StatementBuilder().page(parse("polymer", page=10 ** 18))
        assert statement.params['offset'] + statement.params['page_size'] < 2 ** 63
