"""Tests for the HTTP boundary: status codes, response shape, error mapping."""

import sqlite3

from fastapi.testclient import TestClient

from src.api.main import create_app
from src.ingestion.database import StoreExecutionError

SEARCH_URL = "/api/v1/search"


class TestSearchEndpoint:
    def test_scenario_a(self, client):
        response = client.get(SEARCH_URL, params={"keyword": "polymer", "page": 1})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["totalArticles"] == 25
        assert len(body["articles"]) == 20
        assert body["pagination"] == {"currentPage": 1, "totalPages": 2, "pageSize": 20}
        assert body["suggestedKeyword"] is None

    def test_substring_articles_have_no_rank(self, client):
        body = client.get(SEARCH_URL, params={"keyword": "polymer"}).json()
        assert set(body["articles"][0]) == {"id", "title", "timestamp"}
        assert body["articles"][0]["title"] == "Polymer market update 25"

    def test_fulltext_articles_have_rank(self, client):
        response = client.get(SEARCH_URL, params={"keyword": "polymer", "fulltext": "true"})
        assert response.status_code == 200
        article = response.json()["articles"][0]
        assert set(article) == {"id", "title", "timestamp", "rank"}
        assert isinstance(article["rank"], float)

    def test_page_defaults_to_one(self, client):
        body = client.get(SEARCH_URL, params={"keyword": "polymer"}).json()
        assert body["pagination"]["currentPage"] == 1

    def test_page_beyond_last(self, client):
        response = client.get(SEARCH_URL, params={"keyword": "polymer", "page": 99})
        assert response.status_code == 200
        body = response.json()
        assert body["articles"] == []
        assert body["totalArticles"] == 25
        assert body["pagination"]["currentPage"] == 99

    def test_huge_page_is_empty_not_error(self, client):
        response = client.get(SEARCH_URL, params={"keyword": "polymer", "page": 10 ** 18})
        assert response.status_code == 200
        body = response.json()
        assert body["articles"] == []
        assert body["totalArticles"] == 25
        assert body["pagination"]["currentPage"] == 10 ** 18

    def test_scenario_b_zero_results(self, client):
        response = client.get(SEARCH_URL, params={"keyword": "zzzznomatch"})
        assert response.status_code == 404
        body = response.json()
        assert body == {
            "success": False,
            "totalArticles": 0,
            "articles": [],
            "pagination": {"currentPage": 1, "totalPages": 0, "pageSize": 20},
            "suggestedKeyword": None,
        }
        keywords = client.app.state.search_engine.keyword_tracker.list_keywords()
        assert keywords == [{"id": 1, "user_keyword": "zzzznomatch", "suggested_keyword": "", "display": False}]

    def test_scenario_c_repeated_zero_results(self, client):
        client.get(SEARCH_URL, params={"keyword": "zzzznomatch"})
        client.get(SEARCH_URL, params={"keyword": "zzzznomatch"})
        keywords = client.app.state.search_engine.keyword_tracker.list_keywords()
        assert len(keywords) == 1

    def test_scenario_d_suggestion(self, client):
        client.app.state.search_engine.keyword_tracker.set_suggestion("polimer", "polymer")
        response = client.get(SEARCH_URL, params={"keyword": "polimer"})
        assert response.status_code == 404
        assert response.json()["suggestedKeyword"] == "polymer"


class TestValidation:
    def test_missing_keyword(self, client):
        response = client.get(SEARCH_URL)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "keyword" in body["message"]

    def test_empty_keyword(self, client):
        assert client.get(SEARCH_URL, params={"keyword": ""}).status_code == 400

    def test_non_positive_page(self, client):
        for page in (0, -3):
            response = client.get(SEARCH_URL, params={"keyword": "polymer", "page": page})
            assert response.status_code == 400

    def test_non_numeric_page(self, client):
        assert client.get(SEARCH_URL, params={"keyword": "polymer", "page": "two"}).status_code == 400

    def test_non_boolean_flag(self, client):
        assert client.get(SEARCH_URL, params={"keyword": "polymer", "fulltext": "maybe"}).status_code == 400

    def test_rejected_request_not_tracked(self, client):
        client.get(SEARCH_URL, params={"keyword": "zzzz", "page": 0})
        assert client.app.state.search_engine.keyword_tracker.list_keywords() == []


class TestFailures:
    def test_store_failure_is_500_without_detail(self, client, monkeypatch):
        def failing_search(**kwargs):
            raise StoreExecutionError("page", sqlite3.OperationalError("disk I/O error"))

        monkeypatch.setattr(client.app.state.search_engine, "search", failing_search)

        response = client.get(SEARCH_URL, params={"keyword": "polymer"})
        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Search process failed"}

    def test_unexpected_failure_is_500(self, client, monkeypatch):
        def failing_search(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(client.app.state.search_engine, "search", failing_search)

        response = client.get(SEARCH_URL, params={"keyword": "polymer"})
        assert response.status_code == 500
        assert "boom" not in response.text

    def test_uninitialized_engine_is_503(self, db_path):
        app = create_app(db_path)
        # No context manager: lifespan never runs
        response = TestClient(app).get(SEARCH_URL, params={"keyword": "polymer"})
        assert response.status_code == 503


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database_connected"] is True

    def test_root(self, client):
        body = client.get("/").json()
        assert body["endpoints"]["search"] == SEARCH_URL

    def test_unknown_path(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["success"] is False
