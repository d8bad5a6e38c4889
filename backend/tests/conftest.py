"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.ingestion.article_storage import ArticleStorage
from src.ingestion.database import init_database
from src.search.search_engine import SearchEngine


# ============================================================
# Article Fixtures
# ============================================================


def make_articles(count, title, start_id=1, content="", day_offset=0):
    """Articles with increasing publication dates (later id = newer)."""
    return [
        {
            "id": start_id + i,
            "title": f"{title} {i + 1}",
            "content": content,
            "published_date": f"2024-{(i + day_offset) // 28 + 1:02d}-{(i + day_offset) % 28 + 1:02d} 10:00:00",
        }
        for i in range(count)
    ]


FILLER_ARTICLES = make_articles(
    10,
    "Refinery outage report",
    start_id=500,
    content="Crude throughput fell after maintenance at several units.",
)


@pytest.fixture
def db_path(tmp_path):
    """Path for a fresh SQLite database."""
    return str(tmp_path / "articles.db")


@pytest.fixture
def database(db_path):
    """Initialized, empty database."""
    db = init_database(db_path)
    yield db
    db.close()


@pytest.fixture
def storage(database):
    return ArticleStorage(database)


@pytest.fixture
def polymer_database(database, storage):
    """25 articles with 'Polymer' in the title plus unrelated filler."""
    storage.save_articles_batch(make_articles(25, "Polymer market update"))
    storage.save_articles_batch(FILLER_ARTICLES)
    return database


@pytest.fixture
def engine(polymer_database):
    return SearchEngine(polymer_database)


# ============================================================
# API Fixtures
# ============================================================


@pytest.fixture
def client(db_path):
    """TestClient over a seeded database; runs the app lifespan."""
    db = init_database(db_path)
    storage = ArticleStorage(db)
    storage.save_articles_batch(make_articles(25, "Polymer market update"))
    storage.save_articles_batch(FILLER_ARTICLES)
    db.close()

    app = create_app(db_path)
    with TestClient(app) as test_client:
        yield test_client
