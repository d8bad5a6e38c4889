"""Tests for the operator CLI."""

import json

import pytest
from click.testing import CliRunner

from conftest import make_articles
from src.cli.cirec_cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def articles_file(tmp_path):
    path = tmp_path / "articles.jsonl"
    lines = [json.dumps(article) for article in make_articles(3, "PVC")]
    path.write_text("\n".join(lines), encoding="utf-8")
    return str(path)


@pytest.fixture
def seeded_db(runner, db_path, articles_file):
    result = runner.invoke(cli, ["import", articles_file, "--db-path", db_path])
    assert result.exit_code == 0, result.output
    return db_path


def test_init_db(runner, db_path):
    result = runner.invoke(cli, ["init-db", "--db-path", db_path])
    assert result.exit_code == 0
    assert "Schema created successfully" in result.output


def test_tables(runner, db_path):
    result = runner.invoke(cli, ["tables", "--db-path", db_path])
    assert result.exit_code == 0
    assert "search_keywords" in result.output


def test_import_reports_counts(runner, db_path, articles_file):
    result = runner.invoke(cli, ["import", articles_file, "--db-path", db_path])
    assert result.exit_code == 0
    assert "Articles Saved" in result.output


def test_import_json_array(runner, db_path, tmp_path):
    path = tmp_path / "articles.json"
    path.write_text(json.dumps(make_articles(2, "Resin")), encoding="utf-8")
    runner.invoke(cli, ["import", str(path), "--db-path", db_path])
    result = runner.invoke(cli, ["search", "resin", "--db-path", db_path])
    assert "Found 2 articles" in result.output


def test_search_hits(runner, seeded_db):
    result = runner.invoke(cli, ["search", "pvc", "--db-path", seeded_db])
    assert result.exit_code == 0
    assert "Found 3 articles" in result.output
    assert "page 1 of 1" in result.output


def test_search_fulltext(runner, seeded_db):
    result = runner.invoke(cli, ["search", "pvc", "--fulltext", "--db-path", seeded_db])
    assert result.exit_code == 0
    assert "Rank" in result.output


def test_search_rejects_page_zero(runner, seeded_db):
    result = runner.invoke(cli, ["search", "pvc", "--page", "0", "--db-path", seeded_db])
    assert result.exit_code != 0


def test_miss_then_curate(runner, seeded_db):
    result = runner.invoke(cli, ["search", "pcv", "--db-path", seeded_db])
    assert "Found 0 articles" in result.output
    assert "Keyword recorded for review" in result.output

    result = runner.invoke(cli, ["keywords", "list", "--pending", "--db-path", seeded_db])
    assert "pcv" in result.output

    result = runner.invoke(cli, ["keywords", "suggest", "pcv", "pvc", "--db-path", seeded_db])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["search", "pcv", "--db-path", seeded_db])
    assert "Did you mean: pvc" in result.output

    result = runner.invoke(cli, ["keywords", "list", "--pending", "--db-path", seeded_db])
    assert "No keywords tracked" in result.output


def test_stats(runner, seeded_db):
    result = runner.invoke(cli, ["stats", "--db-path", seeded_db])
    assert result.exit_code == 0
    assert "Total Articles" in result.output
    assert "Tracked Keywords" in result.output
