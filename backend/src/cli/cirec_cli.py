"""
Cirec Search CLI - Operator command-line interface.

Commands:
- init-db: Create the database schema
- tables: List tables in the backing store
- import: Load articles from a JSON or JSON-lines file
- search: Run a keyword search (same pipeline as the API)
- keywords: Review zero-result keywords and attach suggestions
- stats: Display database statistics
- serve: Run the API server
"""

# Load environment variables before any other imports
# This ensures production paths are available to config modules
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists (for production paths)
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Standard library imports
import sys
import logging

# Third-party imports
import click
from rich.console import Console
from rich.table import Table

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from config.search_config import DATABASE_PATH, LOG_LEVEL, API_CONFIG
from src.ingestion.database import init_database
from src.ingestion.article_storage import ArticleStorage, load_articles_file
from src.search.keyword_tracker import KeywordTracker
from src.search.search_engine import SearchEngine

console = Console()

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def _fail(message: str, error: Exception):
    """Print an error (with traceback in debug) and exit non-zero."""
    console.print(f"[red]{message}: {error}[/red]\n")
    if LOG_LEVEL == "DEBUG":
        import traceback
        console.print(traceback.format_exc())
    sys.exit(1)


@click.group()
def cli():
    """Cirec Search CLI - Manage articles, keywords and search."""
    pass


# ============================================================================
# Database Commands
# ============================================================================

@cli.command()
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def init_db(db_path):
    """Initialize the database schema."""
    console.print("\n[bold cyan]Initializing Database[/bold cyan]\n")

    try:
        db = init_database(db_path)
        db.close()
        console.print(f"[green]✓[/green] Database initialized at: {db_path}")
        console.print("[green]✓[/green] Schema created successfully\n")
    except Exception as e:
        _fail("Error initializing database", e)


@cli.command()
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def tables(db_path):
    """List the tables available in the database."""
    try:
        with init_database(db_path) as db:
            names = db.list_tables()
    except Exception as e:
        _fail("Error fetching tables", e)

    table = Table(title="Available Tables")
    table.add_column("Table", style="cyan")
    for name in names:
        table.add_row(name)

    console.print(table)
    console.print()


@cli.command(name='import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def import_articles(path, db_path):
    """
    Import articles from a JSON array or JSON-lines file.

    Each article needs a title; content, published_date and id are optional.
    """
    console.print(f"\n[bold cyan]Importing articles from[/bold cyan] {path}\n")

    try:
        articles = load_articles_file(path)
        with init_database(db_path) as db:
            stats = ArticleStorage(db).save_articles_batch(articles)
    except Exception as e:
        _fail("Error importing articles", e)

    table = Table(title="Import Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Articles Read", str(len(articles)))
    table.add_row("Articles Saved", str(stats['saved']))
    table.add_row("Errors", str(stats['errors']))

    console.print(table)
    console.print()


# ============================================================================
# Search Commands
# ============================================================================

@cli.command()
@click.argument('keyword')
@click.option('--page', '-p', default=1, type=click.IntRange(min=1), help='Page number')
@click.option('--fulltext', '-f', is_flag=True, help='Use ranked full-text matching')
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def search(keyword, page, fulltext, db_path):
    """
    Search articles by keyword.

    Example usage:
        cirec_cli search polymer
        cirec_cli search "ethylene prices" --fulltext --page 2
    """
    console.print(f"\n[bold cyan]Searching for:[/bold cyan] '{keyword}'\n")

    try:
        with init_database(db_path) as db:
            result = SearchEngine(db).search(keyword=keyword, page=page, fulltext=fulltext)
    except Exception as e:
        _fail("Search error", e)

    console.print(
        f"[bold green]Found {result.total_count} articles[/bold green] "
        f"(page {result.query.page} of {result.total_pages})\n"
    )

    if result.suggested_keyword:
        console.print(f"Did you mean: [bold yellow]{result.suggested_keyword}[/bold yellow]\n")

    if not result.articles:
        if result.miss_tracked:
            console.print("[yellow]No results found. Keyword recorded for review.[/yellow]\n")
        else:
            console.print("[yellow]No results on this page.[/yellow]\n")
        return

    table = Table()
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Title", max_width=60)
    table.add_column("Date", style="blue")
    if fulltext:
        table.add_column("Rank", style="green", justify="right")

    for article in result.articles:
        row = [str(article['id']), article['title'], article['timestamp']]
        if fulltext:
            row.append(f"{article['rank']:.4f}")
        table.add_row(*row)

    console.print(table)
    console.print()


# ============================================================================
# Keyword Curation Commands
# ============================================================================

@cli.group()
def keywords():
    """Review zero-result keywords and curate suggestions."""
    pass


@keywords.command(name='list')
@click.option('--pending', is_flag=True, help='Only keywords without a suggestion')
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def keywords_list(pending, db_path):
    """List tracked keywords."""
    try:
        with init_database(db_path) as db:
            rows = KeywordTracker(db).list_keywords(pending_only=pending)
    except Exception as e:
        _fail("Error listing keywords", e)

    if not rows:
        console.print("\n[yellow]No keywords tracked[/yellow]\n")
        return

    table = Table(title="Pending Keywords" if pending else "Tracked Keywords")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("User Keyword", style="yellow")
    table.add_column("Suggestion", style="green")
    table.add_column("Display")

    for row in rows:
        table.add_row(
            str(row['id']),
            row['user_keyword'],
            row['suggested_keyword'] or "-",
            "yes" if row['display'] else "no"
        )

    console.print(table)
    console.print(f"\n[green]Total keywords: {len(rows)}[/green]\n")


@keywords.command(name='suggest')
@click.argument('user_keyword')
@click.argument('suggested_keyword')
@click.option('--display/--hidden', default=True, help='Whether the suggestion is shown to users')
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def keywords_suggest(user_keyword, suggested_keyword, display, db_path):
    """Attach a suggested keyword to a user keyword."""
    try:
        with init_database(db_path) as db:
            stored = KeywordTracker(db).set_suggestion(user_keyword, suggested_keyword, display=display)
    except Exception as e:
        _fail("Error saving suggestion", e)

    state = "shown" if display else "hidden"
    console.print(f"\n[green]✓[/green] '{stored}' -> '{suggested_keyword}' ({state})\n")


# ============================================================================
# Statistics Commands
# ============================================================================

@cli.command()
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
@click.option('--recent', default=5, type=int, help='Number of recent articles to show')
def stats(db_path, recent):
    """Display database statistics."""
    console.print("\n[bold cyan]Cirec Search Statistics[/bold cyan]\n")

    try:
        with init_database(db_path) as db:
            storage = ArticleStorage(db)
            total_articles = storage.get_article_count()
            recent_articles = storage.get_recent_articles(limit=recent)
            keyword_counts = KeywordTracker(db).count_keywords()
    except Exception as e:
        _fail("Error loading statistics", e)

    table = Table(title="Database Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total Articles", str(total_articles))
    table.add_row("Tracked Keywords", str(keyword_counts['total']))
    table.add_row("Pending Keywords", str(keyword_counts['pending']))
    console.print(table)

    if recent_articles:
        console.print("\n[bold]Recent Articles:[/bold]\n")

        recent_table = Table()
        recent_table.add_column("ID", style="cyan", justify="right")
        recent_table.add_column("Title", max_width=50)
        recent_table.add_column("Date", style="blue")

        for article in recent_articles:
            recent_table.add_row(
                str(article['id']),
                article['title'][:47] + "..." if len(article['title']) > 50 else article['title'],
                str(article['published_date'])
            )

        console.print(recent_table)

    console.print()


@cli.command()
@click.option('--host', default=API_CONFIG['host'], help='Bind address')
@click.option('--port', default=API_CONFIG['port'], type=int, help='Bind port')
def serve(host, port):
    """Run the search API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=host,
        port=port,
        reload=API_CONFIG['reload'],
        log_level=API_CONFIG['log_level']
    )


if __name__ == '__main__':
    cli()
