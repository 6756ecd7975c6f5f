"""CLI commands for the News Service."""

from __future__ import annotations

import asyncio
import json
import logging
import os

import click

from news_service.errors import NewsServiceError
from news_service.formatters import extract_country_code, format_articles, truncate_text
from news_service.models import Article, QueryParams
from news_service.service import NewsQueryService


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """News Service - Search news and list top headlines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs full request URLs, which carry the API key.
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _search(params: QueryParams) -> list[Article]:
    service = NewsQueryService.from_env()
    try:
        return await service.search_news(params)
    finally:
        await service.close()


async def _headlines(params: QueryParams) -> list[Article]:
    service = NewsQueryService.from_env()
    try:
        return await service.get_top_headlines(params)
    finally:
        await service.close()


async def _clear() -> None:
    service = NewsQueryService.from_env()
    try:
        await service.clear_cache()
    finally:
        await service.close()


def _resolve_country(value: str | None) -> str | None:
    """Accept a two-letter code or a country name like 'United Kingdom'."""
    if value is None:
        return None
    code = extract_country_code(value)
    if code is None and len(value) == 2 and value.isalpha():
        code = value.lower()
    if code is None:
        raise click.BadParameter(f"Unrecognized country: {value}", param_hint="--country")
    return code


def _print_articles(articles: list[Article], json_output: bool, empty_message: str) -> None:
    if json_output:
        click.echo(json.dumps([a.to_dict() for a in articles], indent=2))
        return
    if not articles:
        click.echo(empty_message)
        return

    shortened = [
        Article(
            title=a.title,
            description=truncate_text(a.description) if a.description else None,
            url=a.url,
            published_at=a.published_at,
            source_name=a.source_name,
        )
        for a in articles
    ]
    click.echo(format_articles(shortened))


@cli.command()
@click.argument("query", required=False)
@click.option("--language", "-l", default=None, help="Language code (default: en)")
@click.option("--page-size", "-n", type=click.IntRange(1, 100), default=None, help="Articles to show (default: 5)")
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON")
def search(query: str | None, language: str | None, page_size: int | None, json_output: bool) -> None:
    """Search news articles.

    Example: news-service search "climate change"
    """
    params = QueryParams(query=query, language=language, page_size=page_size)
    try:
        articles = asyncio.run(_search(params))
    except NewsServiceError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    _print_articles(articles, json_output, "No news articles found for your query.")


@cli.command()
@click.option("--country", "-c", default=None, help="Country code or name (default: us)")
@click.option("--category", default=None, help="Category, e.g. business or technology")
@click.option("--page-size", "-n", type=click.IntRange(1, 100), default=None, help="Articles to show (default: 5)")
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON")
def headlines(
    country: str | None, category: str | None, page_size: int | None, json_output: bool
) -> None:
    """Show top headlines.

    Example: news-service headlines --country "united kingdom" --category business
    """
    params = QueryParams(
        country=_resolve_country(country), category=category, page_size=page_size
    )
    try:
        articles = asyncio.run(_headlines(params))
    except NewsServiceError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    _print_articles(articles, json_output, "No headlines found.")


@cli.command(name="clear-cache")
def clear_cache() -> None:
    """Clear the shared S3 news cache.

    Needs NEWS_CACHE_BUCKET; without it every run uses its own in-memory
    cache and there is nothing shared to clear.
    """
    if not os.environ.get("NEWS_CACHE_BUCKET"):
        click.echo("No shared cache configured (set NEWS_CACHE_BUCKET); nothing to clear.")
        return

    try:
        asyncio.run(_clear())
    except NewsServiceError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo("✓ News cache cleared")


if __name__ == "__main__":
    cli()
