import json
import logging

import click

from podfeed.config import get_settings
from podfeed.errors import FeedError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def _load(ctx: click.Context, url: str | None):
    from podfeed.core.mapper import load_feed

    settings = ctx.obj["settings"]
    try:
        return load_feed(settings, url=url)
    except (FeedError, ValueError) as e:
        click.echo(f"[FAIL] {e}", err=True)
        ctx.exit(1)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """podfeed - Podcast RSS feed normalizer and JSON API"""
    ctx.ensure_object(dict)
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    ctx.obj["settings"] = settings


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: settings.host).")
@click.option("--port", type=int, default=None, help="Port (default: settings.port).")
@click.option("--debug", is_flag=True, default=False, help="Enable Flask debug mode.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, debug: bool) -> None:
    """Run the JSON API server."""
    from podfeed.web.app import create_app

    settings = ctx.obj["settings"]
    if not settings.feed_configured:
        click.echo("Warning: RSS_FEED_URL is not set; API calls will fail.", err=True)
    app = create_app(settings=settings)
    app.run(host=host or settings.host, port=port or settings.port, debug=debug)


@cli.command()
@click.option("--url", type=str, default=None, help="Feed URL (default: RSS_FEED_URL).")
@click.option("--limit", type=click.IntRange(min=1), default=10, help="Max episodes to show.")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Episodes to skip.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the JSON contract.")
@click.pass_context
def episodes(
    ctx: click.Context, url: str | None, limit: int, offset: int, as_json: bool,
) -> None:
    """Fetch the feed and list episodes, newest first."""
    feed = _load(ctx, url)
    page = feed.episodes[offset:offset + limit]

    if as_json:
        click.echo(json.dumps([ep.to_json() for ep in page], indent=2, ensure_ascii=False))
        return

    click.echo(f"=== {feed.podcast.title}: {len(feed.episodes)} episodes ===")
    if not page:
        click.echo("  (none)")
    for ep in page:
        number = f"#{ep.episode_number}" if ep.episode_number else "-"
        click.echo(
            f"  {ep.publish_date.strftime('%Y-%m-%d')}  {number:<6} "
            f"{ep.duration:>8}  {ep.title[:60]}"
        )


@cli.command()
@click.option("--url", type=str, default=None, help="Feed URL (default: RSS_FEED_URL).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the JSON contract.")
@click.pass_context
def info(ctx: click.Context, url: str | None, as_json: bool) -> None:
    """Fetch the feed and show podcast metadata."""
    podcast = _load(ctx, url).podcast

    if as_json:
        click.echo(json.dumps(podcast.to_json(), indent=2, ensure_ascii=False))
        return

    click.echo(f"=== {podcast.title} ===")
    click.echo(f"  Author:     {podcast.author}")
    click.echo(f"  Language:   {podcast.language}")
    click.echo(f"  Type:       {podcast.type}")
    click.echo(f"  Explicit:   {'yes' if podcast.explicit else 'no'}")
    click.echo(f"  Categories: {', '.join(podcast.categories) or '-'}")
    click.echo(f"  Updated:    {podcast.last_build_date.isoformat()}")
    if podcast.email:
        click.echo(f"  Email:      {podcast.email}")
    if podcast.image_url:
        click.echo(f"  Image:      {podcast.image_url}")
