#!/usr/bin/env python3
"""
microCMS → Qiita Sync CLI

Usage:
    python sync.py                        # Run full sync
    python sync.py --force                # Update every previously synced article
    python sync.py --dry-run              # Preview decisions without publishing
    python sync.py sync --article-id ID   # Sync a single article
    python sync.py status                 # Show sync status
"""

import sys
import traceback
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from qiita_sync import __version__
from qiita_sync.config import Config
from qiita_sync.sync_engine import SyncEngine

console = Console()


@click.group(invoke_without_command=True)
@click.option("--force", is_flag=True, help="Update all synced articles regardless of changes")
@click.option("--dry-run", is_flag=True, help="Preview changes without publishing")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx, force: bool, dry_run: bool, debug: bool):
    """
    microCMS → Qiita Sync

    Publishes microCMS articles to Qiita as Markdown.
    """
    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["dry_run"] = dry_run
    ctx.obj["debug"] = debug

    # If no subcommand, run sync
    if ctx.invoked_subcommand is None:
        ctx.invoke(sync)


@cli.command()
@click.option("--article-id", default=None, help="Only process the article with this microCMS ID")
@click.option("--max-articles", type=click.IntRange(min=1), default=None, help="Maximum articles per run")
@click.pass_context
def sync(ctx, article_id: Optional[str] = None, max_articles: Optional[int] = None):
    """Run synchronization from microCMS to Qiita."""
    debug = ctx.obj.get("debug", False)

    try:
        config = Config.from_env()

        # Apply CLI overrides
        if ctx.obj.get("force"):
            config.force_sync = True
        if ctx.obj.get("dry_run"):
            config.dry_run = True
        if debug:
            config.debug = True
        if max_articles is not None:
            config.max_articles = max_articles

        engine = SyncEngine(config)
        result = engine.sync(article_id=article_id)

        # Exit with error code if sync failed
        if not result.success:
            sys.exit(1)

    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        console.print("\n[dim]Make sure you have created a .env file with your credentials.[/dim]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync cancelled.[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if debug:
            traceback.print_exc()
        sys.exit(1)


@cli.command()
def status():
    """Show current sync status."""
    try:
        config = Config.from_env()
        engine = SyncEngine(config)
        engine.status()
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    console.print(f"microCMS → Qiita Sync v{__version__}")


if __name__ == "__main__":
    cli()
