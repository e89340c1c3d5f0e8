"""
Main sync engine for microCMS → Qiita synchronization.

Orchestrates:
- Article discovery from microCMS
- Change detection against the sync history
- Content conversion and tag normalization
- Publishing to Qiita
- State management
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import Config
from .decision import SyncAction, SyncDecision, decide, parse_timestamp, record_sync
from .markdown_converter import MarkdownConverter
from .microcms_api import ContentItem, MicroCMSAPI
from .qiita_api import PublishRequest, QiitaAPI
from .state import StateStore, SyncHistory
from .tags import normalize_tags

console = Console()


@dataclass
class SyncResult:
    """Result of a sync operation."""

    articles_created: list[str] = field(default_factory=list)
    articles_updated: list[str] = field(default_factory=list)
    articles_skipped: list[str] = field(default_factory=list)
    articles_failed: list[str] = field(default_factory=list)
    articles_pending: list[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def success(self) -> bool:
        """Check if sync was successful."""
        return not self.aborted and len(self.articles_failed) == 0


class SyncEngine:
    """
    Main orchestrator for microCMS → Qiita synchronization.

    Coordinates all components to perform the sync:
    1. Fetch published articles from microCMS
    2. Decide create / update / skip per article
    3. Convert changed articles to Markdown
    4. Publish them to Qiita, pausing between publishes
    5. Save the sync history
    """

    def __init__(
        self,
        config: Config,
        source: Optional[MicroCMSAPI] = None,
        publisher: Optional[QiitaAPI] = None,
        state_store: Optional[StateStore] = None,
        converter: Optional[MarkdownConverter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize sync engine.

        Args:
            config: Configuration instance.
            source: Article source; defaults to the microCMS API.
            publisher: Article publisher; defaults to the Qiita API.
            state_store: History persistence; defaults to the configured file.
            converter: HTML → Markdown converter.
            sleep: Function used for the pause between publishes.
        """
        self.config = config
        self.source = source or MicroCMSAPI(config)
        self.publisher = publisher or QiitaAPI(config)
        self.state_store = state_store or StateStore(config.sync_history_path)
        self.converter = converter or MarkdownConverter(footer=config.footer)
        self._sleep = sleep

    def sync(self, article_id: Optional[str] = None) -> SyncResult:
        """
        Perform a sync run.

        Args:
            article_id: Restrict the run to this article.

        Returns:
            SyncResult with details of the operation.
        """
        result = SyncResult()

        console.print("\n[bold blue]🚀 Starting microCMS → Qiita Sync[/bold blue]\n")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Fetching articles from microCMS...", total=None)

            try:
                articles = self.source.get_articles()
                progress.update(task, description=f"Found {len(articles)} articles")
            except Exception as e:
                console.print(f"[red]Failed to fetch articles: {escape(str(e))}[/red]")
                result.aborted = True
                return result

        if article_id is not None:
            articles = self._select_article(articles, article_id)
            if not articles:
                return result

        history = self.state_store.load()
        self._process(articles[: self.config.max_articles], history, result)
        self._print_summary(result, history)

        return result

    def _process(self, articles: list[ContentItem], history: SyncHistory, result: SyncResult) -> None:
        """Publish changed articles, then save the history even on abort."""
        published = 0
        completed = False

        try:
            for article in articles:
                decision = decide(article, history, force=self.config.force_sync)

                if not decision.should_sync:
                    console.print(f"[dim]⏭️  Skipping {escape(article.title)} (no changes)[/dim]")
                    result.articles_skipped.append(article.title)
                    continue

                if self.config.dry_run:
                    console.print(f"[yellow]Would {decision.action.value}:[/yellow] {escape(article.title)}")
                    result.articles_pending.append(article.title)
                    continue

                if published:
                    console.print(f"[dim]⏳ Waiting {self.config.rate_limit_pause:g} seconds...[/dim]")
                    self._sleep(self.config.rate_limit_pause)

                try:
                    remote_id = self._publish(article, decision)
                except Exception as e:
                    console.print(f"[red]Failed to sync '{escape(article.title)}': {escape(str(e))}[/red]")
                    result.articles_failed.append(article.title)
                    continue

                record_sync(history, article, decision, remote_id)
                published += 1

                if decision.action is SyncAction.CREATE:
                    result.articles_created.append(article.title)
                else:
                    result.articles_updated.append(article.title)
                console.print(f"[green]✅ Synced:[/green] {escape(article.title)} (ID: {remote_id})")

            completed = True
        finally:
            if not self.config.dry_run:
                if completed:
                    history.last_sync_time = datetime.now(timezone.utc).isoformat()
                self.state_store.save(history)

    def _publish(self, article: ContentItem, decision: SyncDecision) -> str:
        """Create or update the Qiita item for an article."""
        request = self.build_request(article)

        if decision.action is SyncAction.CREATE:
            return self.publisher.create_item(request)
        return self.publisher.update_item(decision.remote_id, request)

    def build_request(self, article: ContentItem) -> PublishRequest:
        """Convert an article into a Qiita publish request."""
        tags = normalize_tags(
            article.categories,
            article.tags,
            max_tags=self.config.max_tags,
            max_tag_length=self.config.max_tag_length,
            default_tag=self.config.default_tag,
            console=console if self.config.debug else None,
        )

        body = self.converter.convert(
            article.content,
            excerpt=article.excerpt,
            original_url=self.config.article_url(article.id),
            original_title=article.title,
        )

        return PublishRequest(
            title=article.title,
            body=body,
            tags=tags,
            private=self.config.qiita_private,
        )

    def _select_article(self, articles: list[ContentItem], article_id: str) -> list[ContentItem]:
        """Pick a single article for a test run."""
        for article in articles:
            if article.id == article_id:
                console.print(f"[cyan]🧪 Test run for:[/cyan] {escape(article.title)} ({article.id})")
                return [article]

        console.print(f"[red]Article with ID '{escape(article_id)}' not found[/red]")
        console.print("Available article IDs:")
        for article in articles[:10]:
            console.print(f"   - {article.id}: {escape(article.title)}")
        if len(articles) > 10:
            console.print(f"   ... and {len(articles) - 10} more")
        return []

    def _print_summary(self, result: SyncResult, history: SyncHistory) -> None:
        """Print sync summary."""
        console.print("\n" + "=" * 50)
        console.print("[bold]📊 Sync Summary[/bold]")
        console.print("=" * 50)

        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("Articles created", str(len(result.articles_created)))
        table.add_row("Articles updated", str(len(result.articles_updated)))
        table.add_row("Articles skipped", str(len(result.articles_skipped)))
        table.add_row("Articles failed", str(len(result.articles_failed)))
        if self.config.dry_run:
            table.add_row("Pending (dry run)", str(len(result.articles_pending)))
        table.add_row("Last sync", history.last_sync_time or "-")

        console.print(table)

        if result.articles_failed:
            console.print(f"\n[red]Failed:[/red] {escape(', '.join(result.articles_failed))}")

        console.print("")

    def status(self) -> None:
        """Print current sync status."""
        history = self.state_store.load()

        console.print("\n[bold]Sync Status[/bold]\n")

        if not history.articles:
            console.print("[yellow]No articles have been synced yet.[/yellow]")
            console.print("Run 'python sync.py' to perform initial sync.")
            return

        table = Table(title="Synced Articles")
        table.add_column("Article", style="cyan")
        table.add_column("Qiita ID", style="green")
        table.add_column("microCMS Updated", style="yellow")
        table.add_column("Last Synced", style="blue")

        for article_id, record in sorted(history.articles.items(), key=lambda item: item[1].title):
            table.add_row(
                record.title or article_id,
                record.remote_id,
                _format_time(record.source_updated_at),
                _format_time(record.last_synced_at),
            )

        console.print(table)

        if history.last_sync_time:
            console.print(f"\nLast sync: {_format_time(history.last_sync_time)}")


def _format_time(value: Optional[str]) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return value or "-"
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
