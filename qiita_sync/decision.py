"""
Create / update / skip decisions for articles.

An article without a history record is created. An article with a
record is updated only when its effective timestamp is strictly later
than the one recorded at its last publish; everything else is skipped.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .microcms_api import ContentItem
from .state import SyncHistory, SyncRecord


class SyncAction(Enum):
    """What to do with an article in this run."""
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


@dataclass(frozen=True)
class SyncDecision:
    """Result of comparing an article against the sync history."""

    action: SyncAction
    remote_id: Optional[str] = None
    source_updated_at: Optional[str] = None

    @property
    def should_sync(self) -> bool:
        return self.action is not SyncAction.SKIP


def effective_timestamp(item: ContentItem) -> Optional[str]:
    """First present value of updatedAt, revisedAt, publishedAt."""
    return item.updated_at or item.revised_at or item.published_at


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def decide(item: ContentItem, history: SyncHistory, force: bool = False) -> SyncDecision:
    """
    Decide how to sync an article.

    Args:
        item: Article from microCMS.
        history: Current sync history (not modified).
        force: Update every previously synced article regardless of timestamps.

    Returns:
        SyncDecision carrying the Qiita item ID for updates and the
        article's effective timestamp at decision time.
    """
    source_updated_at = effective_timestamp(item)
    record = history.get(item.id)

    if record is None:
        return SyncDecision(SyncAction.CREATE, source_updated_at=source_updated_at)

    if force:
        return SyncDecision(SyncAction.UPDATE, record.remote_id, source_updated_at)

    current = parse_timestamp(source_updated_at)
    synced = parse_timestamp(record.source_updated_at)

    if current is not None and synced is not None and current > synced:
        return SyncDecision(SyncAction.UPDATE, record.remote_id, source_updated_at)

    return SyncDecision(SyncAction.SKIP, record.remote_id, source_updated_at)


def record_sync(
    history: SyncHistory,
    item: ContentItem,
    decision: SyncDecision,
    remote_id: str,
    synced_at: Optional[datetime] = None,
) -> SyncRecord:
    """
    Store the outcome of a successful publish.

    This is the only place the sync history is written to during a run.
    """
    synced_at = synced_at or datetime.now(timezone.utc)
    record = SyncRecord(
        remote_id=remote_id,
        title=item.title,
        last_synced_at=synced_at.isoformat(),
        source_updated_at=decision.source_updated_at,
    )
    history.articles[item.id] = record
    return record
