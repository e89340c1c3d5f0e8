"""
Persistent sync history.

The history file records, per microCMS article, which Qiita item it was
published as and which article timestamp that publish reflected. Field
names in the JSON file are shared with earlier versions of the tool and
must not change.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

console = Console()


@dataclass
class SyncRecord:
    """State of a synced article."""

    remote_id: str
    title: str
    last_synced_at: str
    source_updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "qiitaId": self.remote_id,
            "title": self.title,
            "lastSyncedAt": self.last_synced_at,
            "microCMSUpdatedAt": self.source_updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SyncRecord":
        return cls(
            remote_id=data["qiitaId"],
            title=data.get("title", ""),
            last_synced_at=data.get("lastSyncedAt", ""),
            source_updated_at=data.get("microCMSUpdatedAt"),
        )


@dataclass
class SyncHistory:
    """Overall sync state."""

    articles: dict[str, SyncRecord] = field(default_factory=dict)
    last_sync_time: Optional[str] = None

    def get(self, article_id: str) -> Optional[SyncRecord]:
        return self.articles.get(article_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "lastSyncTime": self.last_sync_time,
            "articles": {
                article_id: record.to_dict()
                for article_id, record in self.articles.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SyncHistory":
        """Create from dictionary."""
        history = cls(last_sync_time=data.get("lastSyncTime"))

        for article_id, record in (data.get("articles") or {}).items():
            try:
                history.articles[article_id] = SyncRecord.from_dict(record)
            except (KeyError, TypeError, AttributeError) as e:
                console.print(
                    f"[yellow]Warning: Skipping unreadable history entry {escape(str(article_id))}: "
                    f"{escape(repr(e))}[/yellow]"
                )

        return history


class StateStore:
    """Loads and saves the sync history JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> SyncHistory:
        """
        Load sync history from file.

        Returns:
            The stored history, or an empty one if the file is missing
            or unreadable.
        """
        if not self.path.exists():
            return SyncHistory()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return SyncHistory.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            console.print(f"[yellow]Warning: Could not load sync history, starting fresh: {escape(str(e))}[/yellow]")

        return SyncHistory()

    def save(self, history: SyncHistory) -> None:
        """Save sync history to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(history.to_dict(), f, indent=2, ensure_ascii=False)

        console.print("[dim]Sync history saved[/dim]")
