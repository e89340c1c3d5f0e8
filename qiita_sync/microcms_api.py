"""
microCMS API wrapper for the sync system.

Provides a clean interface to the microCMS list API with:
- Article record parsing
- Draft filtering
- Error handling
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import requests
from rich.console import Console

from .config import Config

console = Console()

ARTICLE_FIELDS = "id,title,content,excerpt,category,tags,publishedAt,updatedAt,revisedAt"
FETCH_LIMIT = 100
REQUEST_TIMEOUT = 30


class MicroCMSError(Exception):
    """Raised when the article list cannot be fetched."""


@dataclass
class ContentItem:
    """Represents a microCMS article with metadata."""

    id: str
    title: str
    content: str = ""
    excerpt: Optional[str] = None
    categories: Any = field(default_factory=list)
    tags: str = ""
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    revised_at: Optional[str] = None

    @property
    def is_published(self) -> bool:
        return bool(self.published_at) and "draft" not in self.published_at

    @classmethod
    def from_api_response(cls, article: dict) -> "ContentItem":
        """Create ContentItem from API response."""
        tags = article.get("tags")

        return cls(
            id=article["id"],
            title=article.get("title") or "",
            content=article.get("content") or "",
            excerpt=article.get("excerpt"),
            categories=article.get("category") or [],
            tags=tags if isinstance(tags, str) else "",
            published_at=article.get("publishedAt"),
            updated_at=article.get("updatedAt"),
            revised_at=article.get("revisedAt"),
        )


class MicroCMSAPI:
    """
    Wrapper around the microCMS content API.

    Fetches one page of articles per run; pagination and retries are
    left to the next scheduled run.
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        """
        Initialize the microCMS client.

        Args:
            config: Configuration instance with microCMS credentials.
            session: Optional requests session (for connection reuse or testing).
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"X-MICROCMS-API-KEY": config.microcms_api_key})
        self._request_count = 0

    @property
    def list_url(self) -> str:
        return f"https://{self.config.microcms_domain}.microcms.io/api/v1/{self.config.microcms_endpoint}"

    def get_articles(self) -> list[ContentItem]:
        """
        Get published articles.

        Returns:
            ContentItem list in the order microCMS returned them.

        Raises:
            MicroCMSError: If the request fails or the payload is malformed.
        """
        try:
            self._request_count += 1
            response = self.session.get(
                self.list_url,
                params={"limit": FETCH_LIMIT, "fields": ARTICLE_FIELDS},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise MicroCMSError(f"Failed to fetch microCMS articles: {e}") from e
        except ValueError as e:
            raise MicroCMSError(f"microCMS returned invalid JSON: {e}") from e

        try:
            articles = [ContentItem.from_api_response(item) for item in data.get("contents", [])]
        except (AttributeError, KeyError, TypeError) as e:
            raise MicroCMSError(f"Unexpected microCMS response shape: {e}") from e

        published = [article for article in articles if article.is_published]
        console.print(f"[dim]Found {len(published)} published articles[/dim]")
        return published

    @property
    def request_count(self) -> int:
        """Number of API requests made."""
        return self._request_count
