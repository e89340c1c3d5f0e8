"""
Qiita API wrapper for the sync system.

Creates and updates Qiita items with:
- Bearer token authentication
- Rate limiting compliance
- Error reporting per request
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import requests
from ratelimit import limits, sleep_and_retry
from rich.console import Console
from rich.markup import escape

from .config import Config

console = Console()

BASE_URL = "https://qiita.com/api/v2"
REQUEST_TIMEOUT = 30

# Qiita API rate limit: 1000 requests per hour for authenticated users
RATE_LIMIT_CALLS = 1000
RATE_LIMIT_PERIOD = 3600  # seconds


class QiitaAPIError(Exception):
    """Raised when Qiita rejects or fails a publish request."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


@dataclass
class PublishRequest:
    """Payload for creating or updating a Qiita item."""

    title: str
    body: str
    tags: list[dict[str, str]] = field(default_factory=list)
    private: bool = False

    def to_payload(self) -> dict:
        return {
            "title": self.title,
            "body": self.body,
            "tags": self.tags,
            "private": self.private,
        }


class QiitaAPI:
    """
    Wrapper around the Qiita v2 items API.

    Handles:
    - Authentication
    - Rate limiting
    - Mapping failures to QiitaAPIError
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        """
        Initialize the Qiita client.

        Args:
            config: Configuration instance with the Qiita token.
            session: Optional requests session (for connection reuse or testing).
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.qiita_access_token}",
            "Content-Type": "application/json",
        })
        self._request_count = 0

    @sleep_and_retry
    @limits(calls=RATE_LIMIT_CALLS, period=RATE_LIMIT_PERIOD)
    def _rate_limited_call(self, func, *args, **kwargs) -> Any:
        """Execute a rate-limited API call."""
        self._request_count += 1
        return func(*args, **kwargs)

    def create_item(self, request: PublishRequest) -> str:
        """
        Create a new Qiita item.

        Returns:
            The new item's ID.
        """
        console.print(f"[cyan]Creating:[/cyan] {escape(request.title)}")
        return self._send("POST", "/items", request)

    def update_item(self, item_id: str, request: PublishRequest) -> str:
        """
        Update an existing Qiita item.

        Returns:
            The item's ID.
        """
        console.print(f"[cyan]Updating:[/cyan] {escape(request.title)} (ID: {item_id})")
        return self._send("PATCH", f"/items/{item_id}", request, fallback_id=item_id)

    def _send(
        self,
        method: str,
        path: str,
        request: PublishRequest,
        fallback_id: Optional[str] = None,
    ) -> str:
        try:
            response = self._rate_limited_call(
                self.session.request,
                method,
                f"{BASE_URL}{path}",
                json=request.to_payload(),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise QiitaAPIError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            raise QiitaAPIError(
                f"{method} {path} failed with status {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )

        try:
            item_id = response.json().get("id")
        except (ValueError, AttributeError):
            item_id = None

        item_id = item_id or fallback_id
        if not item_id:
            raise QiitaAPIError(f"{method} {path} returned no item ID", status_code=response.status_code)
        return item_id

    @property
    def request_count(self) -> int:
        """Number of API requests made."""
        return self._request_count
