"""Collaborator fakes and builders shared by the tests."""

from typing import Optional

from qiita_sync.microcms_api import ContentItem
from qiita_sync.qiita_api import PublishRequest, QiitaAPIError

CONFIG_ENV_VARS = (
    "MICROCMS_DOMAIN", "MICROCMS_API_KEY", "QIITA_ACCESS_TOKEN", "MICROCMS_ENDPOINT",
    "ORIGINAL_SITE_URL", "QIITA_PRIVATE", "MAX_TAGS", "MAX_TAG_LENGTH", "DEFAULT_TAG",
    "MAX_ARTICLES", "RATE_LIMIT_PAUSE", "FOOTER_FILE", "SYNC_HISTORY_PATH",
    "DEBUG", "DRY_RUN", "FORCE_SYNC",
)


class FakeSource:
    """In-memory article source."""

    def __init__(self, articles=(), error: Optional[Exception] = None):
        self.articles = list(articles)
        self.error = error
        self.calls = 0

    def get_articles(self) -> list[ContentItem]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.articles)


class FakePublisher:
    """Records publish requests and hands out sequential Qiita IDs."""

    def __init__(self, fail_titles=(), interrupt_titles=()):
        self.fail_titles = set(fail_titles)
        self.interrupt_titles = set(interrupt_titles)
        self.created: list[PublishRequest] = []
        self.updated: list[tuple[str, PublishRequest]] = []

    def _check(self, request: PublishRequest) -> None:
        if request.title in self.interrupt_titles:
            raise KeyboardInterrupt
        if request.title in self.fail_titles:
            raise QiitaAPIError(f"rejected {request.title}", status_code=403)

    def create_item(self, request: PublishRequest) -> str:
        self._check(request)
        self.created.append(request)
        return f"qiita-{len(self.created)}"

    def update_item(self, item_id: str, request: PublishRequest) -> str:
        self._check(request)
        self.updated.append((item_id, request))
        return item_id


def make_article(article_id: str, **overrides) -> ContentItem:
    values = {
        "title": f"Article {article_id}",
        "content": f"<p>Body of {article_id}</p>",
        "published_at": "2024-01-01T00:00:00.000Z",
        "updated_at": "2024-01-01T00:00:00.000Z",
    }
    values.update(overrides)
    return ContentItem(id=article_id, **values)


