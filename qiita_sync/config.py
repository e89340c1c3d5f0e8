"""
Configuration management for microCMS → Qiita sync.

Loads settings from environment variables and provides
structured configuration for all sync components.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_FOOTER = """---

## 🌟 お知らせ

この記事が役に立ったら、ぜひフォローやいいねをお願いします！"""


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")
    return value


@dataclass
class Config:
    """
    Central configuration for the sync system.

    Loads from environment variables and provides defaults.
    All secrets are loaded from env vars - never hardcoded.
    """

    # microCMS settings
    microcms_domain: str
    microcms_api_key: str

    # Qiita settings
    qiita_access_token: str

    microcms_endpoint: str = "articles"
    original_site_url: Optional[str] = None
    qiita_private: bool = False

    # Tag limits imposed by Qiita
    max_tags: int = 5
    max_tag_length: int = 20
    default_tag: str = "AI"

    # Batch behavior
    max_articles: int = 50
    rate_limit_pause: float = 2.0

    footer: str = DEFAULT_FOOTER
    sync_history_path: Path = field(default_factory=lambda: Path.cwd() / "sync-history.json")

    debug: bool = False
    dry_run: bool = False
    force_sync: bool = False

    def article_url(self, article_id: str) -> Optional[str]:
        """Backlink to the article on the original site, if one is configured."""
        if not self.original_site_url:
            return None
        return f"{self.original_site_url.rstrip('/')}/articles/{article_id}"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                     looks for .env in current directory.

        Returns:
            Configured Config instance.

        Raises:
            ValueError: If required environment variables are missing
                or a limit is not a valid number.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        required = {
            "MICROCMS_DOMAIN": "The service domain of your microCMS account (xxx in xxx.microcms.io).",
            "MICROCMS_API_KEY": "Create an API key under the microCMS service settings.",
            "QIITA_ACCESS_TOKEN": "Create a token with write_qiita scope at https://qiita.com/settings/applications",
        }
        missing = [name for name in required if not os.getenv(name)]
        if missing:
            hints = "\n".join(f"  {name}: {required[name]}" for name in missing)
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}\n{hints}"
            )

        footer = DEFAULT_FOOTER
        footer_file = os.getenv("FOOTER_FILE")
        if footer_file:
            try:
                footer = Path(footer_file).read_text(encoding="utf-8").strip()
            except OSError as e:
                raise ValueError(f"FOOTER_FILE could not be read: {e}")

        history_path_str = os.getenv("SYNC_HISTORY_PATH")
        sync_history_path = Path(history_path_str) if history_path_str else Path.cwd() / "sync-history.json"

        return cls(
            microcms_domain=os.environ["MICROCMS_DOMAIN"],
            microcms_api_key=os.environ["MICROCMS_API_KEY"],
            qiita_access_token=os.environ["QIITA_ACCESS_TOKEN"],
            microcms_endpoint=os.getenv("MICROCMS_ENDPOINT") or "articles",
            original_site_url=os.getenv("ORIGINAL_SITE_URL") or None,
            qiita_private=_env_bool("QIITA_PRIVATE"),
            max_tags=_env_int("MAX_TAGS", 5),
            max_tag_length=_env_int("MAX_TAG_LENGTH", 20),
            default_tag=os.getenv("DEFAULT_TAG") or "AI",
            max_articles=_env_int("MAX_ARTICLES", 50),
            rate_limit_pause=_env_float("RATE_LIMIT_PAUSE", 2.0),
            footer=footer,
            sync_history_path=sync_history_path,
            debug=_env_bool("DEBUG"),
            dry_run=_env_bool("DRY_RUN"),
            force_sync=_env_bool("FORCE_SYNC"),
        )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.sync_history_path, str):
            self.sync_history_path = Path(self.sync_history_path)
