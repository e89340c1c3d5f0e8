"""Tests for environment-based configuration."""

from pathlib import Path

import pytest

from qiita_sync.config import DEFAULT_FOOTER, Config


@pytest.fixture
def required_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    clean_env.setenv("MICROCMS_DOMAIN", "my-service")
    clean_env.setenv("MICROCMS_API_KEY", "microcms-key")
    clean_env.setenv("QIITA_ACCESS_TOKEN", "qiita-token")
    return clean_env


class TestFromEnv:
    """Tests for Config.from_env."""

    def test_missing_required_variables(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        clean_env.setenv("MICROCMS_DOMAIN", "my-service")

        with pytest.raises(ValueError) as excinfo:
            Config.from_env(tmp_path / ".env")

        message = str(excinfo.value)
        assert "MICROCMS_API_KEY" in message
        assert "QIITA_ACCESS_TOKEN" in message
        assert "MICROCMS_DOMAIN" not in message

    def test_defaults(self, required_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config = Config.from_env(tmp_path / ".env")

        assert config.microcms_domain == "my-service"
        assert config.microcms_endpoint == "articles"
        assert config.original_site_url is None
        assert config.qiita_private is False
        assert config.max_tags == 5
        assert config.max_tag_length == 20
        assert config.default_tag == "AI"
        assert config.max_articles == 50
        assert config.rate_limit_pause == 2.0
        assert config.footer == DEFAULT_FOOTER
        assert config.sync_history_path == Path.cwd() / "sync-history.json"
        assert not config.debug
        assert not config.dry_run
        assert not config.force_sync

    def test_overrides(self, required_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        required_env.setenv("MICROCMS_ENDPOINT", "blogs")
        required_env.setenv("QIITA_PRIVATE", "true")
        required_env.setenv("MAX_TAGS", "3")
        required_env.setenv("MAX_ARTICLES", "10")
        required_env.setenv("RATE_LIMIT_PAUSE", "0.5")
        required_env.setenv("SYNC_HISTORY_PATH", str(tmp_path / "state" / "history.json"))
        required_env.setenv("DRY_RUN", "TRUE")

        config = Config.from_env(tmp_path / ".env")

        assert config.microcms_endpoint == "blogs"
        assert config.qiita_private is True
        assert config.max_tags == 3
        assert config.max_articles == 10
        assert config.rate_limit_pause == 0.5
        assert config.sync_history_path == tmp_path / "state" / "history.json"
        assert config.dry_run is True

    @pytest.mark.parametrize("name,value", [
        ("MAX_TAGS", "five"),
        ("MAX_ARTICLES", "0"),
        ("RATE_LIMIT_PAUSE", "soon"),
        ("RATE_LIMIT_PAUSE", "-1"),
    ])
    def test_invalid_numbers(self, required_env: pytest.MonkeyPatch, tmp_path: Path, name: str, value: str) -> None:
        required_env.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            Config.from_env(tmp_path / ".env")

    def test_footer_file(self, required_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        footer = tmp_path / "footer.md"
        footer.write_text("---\n\nThanks for reading!\n", encoding="utf-8")
        required_env.setenv("FOOTER_FILE", str(footer))

        assert Config.from_env(tmp_path / ".env").footer == "---\n\nThanks for reading!"

    def test_missing_footer_file(self, required_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        required_env.setenv("FOOTER_FILE", str(tmp_path / "nope.md"))

        with pytest.raises(ValueError, match="FOOTER_FILE"):
            Config.from_env(tmp_path / ".env")

    def test_reads_dotenv_file(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "MICROCMS_DOMAIN=from-file\nMICROCMS_API_KEY=k\nQIITA_ACCESS_TOKEN=t\n",
            encoding="utf-8",
        )

        config = Config.from_env(env_file)

        assert config.microcms_domain == "from-file"


class TestArticleUrl:
    """Tests for backlink construction."""

    def test_without_site(self, config: Config) -> None:
        assert config.article_url("abc") is None

    def test_with_site(self, config: Config) -> None:
        config.original_site_url = "https://blog.example.com/"

        assert config.article_url("abc") == "https://blog.example.com/articles/abc"
