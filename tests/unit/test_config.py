"""Unit tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from paramtasks.config import AppConfig, get_config, reset_config


class TestAppConfig:
    """Test AppConfig.from_env()."""

    def test_defaults(self):
        config = AppConfig.from_env()

        assert config.db.url == "sqlite+aiosqlite:///:memory:"
        assert config.org_id == "test-org"
        assert config.rendering.placeholder == "{value}"
        assert config.rendering.default_task_label == "Tarea"
        assert config.rendering.uncategorized_label == "Sin categoría"
        assert config.costing.currency == "ARS"
        assert config.costing.code_width == 6

    def test_missing_database_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL")

        with pytest.raises(KeyError):
            AppConfig.from_env()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("RENDER_DEFAULT_LABEL", "Task")
        monkeypatch.setenv("RENDER_SHORT_ID_LENGTH", "6")
        monkeypatch.setenv("DEFAULT_CURRENCY", "USD")
        monkeypatch.setenv("TASK_CODE_WIDTH", "8")
        monkeypatch.setenv("DB_ECHO", "true")

        config = AppConfig.from_env()

        assert config.rendering.default_task_label == "Task"
        assert config.rendering.short_id_length == 6
        assert config.costing.currency == "USD"
        assert config.costing.code_width == 8
        assert config.db.echo is True

    def test_singleton(self, monkeypatch):
        first = get_config()
        assert get_config() is first

        monkeypatch.setenv("DEFAULT_ORG_ID", "other-org")
        reset_config()

        assert get_config().org_id == "other-org"
