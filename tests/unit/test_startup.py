from __future__ import annotations

import pytest

import studio_quotes.core.startup as startup_module


class _Cfg:
    ENV = "development"
    DATABASE_URL = "sqlite:///./studio_quotes.db"
    CELERY_TASK_ALWAYS_EAGER = False

    @property
    def is_production(self) -> bool:
        return False


def test_startup_raises_when_db_unreachable(monkeypatch):
    monkeypatch.setattr(startup_module, "get_config", lambda: _Cfg())
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: False)

    with pytest.raises(RuntimeError, match="Database connectivity check failed"):
        startup_module.validate_startup_config()


def test_startup_passes_when_db_reachable(monkeypatch):
    monkeypatch.setattr(startup_module, "get_config", lambda: _Cfg())
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: True)

    startup_module.validate_startup_config()
