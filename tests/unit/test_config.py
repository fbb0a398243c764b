from __future__ import annotations

import json
import logging

import pytest

from studio_quotes.core import config as config_module
from studio_quotes.core.exceptions import ConfigurationError
from studio_quotes.core.logging import LogContext, build_log_event
from studio_quotes.core.logging_config import JsonFormatter, configure_logging


def test_defaults_are_valid(monkeypatch):
    for key in ("DATABASE_URL", "TASK_MAX_RETRIES", "LOG_LEVEL", "ENV"):
        monkeypatch.delenv(key, raising=False)

    cfg = config_module._build_config()

    assert cfg.DATABASE_URL.startswith("sqlite")
    assert cfg.TASK_MAX_RETRIES == 3
    assert cfg.is_production is False


@pytest.mark.parametrize(
    "key, value",
    [
        ("DATABASE_URL", "mysql://db/studio"),
        ("TASK_MAX_RETRIES", "-1"),
        ("COLLABORATOR_TIMEOUT_SECONDS", "0"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_settings_raise(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError):
        config_module._build_config()


def test_production_disables_debug(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("DATABASE_URL", "postgresql://app:secret@db:5432/studio")

    cfg = config_module._build_config("production")

    assert cfg.DEBUG is False


def test_json_formatter_keeps_structured_fields():
    record = logging.LogRecord("studio_quotes.test", logging.INFO, __file__, 1, "authorization.start", None, None)
    for key, value in build_log_event("authorization.start", LogContext(studio_id="4", trace_id="abc")).items():
        setattr(record, key, value)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["event"] == "authorization.start"
    assert payload["studio_id"] == "4"
    assert payload["trace_id"] == "abc"
    assert "quotation_id" not in payload


def test_json_formatter_includes_extra_context():
    logger = logging.getLogger("studio_quotes.test")
    record = logger.makeRecord(
        logger.name,
        logging.WARNING,
        __file__,
        1,
        "task.failed",
        None,
        None,
        extra={"event": "task.failed", "task_key": "followups.generate_contract", "attempts": 2},
    )

    payload = json.loads(JsonFormatter(service="Studio Quotes").format(record))

    assert payload["service"] == "Studio Quotes"
    assert payload["task_key"] == "followups.generate_contract"
    assert payload["attempts"] == 2
    assert "args" not in payload


def test_configure_logging_installs_json_handler_once(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://app:secret@db:5432/studio")
    cfg = config_module._build_config("production")
    root = logging.getLogger()
    engine_logger = logging.getLogger("sqlalchemy.engine")
    monkeypatch.setattr(root, "level", root.level)
    for name in ("sqlalchemy.engine", "celery", "kombu"):
        quiet = logging.getLogger(name)
        monkeypatch.setattr(quiet, "level", quiet.level)

    before = list(root.handlers)

    try:
        configure_logging(cfg)
        configure_logging(cfg)
        added = [handler for handler in root.handlers if handler not in before]
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)

    assert len(added) == 1
    assert isinstance(added[0].formatter, JsonFormatter)
    assert engine_logger.level == logging.WARNING
