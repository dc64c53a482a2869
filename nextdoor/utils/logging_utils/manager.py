from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, current_app

# category -> file under LOGGING_BASE_DIR
CATEGORY_FILES: Dict[str, str] = {
    "auth": "auth.log",
    "mail": "mail.log",
    "location": "location.log",
    "community": "community.log",
    "forum": "forum.log",
    "groupbuy": "groupbuy.log",
    "route": "route.log",
    "audit": "audit.log",
    "app": "application.log",
    "error": "errors.log",
}

LEVEL_OVERRIDE_PREFIX = "APP_LOG_LEVEL_"

# attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

_fields: ContextVar[Dict[str, Any]] = ContextVar("nextdoor_log_fields", default={})


def get_log_context() -> Dict[str, Any]:
    return dict(_fields.get())


def update_log_context(**fields: Any) -> None:
    """Merge ``fields`` into the current context. ``None`` drops a key."""
    merged = dict(_fields.get())
    for key, value in fields.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    _fields.set(merged)


def clear_log_context() -> None:
    _fields.set({})


@contextmanager
def log_context(**fields: Any):
    """Tag every record logged inside the block with ``fields``.

        with log_context(module="post_route", community=slug):
            ...
    """
    merged = dict(_fields.get())
    merged.update((k, v) for k, v in fields.items() if v is not None)
    token = _fields.set(merged)
    try:
        yield
    finally:
        _fields.reset(token)


class ContextAwareFormatter(logging.Formatter):
    """Plain text with a ``| key=value`` tail, or one JSON object per line."""

    TEXT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"

    def __init__(self, *, json_format: bool = False, app_name: str = "nextdoor") -> None:
        super().__init__(self.TEXT_FORMAT)
        self.json_format = json_format
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        fields = _fields.get()
        if not self.json_format:
            line = super().format(record)
            if fields:
                line += " | " + " ".join(f"{k}={fields[k]}" for k in sorted(fields))
            return line

        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "app": self.app_name,
            "message": record.getMessage(),
        }
        payload.update(
            (k, v) for k, v in vars(record).items()
            if k not in _RECORD_ATTRS and not k.startswith("_") and k not in payload
        )
        if fields:
            payload["context"] = dict(fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def _level(value: Any, default: int = logging.INFO) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value or "").strip().upper())
    return level if isinstance(level, int) else default


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


class LoggerManager:
    """Builds the ``nextdoor.<category>`` loggers on first use.

    Each category gets its own midnight-rotated file; the console handler and
    the Flask app's handlers are shared across categories.
    """

    def __init__(self, *, base_dir: str, backup_count: int = 7, default_level: int = logging.INFO,
                 levels: Optional[Dict[str, int]] = None, console: bool = True,
                 json_format: bool = False, app: Optional[Flask] = None) -> None:
        self.base_dir = Path(base_dir)
        self.backup_count = backup_count
        self.default_level = default_level
        self.levels = dict(levels or {})
        self.app = app
        self.formatter = ContextAwareFormatter(
            json_format=json_format,
            app_name=app.config.get("APP_NAME", "nextdoor") if app else "nextdoor",
        )
        self.console = logging.StreamHandler() if console else None
        if self.console:
            self.console.setFormatter(ContextAwareFormatter())
        self._loggers: Dict[str, logging.Logger] = {}

    def get_logger(self, category: str) -> logging.Logger:
        name = category.strip().lower()
        logger = self._loggers.get(name)
        if logger is not None:
            return logger

        logger = logging.getLogger(f"nextdoor.{name}")
        logger.propagate = False
        logger.setLevel(self.levels.get(name, self.default_level))
        for handler in list(logger.handlers):
            logger.removeHandler(handler)

        self.base_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            self.base_dir / CATEGORY_FILES.get(name, f"{name}.log"),
            when="midnight",
            backupCount=self.backup_count,
            encoding="utf-8",
            utc=True,
        )
        file_handler.setFormatter(self.formatter)
        logger.addHandler(file_handler)
        if self.console:
            logger.addHandler(self.console)
        if self.app is not None:
            for handler in self.app.logger.handlers:
                logger.addHandler(handler)

        self._loggers[name] = logger
        return logger

    def set_level(self, category: str, level: int) -> None:
        name = category.strip().lower()
        self.levels[name] = level
        if name in self._loggers:
            self._loggers[name].setLevel(level)

    def close(self) -> None:
        for logger in self._loggers.values():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                if isinstance(handler, TimedRotatingFileHandler):
                    handler.close()
        self._loggers.clear()


_manager: Optional[LoggerManager] = None


def env_level_overrides(environ=None) -> Dict[str, int]:
    """``APP_LOG_LEVEL_FORUM=DEBUG`` -> ``{"forum": logging.DEBUG}``."""
    overrides = {}
    for key, value in (environ if environ is not None else os.environ).items():
        if not key.startswith(LEVEL_OVERRIDE_PREFIX):
            continue
        name = key[len(LEVEL_OVERRIDE_PREFIX):].strip().lower()
        level = logging.getLevelName((value or "").strip().upper())
        if name and isinstance(level, int):
            overrides[name] = level
    return overrides


def init_logger(app: Flask) -> LoggerManager:
    """(Re)build the category loggers from ``app.config`` and the environment."""
    global _manager
    if _manager is not None:
        _manager.close()

    levels = {str(k).lower(): _level(v) for k, v in (app.config.get("LOGGING_CATEGORY_LEVELS") or {}).items()}
    levels.update(env_level_overrides())
    _manager = LoggerManager(
        base_dir=app.config.get("LOGGING_BASE_DIR") or "/tmp/nextdoor_logs",
        backup_count=int(app.config.get("LOGGING_ROTATION_BACKUP_COUNT", 7)),
        default_level=_level(app.config.get("LOGGING_DEFAULT_LEVEL")),
        levels=levels,
        console=_flag(app.config.get("LOGGING_CONSOLE_ENABLED"), True),
        json_format=_flag(app.config.get("LOGGING_JSON_FORMAT"), False),
        app=app,
    )
    return _manager


def logger_manager() -> LoggerManager:
    """The active manager; outside an app a console-only default is built from env."""
    global _manager
    if _manager is None:
        try:
            return init_logger(current_app._get_current_object())
        except RuntimeError:
            _manager = LoggerManager(
                base_dir=os.getenv("LOGGING_BASE_DIR", "/tmp/nextdoor_logs"),
                default_level=_level(os.getenv("LOGGING_DEFAULT_LEVEL")),
                levels=env_level_overrides(),
                console=_flag(os.getenv("LOGGING_CONSOLE_ENABLED"), True),
                json_format=_flag(os.getenv("LOGGING_JSON_FORMAT"), False),
            )
    return _manager


def get_logger(category: str) -> logging.Logger:
    return logger_manager().get_logger(category)
