"""Structured logging for the proxy and CLI.

Loggers are tagged once at import time::

    log = Log.create({"service": "server.proxy"})
    log.warn("could not parse JSON body", {"error": str(e)})

and every event becomes one line on stderr and/or in a log file under the
data directory, rendered as ``key=value`` pairs, JSON or a pretty form.
"""

import json
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

from ..core.global_paths import GlobalPath

MAX_LOG_FILES = 10
LOG_FILE_GLOB = "????-??-??T??????.log"


class LogLevel(str, Enum):
    """Log severity levels, lowest first."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def priority(self) -> int:
        return _PRIORITY[self]

    @classmethod
    def parse(cls, value: str | None) -> "LogLevel":
        if value is None:
            return cls.INFO
        text = value.strip().upper()
        if text == "WARNING":
            return cls.WARN
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"invalid log level: {value}") from None


_PRIORITY = {level: index for index, level in enumerate(LogLevel)}


class LogFormat(str, Enum):
    """Log line format."""

    KV = "kv"
    JSON = "json"
    PRETTY = "pretty"

    @classmethod
    def parse(cls, value: str | None) -> "LogFormat":
        if value is None:
            return cls.KV
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"invalid log format: {value}") from None


@dataclass
class LogConfig:
    """Process-wide sink settings."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.KV
    console: bool = True
    file: bool = False
    path: Optional[Path] = None
    handle: Optional[TextIO] = None


_config = LogConfig()
_previous = time.monotonic()

Event = Dict[str, Any]


def _plain(value: Any) -> Any:
    if isinstance(value, BaseException):
        text, cause, depth = str(value), value.__cause__, 0
        while cause is not None and depth < 10:
            text += f" Caused by: {cause}"
            cause, depth = cause.__cause__, depth + 1
        return text
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str, dict, list, tuple)):
        return value
    return str(value)


def _compact(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def _kv_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return _compact(value)
    text = str(value)
    if not text or "=" in text or any(ch.isspace() for ch in text):
        return json.dumps(text, ensure_ascii=False)
    return text


def _fields(event: Event) -> str:
    skip = ("time", "delta_ms", "level", "msg")
    return " ".join(f"{key}={_kv_value(value)}" for key, value in event.items() if key not in skip)


def _render_kv(event: Event) -> str:
    head = f"{event['time']} +{event['delta_ms']}ms level={event['level']} msg={_kv_value(event['msg'])}"
    tail = _fields(event)
    return f"{head} {tail}" if tail else head


def _render_pretty(event: Event) -> str:
    tail = _fields(event)
    suffix = f" ({tail})" if tail else ""
    return f"{event['time']} {event['level'].upper()} {event['msg'] or ''}{suffix} +{event['delta_ms']}ms"


_RENDERERS: Dict[LogFormat, Callable[[Event], str]] = {
    LogFormat.KV: _render_kv,
    LogFormat.JSON: _compact,
    LogFormat.PRETTY: _render_pretty,
}


class Logger:
    """Logger bound to a fixed set of tags."""

    def __init__(self, tags: Optional[Dict[str, Any]] = None):
        self.tags = dict(tags or {})

    def _emit(self, level: LogLevel, message: Any, extra: Optional[Dict[str, Any]]) -> None:
        global _previous

        if level.priority < _config.level.priority:
            return

        now = time.monotonic()
        event: Event = {
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "delta_ms": int((now - _previous) * 1000),
            "level": level.value.lower(),
            "msg": _plain(message),
        }
        _previous = now
        for key, value in {**self.tags, **(extra or {})}.items():
            if value is not None:
                event[key] = _plain(value)

        line = _RENDERERS[_config.format](event) + "\n"
        if _config.console:
            sys.stderr.write(line)
            sys.stderr.flush()
        if _config.handle is not None:
            _config.handle.write(line)
            _config.handle.flush()

    def debug(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.DEBUG, message, extra)

    def info(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.INFO, message, extra)

    def warn(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.WARN, message, extra)

    def error(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.ERROR, message, extra)


class Log:
    """Logger factory and sink configuration."""

    _loggers: Dict[str, Logger] = {}

    @classmethod
    def create(cls, tags: Optional[Dict[str, Any]] = None) -> Logger:
        """Return the logger for ``tags["service"]``, creating it once."""
        tags = tags or {}
        service = tags.get("service")
        if not isinstance(service, str) or not service:
            return Logger(tags)
        if service not in cls._loggers:
            cls._loggers[service] = Logger(tags)
        return cls._loggers[service]

    @classmethod
    def configure(
        cls,
        *,
        level: LogLevel | None = None,
        format: LogFormat | None = None,
        console: bool | None = None,
        file: bool | None = None,
        dev: bool = False,
    ) -> None:
        """Update sink settings; unset arguments keep their current value.

        Args:
            level: Minimum level to emit
            format: Line format
            console: Write to stderr
            file: Write to a log file under the data directory
            dev: Use a fixed ``dev.log`` instead of a timestamped file
        """
        if level is not None:
            _config.level = level
        if format is not None:
            _config.format = format
        if console is not None:
            _config.console = console
        if file is not None:
            _config.file = file

        cls.close()
        _config.path = None
        if _config.file:
            cls._open_file(dev)

    @classmethod
    def _open_file(cls, dev: bool) -> None:
        log_dir = Path(GlobalPath.log())
        log_dir.mkdir(parents=True, exist_ok=True)
        cls._cleanup_logs(log_dir)
        name = "dev.log" if dev else datetime.now().strftime("%Y-%m-%dT%H%M%S.log")
        _config.path = log_dir / name
        _config.handle = _config.path.open("w", encoding="utf-8")

    @classmethod
    def file(cls) -> str:
        """Path of the active log file, or ``""``."""
        return str(_config.path) if _config.path else ""

    @classmethod
    def level(cls) -> LogLevel:
        return _config.level

    @classmethod
    def _cleanup_logs(cls, log_dir: Path) -> None:
        """Keep only the newest timestamped log files."""
        files = sorted(log_dir.glob(LOG_FILE_GLOB), key=lambda p: p.stat().st_mtime)
        for stale in files[:-MAX_LOG_FILES]:
            stale.unlink(missing_ok=True)

    @classmethod
    def close(cls) -> None:
        if _config.handle is not None:
            _config.handle.close()
            _config.handle = None
