"""Structured logging for loaders with bound context.

Every loader gets a logger bound to its own context (loader and handler
names) and filtered at its own level, so one noisy loader can be turned up
to DEBUG without touching the rest.

Quick Start:
    >>> from stalemate.runtime.observability import configure_logging, get_logger
    >>>
    >>> # Configure (once at startup)
    >>> configure_logging(format="console", level="debug")  # or "json" for production
    >>>
    >>> log = get_logger("stalemate.loader", loader="UserLoader")
    >>> log.info("remote data loaded", items=12)
    # => 10:30:45.123 [info] remote data loaded items=12 loader="UserLoader" logger="stalemate.loader"
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol, TextIO, TypeAlias, runtime_checkable

import orjson

if TYPE_CHECKING:
    from types import TracebackType

JsonValue: TypeAlias = "str | int | float | bool | None | list[JsonValue] | dict[str, JsonValue]"
JsonDict: TypeAlias = "dict[str, object]"

# Context var for scoped context (persists across awaits within a task)
_log_context: ContextVar[JsonDict] = ContextVar("log_context", default={})


class StaleMateLogLevel(IntEnum):
    """Public log levels, ordered from quietest to noisiest.

    NONE disables output entirely; each level includes everything above it.
    """
    NONE = logging.CRITICAL + 10
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG

    @classmethod
    def parse(cls, value: StaleMateLogLevel | str | int) -> StaleMateLogLevel:
        """Accept an enum member, its name in any case, or a stdlib level int."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value!r}") from None
        return cls(value)


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context.

    Immutable - bind() and with_level() return new loggers.

    Example:
        >>> log = BoundLogger(context={"loader": "UserLoader"})
        >>> log.bind(source="remote").info("fetch started")
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = StaleMateLogLevel.NONE

    @property
    def level(self) -> StaleMateLogLevel:
        return StaleMateLogLevel(self._level)

    def bind(self, **kw: object) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def with_level(self, level: StaleMateLogLevel | str | int) -> BoundLogger:
        """Create new logger filtering at a different level."""
        return BoundLogger(context=self.context, _renderer=self._renderer, _level=StaleMateLogLevel.parse(level))

    def is_enabled_for(self, level: int) -> bool:
        return level >= self._level

    def _log(self, level: int, event: str, **kw: object) -> None:
        if level < self._level:
            return
        merged = {**_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(LogEntry(time.time(), _level_name(level), event, merged))

    def debug(self, event: str, **kw: object) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: object) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: object) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: object) -> None: self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, exc: BaseException, **kw: object) -> None:
        """Log at error level with the formatted traceback of exc."""
        import traceback
        self._log(logging.ERROR, event, error=str(exc), exc_info="".join(traceback.format_exception(exc)), **kw)


@dataclass(slots=True)
class LogEntry:
    """Log entry with all merged context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm"""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """Human-readable console output: timestamp [level] event key=value ...

    Colors are auto-detected from the TTY unless forced.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = hasattr(self.output, "isatty") and self.output.isatty()

    def render(self, entry: LogEntry) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        parts: list[str] = []
        if self.show_timestamp:
            parts.append(f"{c['dim']}{entry.ts_human}{c['reset']}")
        parts.append(f"{_LEVEL_COLORS.get(entry.level, c['dim']) if self.colors else ''}[{entry.level}]{c['reset']}")
        parts.append(f"{c['bold']}{entry.event}{c['reset']}")
        for k, v in sorted(entry.context.items()):
            if k == "exc_info":
                continue
            parts.append(f"{c['cyan']}{k}{c['reset']}={_format_value(v, c)}")
        print(" ".join(parts), file=self.output)
        if "exc_info" in entry.context:
            print(f"{c['red']}{entry.context['exc_info']}{c['reset']}", file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        data = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(data, default=str, option=orjson.OPT_NON_STR_KEYS).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer."""

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class MemoryRenderer:
    """Keeps entries in a list. Handy for asserting on log output in tests."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: LogRenderer | None = None
_default_level: StaleMateLogLevel | None = None


def configure_logging(
    format: str = "console",  # noqa: A002 - matches the settings field name
    level: StaleMateLogLevel | str = StaleMateLogLevel.INFO,
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Configure process-wide structured logging.

    Args:
        format: "console" (human), "json" (machine) or "none"
        level: Default level for loggers created afterwards
        output: Output stream (default: stderr for console, stdout for json)
        colors: Force colors on/off (None = auto-detect)

    Returns:
        The installed renderer
    """
    global _renderer, _default_level
    renderer: LogRenderer
    if format == "console":
        renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
    elif format == "json":
        renderer = JsonRenderer(output=output or sys.stdout)
    elif format == "none":
        renderer = NoOpRenderer()
    else:
        raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _renderer = renderer
    _default_level = StaleMateLogLevel.parse(level)
    return renderer


def set_renderer(renderer: LogRenderer | None) -> None:
    """Install a renderer directly (None restores settings-based default)."""
    global _renderer
    _renderer = renderer


def reset_logging() -> None:
    """Drop configured renderer and level (useful for testing)."""
    global _renderer, _default_level
    _renderer = None
    _default_level = None


def default_level() -> StaleMateLogLevel:
    """Level from configure_logging(), falling back to settings."""
    if _default_level is not None:
        return _default_level
    from stalemate.foundation.config import get_settings
    return StaleMateLogLevel.parse(get_settings().logging.level)


def get_logger(
    name: str | None = None,
    *,
    level: StaleMateLogLevel | str | None = None,
    **initial_context: object,
) -> BoundLogger:
    """Get a structured logger with optional initial context.

    Args:
        name: Logger name (added to context as 'logger')
        level: Filter level (defaults to the configured default)
        **initial_context: Initial bound key-value pairs
    """
    ctx: JsonDict = dict(initial_context)
    if name:
        ctx["logger"] = name
    resolved = default_level() if level is None else StaleMateLogLevel.parse(level)
    return BoundLogger(context=ctx, _level=resolved)


def _get_renderer() -> LogRenderer:
    global _renderer
    if _renderer is None:
        from stalemate.foundation.config import get_settings
        cfg = get_settings().logging
        if cfg.format == "json":
            _renderer = JsonRenderer()
        elif cfg.format == "none":
            _renderer = NoOpRenderer()
        else:
            _renderer = ConsoleRenderer(colors=cfg.colors)
    return _renderer


class log_context:
    """Context manager adding key-value pairs to every entry logged within it.

    Example:
        >>> with log_context(request_id="abc123"):
        ...     await loader.refresh()  # entries include request_id
    """

    __slots__ = ("_ctx", "_token")

    def __init__(self, **kw: object) -> None:
        self._ctx: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _log_context.reset(self._token)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
    "white": "\033[37m",
}

_NO_COLORS = {k: "" for k in _COLORS}

_LEVEL_COLORS = {
    "debug": _COLORS["dim"],
    "info": _COLORS["blue"],
    "warning": _COLORS["yellow"],
    "error": _COLORS["red"],
}


def _level_name(level: int) -> str:
    return logging.getLevelName(level).lower()


def _format_value(v: object, c: dict[str, str]) -> str:
    if isinstance(v, str):
        return f'{c["yellow"]}"{v}"{c["reset"]}'
    if isinstance(v, bool):
        return f'{c["blue"]}{str(v).lower()}{c["reset"]}'
    if isinstance(v, (int, float)):
        return f'{c["blue"]}{v}{c["reset"]}'
    if isinstance(v, dict):
        return f'{c["dim"]}{{{len(v)} items}}{c["reset"]}'
    if isinstance(v, (list, tuple)):
        return f'{c["dim"]}[{len(v)} items]{c["reset"]}'
    return f'{c["white"]}{v!r}{c["reset"]}'
