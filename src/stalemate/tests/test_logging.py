"""Tests for structured logging."""

from __future__ import annotations

import io

import orjson
import pytest

from stalemate.runtime.observability import (
    BoundLogger,
    ConsoleRenderer,
    MemoryRenderer,
    StaleMateLogLevel,
    configure_logging,
    default_level,
    get_logger,
    log_context,
)


def test_level_ordering() -> None:
    """NONE is the quietest; each level lets through everything above it."""
    assert StaleMateLogLevel.DEBUG < StaleMateLogLevel.INFO < StaleMateLogLevel.WARNING
    assert StaleMateLogLevel.WARNING < StaleMateLogLevel.ERROR < StaleMateLogLevel.NONE


@pytest.mark.parametrize(
    ("raw", "level"),
    [
        ("debug", StaleMateLogLevel.DEBUG),
        ("WARNING", StaleMateLogLevel.WARNING),
        (StaleMateLogLevel.NONE, StaleMateLogLevel.NONE),
        (40, StaleMateLogLevel.ERROR),
    ],
)
def test_parse_level(raw: object, level: StaleMateLogLevel) -> None:
    assert StaleMateLogLevel.parse(raw) is level  # type: ignore[arg-type]


def test_parse_unknown_level() -> None:
    with pytest.raises(ValueError):
        StaleMateLogLevel.parse("verbose")


def test_level_filtering() -> None:
    renderer = MemoryRenderer()
    log = BoundLogger(_renderer=renderer, _level=StaleMateLogLevel.WARNING)

    log.debug("hidden")
    log.info("hidden")
    log.warning("shown")
    log.error("also shown")

    assert renderer.events() == ["shown", "also shown"]


def test_none_level_is_silent() -> None:
    renderer = MemoryRenderer()
    log = BoundLogger(_renderer=renderer, _level=StaleMateLogLevel.NONE)

    log.error("nothing")

    assert renderer.entries == []


def test_bind_merges_context() -> None:
    renderer = MemoryRenderer()
    log = BoundLogger(context={"loader": "Users"}, _renderer=renderer, _level=StaleMateLogLevel.DEBUG)

    log.bind(source="remote").info("fetched", items=3)

    entry = renderer.entries[0]
    assert entry.level == "info"
    assert entry.context == {"loader": "Users", "source": "remote", "items": 3}
    assert log.context == {"loader": "Users"}


def test_with_level_keeps_context() -> None:
    log = BoundLogger(context={"loader": "Users"})
    louder = log.with_level("debug")

    assert louder.level is StaleMateLogLevel.DEBUG
    assert louder.context == log.context
    assert log.level is StaleMateLogLevel.NONE


def test_exception_includes_traceback() -> None:
    renderer = MemoryRenderer()
    log = BoundLogger(_renderer=renderer, _level=StaleMateLogLevel.ERROR)

    try:
        raise RuntimeError("bad")
    except RuntimeError as exc:
        log.exception("failed", exc)

    context = renderer.entries[0].context
    assert context["error"] == "bad"
    assert "RuntimeError" in str(context["exc_info"])


def test_log_context_scopes_keys() -> None:
    renderer = MemoryRenderer()
    log = BoundLogger(_renderer=renderer, _level=StaleMateLogLevel.INFO)

    with log_context(request_id="abc"):
        log.info("inside")
    log.info("outside")

    assert renderer.entries[0].context == {"request_id": "abc"}
    assert renderer.entries[1].context == {}


def test_json_output() -> None:
    out = io.StringIO()
    configure_logging(format="json", level="info", output=out)

    get_logger("stalemate.test", loader="Users").info("loaded", items=2)

    record = orjson.loads(out.getvalue().strip())
    assert record["event"] == "loaded"
    assert record["level"] == "info"
    assert record["loader"] == "Users"
    assert record["logger"] == "stalemate.test"
    assert record["items"] == 2
    assert "timestamp" in record


def test_console_output_without_colors() -> None:
    out = io.StringIO()
    renderer = ConsoleRenderer(output=out, colors=False, show_timestamp=False)
    log = BoundLogger(context={"loader": "Users"}, _renderer=renderer, _level=StaleMateLogLevel.DEBUG)

    log.warning("store failed", retry=False)

    assert out.getvalue().strip() == '[warning] store failed loader="Users" retry=false'


def test_configure_logging_sets_default_level() -> None:
    configure_logging(format="none", level="error")

    assert default_level() is StaleMateLogLevel.ERROR
    assert get_logger("x").level is StaleMateLogLevel.ERROR
    assert get_logger("x", level="debug").level is StaleMateLogLevel.DEBUG


def test_default_level_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STALEMATE_LOG_LEVEL", "info")

    assert default_level() is StaleMateLogLevel.INFO


def test_configure_logging_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        configure_logging(format="xml")
