"""Logging, events and profiling spans for the editor, backed by telelog.

Callers use :func:`get_logger`, :func:`record_event` and :func:`span`;
:func:`configure` swaps the active telelog configuration, either for an
explicit ``telelog.Config`` or for one of the named presets.

Nothing is written to the console unless ``QUIRKS_LOG_CONSOLE`` is set,
since the terminal normally belongs to the host application.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "QUIRKS_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "quirks")

_TRUTHY = frozenset({"1", "true", "yes", "on"})

_state: Dict[str, Any] = {"config": None, "loggers": {}}


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read ``QUIRKS_<name>`` from the environment."""
    return os.getenv(ENV_PREFIX + name, default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _development(config: Any) -> None:
    config.with_min_level("DEBUG")
    config.with_console_output(True)
    config.with_colored_output(True)
    config.with_json_format(False)


def _production(config: Any) -> None:
    config.with_min_level("INFO")
    config.with_console_output(False)
    config.with_file_output(env("LOG_FILE") or "quirks.log")
    config.with_buffering(True)


def _quiet(config: Any) -> None:
    config.with_min_level("ERROR")
    config.with_console_output(False)


def _from_environment(config: Any) -> None:
    config.with_min_level((env("LOG_LEVEL") or "INFO").upper())
    console = env_flag("LOG_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not env_flag("NO_COLOR", False))
    if env_flag("LOG_JSON", False):
        config.with_json_format(True)
    if env("LOG_FILE"):
        config.with_file_output(env("LOG_FILE"))
    if env_flag("LOG_BUFFERED", False):
        config.with_buffering(True)
        config.with_buffer_size(int(env("LOG_BUFFER_SIZE") or "2048"))


PRESETS: Dict[str, Callable[[Any], None]] = {
    "development": _development,
    "production": _production,
    "quiet": _quiet,
}


def _build(setup: Callable[[Any], None]) -> Any:
    config = tl.Config()
    setup(config)
    config.with_profiling(True)
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Install a new telelog configuration and drop cached loggers.

    ``preset`` names one of :data:`PRESETS`; ``config`` adopts a prepared
    ``telelog.Config``. With neither, settings come from ``QUIRKS_LOG_*``
    environment variables.
    """

    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset:
        setup = PRESETS.get(preset.lower())
        if setup is None:
            raise ValueError(f"Unknown preset '{preset}'.")
        config = _build(setup)
    elif config is None:
        config = _build(_from_environment)
    else:
        config.with_profiling(True)
    _state["config"] = config
    _state["loggers"].clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` for ``name``."""

    if _state["config"] is None:
        _state["config"] = _build(_from_environment)
    loggers: Dict[str, Any] = _state["loggers"]
    key = name or DEFAULT_LOGGER_NAME
    found = loggers.get(key)
    if found is None:
        found = loggers[key] = tl.Logger.with_config(key, _state["config"])
    return found


def _emit(log: Any, level: Any, message: str, payload: Dict[str, Any]) -> None:
    # telelog loggers expose ``<level>_with`` for structured pairs
    name = str(level).lower()
    structured = getattr(log, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in payload.items()])
        return
    plain = getattr(log, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str | Any = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` carrying ``data``."""

    payload = {"event": name}
    payload.update(data or {})
    _emit(get_logger(logger_name), level, f"event::{name}", payload)


@dataclass
class SpanHandle:
    """Yielded by :func:`span`; collects metadata reported on failure or notes."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        self._report("error", "span::fail", reason=reason)

    def note(self, message: str, **extra: Any) -> None:
        self._report("debug", f"span::{message}", **extra)

    def _report(self, level: str, message: str, **extra: Any) -> None:
        payload: Dict[str, Any] = {"span": self.span_name}
        payload.update(self.metadata)
        if self.component_name:
            payload["component"] = self.component_name
        payload.update(extra)
        _emit(self.logger, level, message, payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the enclosed block under ``name``.

    A string ``component`` is tracked as a telelog component for the
    duration; ``True`` tracks ``name`` itself. ``metadata`` becomes logger
    context while the block runs and is removed afterwards. Exceptions are
    reported through :meth:`SpanHandle.fail` and re-raised.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if isinstance(component_name, str):
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        handle = SpanHandle(log, name, component_name, dict(context))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


configure()
logger = get_logger()

__all__ = [
    "PRESETS",
    "SpanHandle",
    "configure",
    "env",
    "env_flag",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
