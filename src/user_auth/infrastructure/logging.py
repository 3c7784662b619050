"""Process logging setup for the user auth API."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Request lines come from RequestLoggingMiddleware; SQL echo stays off unless asked for.
_QUIETED_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def resolve_log_level(level: str) -> int:
    """Map a level name such as `debug` to its logging constant, defaulting to INFO."""

    normalized = level.strip().upper()
    resolved = logging.getLevelName(normalized) if normalized else logging.INFO
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str) -> None:
    """Configure root logging once per process with the runtime level."""

    resolved_level = resolve_log_level(level)
    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)
    logging.getLogger().setLevel(resolved_level)

    for name, quiet_level in _QUIETED_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, resolved_level))
