"""femtologging helpers shared by every repokeeper module.

Modules obtain a logger with :func:`get_logger` and emit messages through
the ``log_*`` helpers. Messages are interpolated before they reach
femtologging, so command tracing, workflow progress and migration
advisories all read the same way in the log.

Progress lines meant for the user (``WORKFLOW-PLAN:``, ``TASK-APPLY:``...)
are written to the workflow output sink instead; the log carries the
diagnostic trail behind them.

Example:
>>> from repokeeper.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Discovered %d repositories", 3)

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

DEFAULT_LOG_LEVEL = "INFO"


class LogLevel(enum.StrEnum):
    """Level names passed to femtologging."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_LEVEL_ALIASES: typ.Mapping[str, LogLevel] = {
    "WARN": LogLevel.WARNING,
    "FATAL": LogLevel.CRITICAL,
}


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Map a user-supplied level name onto a :class:`LogLevel`.

    Parameters
    ----------
    level : str | None
        Level name from ``REPOKEEPER_LOG_LEVEL``; case and surrounding
        whitespace are ignored, and ``WARN``/``FATAL`` are accepted as
        aliases.

    Returns
    -------
    tuple[str, bool]
        The level to configure, and ``True`` when ``level`` was unusable
        and :data:`DEFAULT_LOG_LEVEL` was substituted.

    """
    candidate = (level or "").strip().upper()
    if candidate in LogLevel.__members__:
        return (LogLevel[candidate].value, False)
    if candidate in _LEVEL_ALIASES:
        return (_LEVEL_ALIASES[candidate].value, False)
    return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Install femtologging's root handler at ``level`` for a CLI run.

    ``force`` replaces a handler installed earlier in the process. The
    result of :func:`normalize_log_level` is returned so the caller can
    warn about an unusable level once logging works.
    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into ``template``; no args leaves it untouched."""
    return template % args if args else template


class _SupportsLog(typ.Protocol):
    """The one femtologging logger method repokeeper calls."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: LogLevel,
    message: str,
    exc_info: object | None,
) -> None:
    logger.log(level.value, message, exc_info=exc_info, stack_info=False)


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Trace individual git/gh invocations and file rewrites."""
    _emit(logger, LogLevel.DEBUG, format_log_message(template, *args), exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Record run-level progress.

    Parameters
    ----------
    logger : _SupportsLog
        Destination logger.
    template : str
        Percent-style template, e.g. ``"running %d operations"``.
    *args : object
        Values for the template placeholders.
    exc_info : object | None, optional
        Exception to attach to the record.

    """
    _emit(logger, LogLevel.INFO, format_log_message(template, *args), exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Record a recoverable or advisory failure."""
    _emit(logger, LogLevel.WARNING, format_log_message(template, *args), exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Record a failure that stops the current command."""
    _emit(logger, LogLevel.ERROR, format_log_message(template, *args), exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Record ``message`` at ERROR with ``exc`` as the attached exception."""
    _emit(logger, LogLevel.ERROR, message, exc)


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
