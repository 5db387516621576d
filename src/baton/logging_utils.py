"""Runtime logging helpers."""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Generator
from contextvars import ContextVar
from logging import Handler
from typing import Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

from .config import Settings, get_settings

LogProfile = Literal["default", "rich"]

_PROFILE_FORMATS: dict[LogProfile, str] = {
    "rich": "{extra[run_id]} | {message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[run_id]} | {message}",
}
_CONFIGURED_PROFILE: LogProfile | None = None
_run_context: ContextVar[str] = ContextVar("run_id")


def current_run() -> str:
    """Get the id of the run executing in this context."""
    return _run_context.get("-")


@contextlib.contextmanager
def bind_run(run_id: str) -> Generator[str, None, None]:
    token = _run_context.set(run_id)
    try:
        yield run_id
    finally:
        _run_context.reset(token)


def _build_rich_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(
    *,
    profile: LogProfile | None = None,
    level: str | None = None,
    settings: Settings | None = None,
) -> None:
    """Configure process-level logging once per profile.

    Arguments left unset fall back to ``log_profile`` and ``log_level`` of
    the settings, which read ``BATON_LOG_PROFILE`` and ``BATON_LOG_LEVEL``.
    """

    def inject_context(record: loguru.Record) -> None:
        record["extra"]["run_id"] = current_run()

    global _CONFIGURED_PROFILE
    settings = settings or get_settings()
    profile = profile or settings.log_profile
    if profile == _CONFIGURED_PROFILE:
        return

    resolved_level = (level or settings.log_level).upper()
    logger.remove()
    if profile == "rich":
        logger.add(
            _build_rich_handler(),
            level=resolved_level,
            format=_PROFILE_FORMATS[profile],
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=resolved_level,
            format=_PROFILE_FORMATS[profile],
            backtrace=False,
            diagnose=False,
        )
    logger.configure(patcher=inject_context)
    _CONFIGURED_PROFILE = profile
