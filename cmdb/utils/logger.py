"""
Logging configuration

structlog renders each event and hands the line to the stdlib ``logging``
tree, so the stdout handler and the optional log file receive the same
output. Module loggers are created with ``setup_logger(__name__)`` at import
time; ``configure_from_settings`` re-applies level and file once the config
has been loaded.
"""
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

import structlog

if TYPE_CHECKING:
    from .config import LoggingConfig


LOGGER_NAME = "cmdb"

_configured = False


def _resolve_level(level: str) -> int:
    log_level = logging.getLevelName(str(level).upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")
    return log_level


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    return handlers


def _configure(level: str, log_file: Optional[str]) -> None:
    global _configured

    log_level = _resolve_level(level)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=_build_handlers(log_file),
        force=True
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False
    )
    _configured = True


def setup_logger(
    name: Optional[str] = None,
    level: str = "INFO",
    log_file: Optional[str] = None
) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    The first call installs a default configuration; later calls never
    override what ``configure_from_settings`` applied.
    """
    if not _configured:
        _configure(level, log_file)
    return structlog.get_logger(name or LOGGER_NAME)


def configure_from_settings(settings: "LoggingConfig") -> structlog.stdlib.BoundLogger:
    """Apply the ``logging`` config section (called at startup)"""
    _configure(settings.level, settings.file)

    logger = structlog.get_logger(LOGGER_NAME)
    logger.info("Logging configured", level=settings.level.upper(), file=settings.file)
    return logger
