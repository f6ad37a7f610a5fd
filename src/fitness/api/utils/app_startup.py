"""Process-wide logging setup shared by the three services and the CLI."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.fitness.runtime.config.config_data import LoggingConfig
from src.fitness.runtime.context import get_config

# Third-party loggers that are too chatty at DEBUG/INFO
_STDLIB_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # request_logging middleware writes the access lines
        if record.name == "uvicorn.access":
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _line_format(service_name: str) -> str:
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        f"<magenta>{service_name}</magenta> | "
        "[<cyan>{extra[request_id]}</cyan>] | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )


def _add_file_sink(cfg: LoggingConfig, line_format: str, verbose: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    as_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if as_json else line_format,
        serialize=as_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose,
        diagnose=verbose,
    )


def _route_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers = []
        existing.propagate = True
    for name, level in _STDLIB_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging(service_name: str = "fitness") -> None:
    """Reset loguru for ``service_name`` and capture stdlib logging.

    Every record carries ``request_id`` (``-`` outside a request) and
    ``service`` extras, so sinks can always format them.
    """
    main_config = get_config()
    cfg = main_config.logging
    env = main_config.app.environment
    verbose = env != "production"

    logger.remove()
    logger.configure(
        extra={"request_id": "-", "service": service_name},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )

    line_format = _line_format(service_name)
    logger.add(
        sys.stderr,
        level=cfg.level,
        format=line_format,
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )
    if cfg.file:
        _add_file_sink(cfg, line_format, verbose)

    _route_stdlib_logging()

    logger.info(
        "Logging configured for {}",
        service_name,
        app_level=cfg.level,
        app_format=cfg.format,
        app_file=cfg.file,
        environment=env,
    )
