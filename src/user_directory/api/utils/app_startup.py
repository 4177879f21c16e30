"""Loguru setup for the API process."""

import inspect
import logging
import sys
from pathlib import Path

from loguru import logger

from src.user_directory.runtime.config.config_data import ConfigData, LoggingConfig
from src.user_directory.runtime.context import get_config

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers routed into loguru
FORWARDED_LOGGERS = ("uvicorn", "uvicorn.error", "sqlalchemy.engine", "sqlalchemy.pool")


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, verbose_errors: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    is_json = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if is_json else PLAIN_FORMAT,
        serialize=is_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose_errors,
        diagnose=verbose_errors,
    )


def _intercept_stdlib(main_config: ConfigData) -> None:
    handler = InterceptHandler()
    for name in FORWARDED_LOGGERS:
        stdlog = logging.getLogger(name)
        stdlog.handlers = [handler]
        stdlog.propagate = False

    # Request lines come from the HTTP middleware
    logging.getLogger("uvicorn.access").disabled = True

    sql_level = logging.INFO if main_config.database.echo else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def configure_logging(main_config: ConfigData | None = None) -> None:
    main_config = main_config or get_config()
    cfg = main_config.logging
    env = main_config.app.environment
    # Variable values in tracebacks can hold user data
    verbose_errors = env != "production"

    logger.remove()
    logger.configure(
        extra={"request_id": "-"},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )

    logger.add(
        sys.stderr,
        level=cfg.level,
        format=PLAIN_FORMAT,
        colorize=True,
        backtrace=verbose_errors,
        diagnose=verbose_errors,
    )
    if cfg.file:
        _add_file_sink(cfg, verbose_errors)

    _intercept_stdlib(main_config)

    logger.info(
        "Logging configured",
        app_level=cfg.level,
        app_format=cfg.format,
        app_file=cfg.file,
        environment=env,
    )
