import logging
import logging.handlers
import sys

import structlog

from infrastructure.config import Settings, settings

_HANDLER_NAME = "image_host"
_THIRD_PARTY_LOGGERS = ("botocore", "aiobotocore", "s3fs", "fsspec", "urllib3")


def setup_logging(app_settings: Settings | None = None) -> None:
    """Configure unified logging for structlog, uvicorn, and standard library.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than duplicated.
    """
    app_settings = app_settings or settings

    app_settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = app_settings.log_dir / f"{app_settings.app_env}.log"

    common_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if app_settings.app_env == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *common_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=common_processors,
        processor=renderer,
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler.set_name(_HANDLER_NAME)

    file_handler = logging.handlers.TimedRotatingFileHandler(
        log_file,
        when="midnight",
        interval=1,
        backupCount=7,
    )
    file_handler.setFormatter(formatter)
    file_handler.set_name(_HANDLER_NAME)

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if h.get_name() == _HANDLER_NAME]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.addHandler(stream_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(app_settings.log_level.upper())

    # Intercept Uvicorn/FastAPI logs
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [stream_handler, file_handler]
        logging_logger.propagate = False

    # Object store clients log every request at DEBUG
    for logger_name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
