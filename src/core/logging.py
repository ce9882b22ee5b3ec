"""
Logging setup shared by the API process and standalone ingestion jobs.

Console output always; when a log directory is configured, ``combined.log``
receives INFO and above and ``error.log`` receives ERROR and above.
"""

import logging
import os

import structlog

SERVICE_NAME = "tech-news-extractor"


def _add_service_name(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _file_handler(path: str, level: int) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def apply_logging_preferences() -> None:
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def configure_logging(settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)
        handlers.append(_file_handler(os.path.join(settings.log_dir, "combined.log"), logging.INFO))
        handlers.append(_file_handler(os.path.join(settings.log_dir, "error.log"), logging.ERROR))

    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)
    apply_logging_preferences()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_service_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
