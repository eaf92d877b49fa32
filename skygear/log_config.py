"""
日志配置
structlog on top of stdlib logging, same processor chain as the API service.
"""
import logging

import structlog

from skygear.config import get_settings

# Chatty transport libraries only log warnings and above
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "urllib3")


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """设置日志系统

    ``fmt`` is ``"console"`` or ``"json"``; both default to the values in
    ``SkygearSettings``.
    """
    settings = get_settings()
    level = (level or settings.LOG_LEVEL).upper()
    fmt = fmt or settings.LOG_FORMAT

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    for logger_name in THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer() if fmt == "console" else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
