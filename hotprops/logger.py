import logging
import os

import structlog
from structlog.types import EventDict, Processor


def drop_color_message_key(_, __, event_dict: EventDict) -> EventDict:
    """
    Some servers log the message a second time in the extra `color_message`.
    This processor drops the key from the event dict if it exists.
    """
    event_dict.pop("color_message", None)
    return event_dict


def setup_logging(json_logs: bool = False, log_level: str = "INFO"):
    """Configure structlog for the hotprops package"""

    # Leave an application's own structlog setup alone
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if (isinstance(handler, logging.StreamHandler) and
                isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)):
            return

    timestamper = structlog.processors.TimeStamper(fmt="iso")

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),
        drop_color_message_key,
        timestamper,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        # Format the exception only for JSON logs, as we want to pretty-print them when
        # using the ConsoleRenderer
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_renderer: structlog.types.Processor
    if json_logs:
        log_renderer = structlog.processors.JSONRenderer()
    else:
        log_renderer = structlog.dev.ConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        # These run ONLY on `logging` entries that do NOT originate within
        # structlog.
        foreign_pre_chain=shared_processors,
        # These run on ALL entries after the pre_chain is done.
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            log_renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())


def get_hotprops_logger(log_name: str = "hotprops") -> structlog.stdlib.BoundLogger:
    """
    Return the package logger. Components bind their own context, e.g.
    ``get_hotprops_logger().bind(component="PropertiesManager")``.
    """
    return structlog.stdlib.get_logger(log_name)


def init_logger(log_level: str = None, json_logs: bool = None):
    """
    Initialize structured logging for an application embedding hotprops.

    Args:
        log_level: Level name, defaults to $HOTPROPS_LOG_LEVEL or INFO
        json_logs: Render JSON, defaults to $HOTPROPS_JSON_LOGS

    Returns:
        The package logger
    """
    if log_level is None:
        log_level = os.environ.get("HOTPROPS_LOG_LEVEL", "INFO")
    if json_logs is None:
        json_logs = os.environ.get("HOTPROPS_JSON_LOGS", "").lower() in ("1", "true", "yes")

    setup_logging(json_logs=json_logs, log_level=log_level)
    return get_hotprops_logger()
