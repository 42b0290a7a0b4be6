"""structlog setup for the reservation core.

Events that carry a ``hotel_id`` are prefixed with it, followed by the
confirmation number when one is bound, so a booking can be followed across
steps in either output format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from hotel_pms.config.settings import LoggingSettings, settings

NOISY_LOGGERS = ("httpcore", "httpx", "redis")


def add_booking_prefix(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Prefix the event with ``[hotel_id]`` or ``[hotel_id confirmation_number]``.

    Args:
        logger: The wrapped logger
        method_name: Name of the log method called
        event_dict: Event being rendered

    Returns:
        The event dictionary, prefixed when a hotel is bound
    """
    hotel_id = event_dict.get("hotel_id")
    if not hotel_id:
        return event_dict

    scope = hotel_id
    confirmation_number = event_dict.get("confirmation_number")
    if confirmation_number:
        scope = f"{hotel_id} {confirmation_number}"
    event_dict["event"] = f"[{scope}] {event_dict.get('event', '')}"
    return event_dict


def _stdlib_handler(config: LoggingSettings, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if config.format == "json":
        handler.setFormatter(jsonlogger.JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler.setLevel(level)
    return handler


def configure_logging(config: Optional[LoggingSettings] = None) -> None:
    """Route structlog through the stdlib root logger.

    Args:
        config: Logging settings, defaults to the global ones
    """
    config = config or settings.logging
    level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_stdlib_handler(config, level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_booking_prefix,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    return structlog.get_logger(name)
