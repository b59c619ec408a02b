"""
Event handler - the structured event stream of the profiler.

The profiler reports everything that happens on its control path
(handler start/stop, endpoint start/shutdown, bind and drain errors, hook
failures) by calling an EventHandler:

    handler(EventType.INFO, "start debug endpoint", address=":6666")

Handlers are called synchronously from the event loop and must return
quickly; the default forwards to the package logger.
"""

from typing import Any, Callable, Optional

from sigprof.models.enums import EventType, LogCategory, LogLevel
from sigprof.utils.logger import Logger, get_logger

EventHandler = Callable[..., None]

_LEVELS = {
    EventType.DEBUG: LogLevel.DEBUG,
    EventType.INFO: LogLevel.INFO,
    EventType.ERROR: LogLevel.ERROR,
}


def default_event_handler(logger: Optional[Logger] = None) -> EventHandler:
    """
    Build the default event handler.

    Events are written through the package logger under the PROFILER
    category; the logger's own min_level decides what is shown.

    Args:
        logger: Logger to write to (default: package singleton)

    Returns:
        EventHandler forwarding to the logger
    """
    log = (logger or get_logger()).for_category(LogCategory.PROFILER)

    def handle(event_type: EventType, message: str, **attrs: Any) -> None:
        log.log(message, _LEVELS.get(event_type, LogLevel.INFO), **attrs)

    return handle
