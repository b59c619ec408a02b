"""
Console logger for sigprof

One line per record, grouped by category, with optional key/value details
rendered as a tree underneath:

    [14:23:45] ENDPOINT  ✓ start debug endpoint
               └─ address: :6666

Modules bind a category once at import time:

    log = get_logger().for_category(LogCategory.SIGNAL)
    log.debug("Handler installed", signal="SIGUSR1")
"""

import sys
from datetime import datetime
from typing import Iterable, List, Optional, TextIO

from sigprof.models.enums import LogLevel, LogCategory


# === ANSI COLORS ===
class Colors:
    RESET = '\033[0m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    BRIGHT_BLUE = '\033[94m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_WHITE = '\033[97m'


CATEGORY_COLORS = {
    LogCategory.CONFIG: Colors.CYAN,
    LogCategory.SYSTEM: Colors.BRIGHT_WHITE,
    LogCategory.SIGNAL: Colors.BRIGHT_MAGENTA,
    LogCategory.PROFILER: Colors.BRIGHT_CYAN,
    LogCategory.ENDPOINT: Colors.BRIGHT_BLUE,
    LogCategory.HOOK: Colors.MAGENTA,
    LogCategory.API: Colors.BLUE,
    LogCategory.SHUTDOWN: Colors.YELLOW,
}

# symbol, color, priority
LEVEL_STYLES = {
    LogLevel.DEBUG: ('·', Colors.DIM, 0),
    LogLevel.INFO: ('✓', Colors.GREEN, 1),
    LogLevel.WARN: ('⚠', Colors.YELLOW, 2),
    LogLevel.ERROR: ('✗', Colors.RED, 3),
}

DETAIL_INDENT = " " * 11


class Logger:
    """
    Category logger writing to a text stream.

    Args:
        min_level: Records below this level are discarded
        use_colors: Emit ANSI color codes
        stream: Target stream (default: sys.stdout, looked up on every write
                so pytest's capsys and stream redirection keep working)
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.min_level = min_level
        self.use_colors = use_colors
        self.stream = stream

    def enabled(self, level: LogLevel) -> bool:
        return LEVEL_STYLES[level][2] >= LEVEL_STYLES[self.min_level][2]

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{Colors.RESET}" if self.use_colors else text

    def _headline(self, category: LogCategory, message: str, level: LogLevel) -> str:
        symbol, color, _ = LEVEL_STYLES[level]
        timestamp = datetime.now().strftime('[%H:%M:%S]')
        cat = self._paint(category.name.ljust(9), CATEGORY_COLORS.get(category, Colors.WHITE))
        return f"{timestamp} {cat} {self._paint(symbol, color)} {self._paint(message, color)}"

    def _detail_lines(self, details: Iterable[str]) -> List[str]:
        details = list(details)
        lines = []
        for i, detail in enumerate(details):
            branch = "└─" if i == len(details) - 1 else "├─"
            lines.append(f"{DETAIL_INDENT}{self._paint(branch, Colors.DIM)} {detail}")
        return lines

    def _write(self, lines: List[str]) -> None:
        out = self.stream or sys.stdout
        out.write("\n".join(lines) + "\n")
        out.flush()

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[list] = None,
        **kwargs
    ):
        """
        Write one record.

        Args:
            category: Log category
            message: Headline text
            level: Severity
            details: Preformatted detail strings, shown before kwargs
            **kwargs: Rendered as "key: value" details
        """
        if not self.enabled(level):
            return

        extra = [f"{k}: {v}" for k, v in kwargs.items()]
        lines = [self._headline(category, message, level)]
        lines.extend(self._detail_lines(list(details or []) + extra))
        self._write(lines)

    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self, category)


class BoundLogger:
    """Logger with a default category."""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self._category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        self._base.log(category or self._category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)

    def with_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self._base, category)


# === Process-wide instance ===
_logger = Logger()


def get_logger() -> Logger:
    return _logger


def configure_logger(min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
    """
    Reconfigure the shared logger in place.

    Bound loggers created at import time keep pointing at the same instance,
    so they pick up the new settings immediately.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
