"""
Log formatters for the restbase logging system.

Records are rendered as Rich renderables: a single line for routine request
traffic, or, in debug mode, the line followed by the record's context table
and traceback.
"""
import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from rich.console import Console, ConsoleRenderable, Group
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.traceback import Traceback

from .emojis import LEVEL_EMOJIS, UNKNOWN, get_emoji
from .themes import get_component_style, get_level_style

# Characters of a request id shown in the one-line header
REQUEST_ID_WIDTH = 8


class RestLogRecord:
    """The fields restbase renders for one log record."""

    def __init__(
        self,
        level: str,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        emoji: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
        created: Optional[float] = None,
        exc_info: Optional[Tuple] = None,
    ):
        self.level = level.lower()
        self.message = message
        self.component = component.lower() if component else None
        self.operation = operation.lower() if operation else None
        self.custom_emoji = emoji
        self.context = context or {}
        self.request_id = request_id
        self.created = created or time.time()
        self.exc_info = exc_info

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "RestLogRecord":
        """Read the extras set by :class:`~restbase.utils.logging.logger.Logger`."""
        return cls(
            level=record.levelname,
            message=record.getMessage(),
            component=getattr(record, "component", None),
            operation=getattr(record, "operation", None),
            emoji=getattr(record, "emoji", None),
            context=getattr(record, "context", None),
            request_id=getattr(record, "request_id", None),
            created=record.created,
            exc_info=record.exc_info or None,
        )

    @property
    def emoji(self) -> str:
        """Custom emoji, else the operation's, else the level's."""
        if self.custom_emoji:
            return self.custom_emoji
        if self.operation:
            operation_emoji = get_emoji("operation", self.operation)
            if operation_emoji != UNKNOWN:
                return operation_emoji
        return LEVEL_EMOJIS.get(self.level, UNKNOWN)

    @property
    def clock(self) -> str:
        return datetime.fromtimestamp(self.created).strftime("%H:%M:%S.%f")[:-3]


class RestLogFormatter:
    """Base formatter that converts records to Rich renderables."""

    def __init__(self, show_time: bool = True, show_request_id: bool = True):
        self.show_time = show_time
        self.show_request_id = show_request_id

    def header(self, record: RestLogRecord) -> Text:
        """One line: time, emoji, level, component, operation, message, request id."""
        level_style = get_level_style(record.level)
        line = Text()

        if self.show_time:
            line.append(f"[{record.clock}] ", style="timestamp")
        line.append(f"{record.emoji} [{record.level.upper()}] ", style=level_style)
        if record.component:
            line.append(f"[{record.component}] ", style=get_component_style(record.component))
        if record.operation:
            line.append(f"{record.operation}: ", style="operation")
        line.append(record.message)
        if self.show_request_id and record.request_id:
            line.append(f" (req {record.request_id[:REQUEST_ID_WIDTH]})", style="timestamp")

        return line

    def format_record(self, record: RestLogRecord) -> ConsoleRenderable:
        raise NotImplementedError("Subclasses must implement format_record")


class SimpleLogFormatter(RestLogFormatter):
    """Single-line formatter for request traffic."""

    def format_record(self, record: RestLogRecord) -> Text:
        return self.header(record)


class DetailedLogFormatter(RestLogFormatter):
    """Header plus the context table and traceback; errors are boxed."""

    def format_record(self, record: RestLogRecord) -> ConsoleRenderable:
        header = self.header(record)
        if not record.context and not record.exc_info:
            return header

        parts = [header]
        if record.context:
            table = Table(box=None, show_header=False, padding=(0, 1))
            table.add_column(style="bright_black")
            table.add_column()
            for key, value in record.context.items():
                table.add_row(str(key), str(value))
            parts.append(table)
        if record.exc_info:
            parts.append(Traceback.from_exception(*record.exc_info))

        if record.level in ("error", "critical"):
            return Panel(
                Group(*parts),
                title=f"{record.level.upper()} in {record.component or 'restbase'}",
                border_style=get_level_style(record.level),
            )
        return Group(*parts)


class RichLoggingHandler(RichHandler):
    """Rich logging handler that renders records with a restbase formatter."""

    def __init__(
        self,
        level: int = logging.NOTSET,
        console: Optional[Console] = None,
        formatter: Optional[RestLogFormatter] = None,
        **kwargs
    ):
        super().__init__(level=level, console=console, **kwargs)
        self.rest_formatter = formatter or SimpleLogFormatter()

    def render(
        self,
        *,
        record: logging.LogRecord,
        traceback: Optional[Traceback],
        message_renderable: ConsoleRenderable,
    ) -> ConsoleRenderable:
        return self.rest_formatter.format_record(RestLogRecord.from_record(record))


def create_rich_console_handler(**kwargs):
    """Factory function to create a RichLoggingHandler for dictConfig.

    Pass ``detailed: true`` in the handler config to show context tables.
    """
    from .console import console

    formatter = DetailedLogFormatter() if kwargs.get("detailed") else SimpleLogFormatter()
    return RichLoggingHandler(
        level=kwargs.get("level", logging.INFO),
        console=console,
        formatter=formatter,
        show_path=kwargs.get("show_path", False),
        markup=kwargs.get("markup", True),
        rich_tracebacks=kwargs.get("rich_tracebacks", True),
    )
