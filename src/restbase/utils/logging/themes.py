"""
Color themes for the restbase logging system.

This module defines color schemes for log levels and request-handling
components so console output stays visually consistent.
"""
from typing import Dict

from rich.style import Style
from rich.theme import Theme

# Base color definitions
COLORS: Dict[str, str] = {
    # Main colors
    "primary": "bright_blue",
    "secondary": "cyan",
    "accent": "magenta",
    "warning": "yellow",
    "error": "red",
    "critical": "bright_red",
    "info": "bright_blue",
    "debug": "bright_black",

    # Component-specific colors
    "api": "bright_yellow",
    "guard": "red",
    "auth": "bright_red",
    "query": "blue",
    "pagination": "cyan",
    "transformer": "green",
    "response": "magenta",
    "registry": "bright_cyan",
    "config": "bright_magenta",
    "storage": "bright_magenta",
    "server": "bright_green",

    # Misc
    "muted": "bright_black",
    "timestamp": "bright_black",
    "path": "bright_blue",
    "data": "bright_yellow",
}

# Style definitions (combining color with additional attributes)
STYLES: Dict[str, Style] = {
    # Base styles for log levels
    "info": Style(color=COLORS["info"]),
    "debug": Style(color=COLORS["debug"]),
    "warning": Style(color=COLORS["warning"], bold=True),
    "error": Style(color=COLORS["error"], bold=True),
    "critical": Style(color=COLORS["critical"], bold=True, reverse=True),

    # Component styles
    "api": Style(color=COLORS["api"], bold=True),
    "guard": Style(color=COLORS["guard"], bold=True),
    "auth": Style(color=COLORS["auth"], bold=True),
    "query": Style(color=COLORS["query"], bold=True),
    "pagination": Style(color=COLORS["pagination"], bold=True),
    "transformer": Style(color=COLORS["transformer"], bold=True),
    "response": Style(color=COLORS["response"], bold=True),
    "registry": Style(color=COLORS["registry"], bold=True),
    "config": Style(color=COLORS["config"], bold=True),
    "storage": Style(color=COLORS["storage"], bold=True),
    "server": Style(color=COLORS["server"], bold=True),

    # Operation style
    "operation": Style(color=COLORS["accent"], bold=True),

    # Misc styles
    "timestamp": Style(color=COLORS["timestamp"], dim=True),
    "path": Style(color=COLORS["path"], underline=True),
    "data": Style(color=COLORS["data"]),
    "muted": Style(color=COLORS["muted"], dim=True),
}

# Rich theme that can be used directly with Rich Console
RICH_THEME = Theme({name: style for name, style in STYLES.items()})


def get_level_style(level: str) -> Style:
    """Get the Rich style for a specific log level.

    Args:
        level: The log level (info, debug, warning, error, critical)

    Returns:
        The corresponding Rich Style
    """
    return STYLES.get(level.lower(), STYLES["info"])


def get_component_style(component: str) -> Style:
    """Get the Rich style for a specific component.

    Args:
        component: The component name (api, guard, query, etc.)

    Returns:
        The corresponding Rich Style
    """
    return STYLES.get(component.lower(), STYLES["info"])
