"""
Emoji definitions for the restbase logging system.
"""
from typing import Dict

# Log level emojis
INFO = "ℹ️"
DEBUG = "🔍"
WARNING = "⚠️"
ERROR = "❌"
CRITICAL = "🚨"

# Operation emojis
REQUEST = "📥"
RESPONSE = "📤"
SEARCH = "🔎"
FILTER = "🧹"
SORT = "🔀"
PAGINATE = "📑"
TRANSFORM = "🔁"
GUARD = "🛡️"
AUTHENTICATE = "🔑"
REGISTER = "🧩"
LOAD_CONFIG = "⚙️"
STARTUP = "🔆"
SHUTDOWN = "🔅"

UNKNOWN = "❓"

LEVEL_EMOJIS: Dict[str, str] = {
    "info": INFO,
    "debug": DEBUG,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
}


def get_emoji(category: str, name: str) -> str:
    """Get an emoji by category and name.

    Args:
        category: The category of emoji ('level' or 'operation')
        name: The name of the emoji within that category

    Returns:
        The emoji string, or UNKNOWN if there is none
    """
    if category.lower() == "level":
        return LEVEL_EMOJIS.get(name.lower(), UNKNOWN)

    value = globals().get(name.upper())
    if isinstance(value, str):
        return value
    return UNKNOWN
