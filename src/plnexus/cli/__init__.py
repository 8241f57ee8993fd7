"""Terminal collaborators: rendering and interactive prompts."""

from .console import ConsoleRenderer
from .menu import DEFAULT_SYMBOL, MenuSystem, sanitize_symbol

__all__ = ["DEFAULT_SYMBOL", "ConsoleRenderer", "MenuSystem", "sanitize_symbol"]
