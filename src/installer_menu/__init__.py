"""Arrow-key selection menu for server installer scripts."""

VERSION = "1.0.0"
__version__ = VERSION

from .config import MenuConfig, ConfigManager
from .exceptions import MenuError, NoTerminalError, TerminalBusyError
from .keys import KeyDecoder, KeyEvent
from .menu import MenuController, MenuSpec, MenuState, SelectionState, confirm, select
from .render import MenuRenderer
from .terminal import TerminalMode, TerminalSession

__all__ = [
    "VERSION",
    "MenuConfig",
    "ConfigManager",
    "MenuError",
    "NoTerminalError",
    "TerminalBusyError",
    "KeyDecoder",
    "KeyEvent",
    "MenuController",
    "MenuSpec",
    "MenuState",
    "SelectionState",
    "confirm",
    "select",
    "MenuRenderer",
    "TerminalMode",
    "TerminalSession",
]
