"""
Controlling terminal ownership for the selection menu
Acquires a terminal, switches it to raw input mode and puts the previous
mode and cursor visibility back on every exit path
"""

import os
import signal
import sys
import termios
import threading
from enum import Enum
from typing import Dict, Optional, TextIO, Tuple

from rich.console import Console

from .exceptions import NoTerminalError, TerminalBusyError
from .utils import TTY_DEVICE, get_logger

logger = get_logger(__name__)

# Held by the session that currently owns the terminal
_ownership = threading.Lock()

# Signals that would otherwise end the process with the terminal left raw
CLEANUP_SIGNALS = (signal.SIGTERM, signal.SIGHUP)

FALLBACK_SIZE = (80, 24)

class TerminalMode(Enum):
    """Input mode of the owned terminal"""
    COOKED = "cooked"
    RAW = "raw"

def _isatty(stream) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False

class TerminalSession:
    """Exclusive, restorable access to the raw keyboard stream.

    Used as a context manager: entering acquires the terminal, switches to
    raw mode and hides the cursor; leaving undoes all of it, whether the
    block returned, raised, or was interrupted by SIGTERM/SIGHUP.
    """

    def __init__(self, stdin=None, stdout=None, device: str = TTY_DEVICE,
                 color_system: Optional[str] = "auto"):
        self._stdin = stdin
        self._stdout = stdout
        self.device = device
        self.color_system = color_system
        self.mode = TerminalMode.COOKED
        self.console: Optional[Console] = None
        self._fd: Optional[int] = None
        self._output: Optional[TextIO] = None
        self._opened_device = False
        self._owns_output = False
        self._saved_attrs = None
        self._saved_handlers: Dict[int, object] = {}
        self._cursor_hidden = False
        self._owner = False

    @property
    def acquired(self) -> bool:
        return self._fd is not None

    @property
    def cursor_hidden(self) -> bool:
        return self._cursor_hidden

    def fileno(self) -> int:
        self._require_acquired()
        return self._fd

    def acquire(self) -> "TerminalSession":
        """Take ownership of a terminal, opening the device when stdio is not one"""
        if not _ownership.acquire(blocking=False):
            raise TerminalBusyError("The terminal is already in use by another menu")
        self._owner = True
        try:
            self._open()
            columns, _ = self.size()
            self.console = Console(
                file=self._output,
                force_terminal=True,
                color_system=self.color_system,
                highlight=False,
                width=columns,
            )
        except BaseException:
            if self.acquired:
                self._close()
            self._release_ownership()
            raise
        return self

    def _open(self):
        stdin = self._stdin if self._stdin is not None else sys.stdin
        stdout = self._stdout if self._stdout is not None else sys.stdout

        if _isatty(stdin) and _isatty(stdout):
            self._fd = stdin.fileno()
            self._output = stdout
            logger.info("Using standard input/output as the terminal")
            return

        # Piped invocation (curl ... | bash, $(...)): talk to the device directly
        try:
            fd = self._open_device()
        except NoTerminalError:
            if not _isatty(stdin):
                raise
            # No controlling terminal (setsid) but stdin is one: draw on it too
            self._fd = stdin.fileno()
            self._output = open(os.dup(self._fd), "w", encoding="utf-8")
            self._owns_output = True
            logger.info(f"{self.device} is unavailable, using standard input as the terminal")
            return

        self._fd = fd
        self._output = open(os.dup(fd), "w", encoding="utf-8")
        self._owns_output = True
        self._opened_device = True
        logger.info(f"Standard input/output is not a terminal, opened {self.device}")

    def _open_device(self) -> int:
        try:
            fd = os.open(self.device, os.O_RDWR | os.O_NOCTTY)
        except OSError as e:
            raise NoTerminalError(
                f"No interactive terminal available ({self.device}: {e.strerror}). "
                "Run the installer from an interactive terminal session."
            ) from e

        if not os.isatty(fd):
            os.close(fd)
            raise NoTerminalError(
                f"No interactive terminal available ({self.device} is not a terminal). "
                "Run the installer from an interactive terminal session."
            )

        return fd

    def size(self) -> Tuple[int, int]:
        """Return (columns, lines) of the owned terminal"""
        self._require_acquired()
        try:
            size = os.get_terminal_size(self._fd)
        except OSError:
            return FALLBACK_SIZE
        return size.columns or FALLBACK_SIZE[0], size.lines or FALLBACK_SIZE[1]

    def enter_raw_mode(self):
        """Disable line buffering and echo, remembering the previous mode"""
        self._require_acquired()
        if self.mode is TerminalMode.RAW:
            return

        attrs = termios.tcgetattr(self._fd)
        raw = list(attrs)
        raw[6] = list(attrs[6])
        # Keep ISIG so Ctrl-C still raises KeyboardInterrupt
        raw[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN)
        raw[6][termios.VMIN] = 1
        raw[6][termios.VTIME] = 0
        # TCSANOW: keys typed ahead of the menu must not be discarded
        termios.tcsetattr(self._fd, termios.TCSANOW, raw)

        self._saved_attrs = attrs
        self.mode = TerminalMode.RAW
        logger.debug("Terminal switched to raw mode")

    def restore(self):
        """Put back the mode recorded by enter_raw_mode(); safe to call repeatedly"""
        if self._saved_attrs is None:
            return
        attrs, self._saved_attrs = self._saved_attrs, None
        self.mode = TerminalMode.COOKED
        termios.tcsetattr(self._fd, termios.TCSADRAIN, attrs)
        logger.debug("Terminal mode restored")

    def hide_cursor(self):
        self._require_acquired()
        self.console.show_cursor(False)
        self._cursor_hidden = True

    def show_cursor(self):
        if not self._cursor_hidden:
            return
        self._cursor_hidden = False
        self.console.show_cursor(True)

    def release(self):
        """Undo everything acquire() and the mode switches did; idempotent"""
        if not self.acquired:
            return
        try:
            try:
                self.show_cursor()
            finally:
                self.restore()
        finally:
            self._restore_signal_handlers()
            self._close()
            self._release_ownership()

    def _close(self):
        try:
            if self._owns_output:
                self._output.close()
        finally:
            if self._opened_device:
                os.close(self._fd)
        self._fd = None
        self._output = None
        self._owns_output = False
        self._opened_device = False
        self.console = None

    def _release_ownership(self):
        if self._owner:
            self._owner = False
            _ownership.release()

    def _install_signal_handlers(self):
        # signal.signal() only works from the main thread
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in CLEANUP_SIGNALS:
            self._saved_handlers[signum] = signal.signal(signum, self._on_signal)

    def _restore_signal_handlers(self):
        while self._saved_handlers:
            signum, handler = self._saved_handlers.popitem()
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)

    def _on_signal(self, signum, frame):
        logger.warning(f"Received {signal.Signals(signum).name} while the menu was active")
        raise SystemExit(128 + signum)

    def _require_acquired(self):
        if not self.acquired:
            raise RuntimeError("terminal session has not been acquired")

    def __enter__(self) -> "TerminalSession":
        self.acquire()
        try:
            self._install_signal_handlers()
            self.enter_raw_mode()
            self.hide_cursor()
        except BaseException:
            self.release()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
