"""
Keystroke decoding for the selection menu

Reads single bytes from a raw-mode terminal and turns them into KeyEvents.
The hard part is ESC: on its own it is the Escape key, but it is also the
first byte of the arrow sequences ESC [ A / ESC [ B (ESC O A / ESC O B in
application cursor mode). After ESC the decoder waits a bounded time for
each continuation byte; if none arrives the keypress was a bare Escape.
"""

import math
import os
import select
import time
from enum import Enum
from typing import Optional

from .config import ESCAPE_TIMEOUT
from .utils import get_logger

logger = get_logger(__name__)

ESC = b"\x1b"
CSI = b"["
SS3 = b"O"

# A CSI sequence longer than this is garbage; stop draining it
MAX_SEQUENCE_LENGTH = 16

class KeyEvent(Enum):
    """Logical keys understood by the menu"""
    UP = "up"
    DOWN = "down"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    IGNORE = "ignore"

ARROWS = {
    b"A": KeyEvent.UP,
    b"B": KeyEvent.DOWN,
}

VIM_KEYS = {
    b"k": KeyEvent.UP,
    b"j": KeyEvent.DOWN,
}

class KeyDecoder:
    """Classifies raw terminal bytes into KeyEvents"""

    def __init__(self, fd: int, escape_timeout: float = ESCAPE_TIMEOUT,
                 vim_keys: bool = True, eof_confirms: bool = False):
        if not math.isfinite(escape_timeout) or escape_timeout <= 0:
            raise ValueError("escape_timeout must be a positive number")
        self.fd = fd
        self.escape_timeout = escape_timeout
        self.vim_keys = vim_keys
        self.eof_confirms = eof_confirms

    def read_key(self, timeout: Optional[float] = None) -> KeyEvent:
        """Block until one key is decoded.

        Args:
            timeout: Optional bound in seconds on waiting for the first byte

        Returns:
            The decoded KeyEvent. IGNORE if timeout elapsed with no input,
            CANCEL if the read failed.
        """
        try:
            byte = self._read_byte(timeout)
            if byte is None:
                return KeyEvent.IGNORE
            if byte == b"":
                return self._end_of_stream()
            if byte == ESC:
                return self._read_escape()
            return self._classify(byte)
        except OSError as e:
            logger.warning(f"Reading from the terminal failed, treating as cancel: {e}")
            return KeyEvent.CANCEL

    def _read_byte(self, timeout: Optional[float]) -> Optional[bytes]:
        """Return one byte, b"" at end of stream, or None if timeout elapsed"""
        if timeout is not None:
            readable, _, _ = select.select([self.fd], [], [], timeout)
            if not readable:
                return None
        return os.read(self.fd, 1)

    def _end_of_stream(self) -> KeyEvent:
        logger.info("End of input stream reached")
        return KeyEvent.CONFIRM if self.eof_confirms else KeyEvent.CANCEL

    def _classify(self, byte: bytes) -> KeyEvent:
        if byte in (b"\r", b"\n"):
            return KeyEvent.CONFIRM
        if self.vim_keys and byte in VIM_KEYS:
            return VIM_KEYS[byte]
        return KeyEvent.IGNORE

    def _read_escape(self) -> KeyEvent:
        started = time.monotonic()
        introducer = self._read_byte(self.escape_timeout)
        if not introducer:
            # Nothing followed within the bound (or the stream ended): bare Escape
            logger.debug(f"Bare ESC resolved to cancel after {time.monotonic() - started:.3f}s")
            return KeyEvent.CANCEL

        if introducer not in (CSI, SS3):
            return KeyEvent.IGNORE

        final = self._read_byte(self.escape_timeout)
        if not final:
            return KeyEvent.IGNORE

        if final in ARROWS:
            return ARROWS[final]

        if introducer == CSI and not self._is_final_byte(final):
            self._drain_sequence()
        return KeyEvent.IGNORE

    def _drain_sequence(self):
        """Consume the rest of a CSI sequence such as ESC [ 1 ; 5 A or ESC [ 3 ~"""
        for _ in range(MAX_SEQUENCE_LENGTH):
            byte = self._read_byte(self.escape_timeout)
            if not byte or self._is_final_byte(byte):
                return

    @staticmethod
    def _is_final_byte(byte: bytes) -> bool:
        return 0x40 <= byte[0] <= 0x7E
