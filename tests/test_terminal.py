import unittest
from unittest.mock import patch
import io
import os
import pty
import signal
import sys
import termios

# Add src to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from installer_menu.exceptions import NoTerminalError, TerminalBusyError
from installer_menu.terminal import TerminalMode, TerminalSession

def read_available(fd: int) -> bytes:
    """Drain whatever the pty has written so far"""
    import select
    chunks = []
    while select.select([fd], [], [], 0.05)[0]:
        try:
            data = os.read(fd, 4096)
        except OSError:
            break
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)

class PtyTestCase(unittest.TestCase):
    def setUp(self):
        self.master, self.slave = pty.openpty()
        self.tty_in = os.fdopen(os.dup(self.slave), "rb", buffering=0)
        self.tty_out = os.fdopen(os.dup(self.slave), "w", encoding="utf-8")
        self.environ = patch.dict(os.environ, {"TERM": "xterm-256color"})
        self.environ.start()

    def tearDown(self):
        self.environ.stop()
        self.tty_in.close()
        self.tty_out.close()
        os.close(self.slave)
        os.close(self.master)

    def make_session(self, **kwargs) -> TerminalSession:
        return TerminalSession(stdin=self.tty_in, stdout=self.tty_out,
                               color_system="standard", **kwargs)

class TestTerminalSession(PtyTestCase):
    def test_uses_stdio_when_it_is_a_terminal(self):
        session = self.make_session(device="/nonexistent/tty")
        with session:
            self.assertTrue(session.acquired)
            self.assertEqual(session.fileno(), self.tty_in.fileno())
        self.assertFalse(session.acquired)

    def test_raw_mode_disables_canonical_input_and_echo(self):
        session = self.make_session()
        with session:
            self.assertEqual(session.mode, TerminalMode.RAW)
            lflag = termios.tcgetattr(self.slave)[3]
            self.assertFalse(lflag & termios.ICANON)
            self.assertFalse(lflag & termios.ECHO)
            self.assertTrue(lflag & termios.ISIG)
        self.assertEqual(session.mode, TerminalMode.COOKED)

    def test_mode_round_trip(self):
        """Attributes after the session equal those before acquire()"""
        before = termios.tcgetattr(self.slave)
        with self.make_session():
            self.assertNotEqual(termios.tcgetattr(self.slave), before)
        self.assertEqual(termios.tcgetattr(self.slave), before)

    def test_restored_when_block_raises(self):
        before = termios.tcgetattr(self.slave)
        session = self.make_session()
        with self.assertRaises(RuntimeError):
            with session:
                raise RuntimeError("boom")
        self.assertEqual(termios.tcgetattr(self.slave), before)
        self.assertFalse(session.cursor_hidden)
        self.assertFalse(session.acquired)

    def test_restored_on_keyboard_interrupt(self):
        before = termios.tcgetattr(self.slave)
        with self.assertRaises(KeyboardInterrupt):
            with self.make_session():
                raise KeyboardInterrupt
        self.assertEqual(termios.tcgetattr(self.slave), before)

    def test_cursor_hidden_then_shown(self):
        with self.make_session() as session:
            self.assertTrue(session.cursor_hidden)
        output = read_available(self.master)
        hide = output.find(b"\x1b[?25l")
        show = output.rfind(b"\x1b[?25h")
        self.assertNotEqual(hide, -1)
        self.assertGreater(show, hide)

    def test_restore_is_idempotent(self):
        before = termios.tcgetattr(self.slave)
        session = self.make_session()
        session.acquire()
        try:
            session.enter_raw_mode()
            session.restore()
            session.restore()
            self.assertEqual(termios.tcgetattr(self.slave), before)
        finally:
            session.release()
        session.release()

    def test_nested_sessions_rejected(self):
        with self.make_session():
            with self.assertRaises(TerminalBusyError):
                self.make_session().acquire()
        # Released again once the first menu is done
        with self.make_session() as session:
            self.assertTrue(session.acquired)

    def test_session_can_be_reused(self):
        session = self.make_session()
        with session:
            pass
        with session:
            self.assertEqual(session.mode, TerminalMode.RAW)

    def test_signal_handlers_installed_and_restored(self):
        previous = signal.getsignal(signal.SIGTERM)
        with self.make_session() as session:
            self.assertEqual(signal.getsignal(signal.SIGTERM), session._on_signal)
            with self.assertRaises(SystemExit) as ctx:
                session._on_signal(signal.SIGTERM, None)
            self.assertEqual(ctx.exception.code, 128 + signal.SIGTERM)
        self.assertEqual(signal.getsignal(signal.SIGTERM), previous)

    def test_opens_device_when_stdin_is_not_a_terminal(self):
        """Piped stdin: fall back to the terminal device"""
        device = os.ttyname(self.slave)
        session = TerminalSession(stdin=io.BytesIO(b"script"), stdout=self.tty_out,
                                  device=device, color_system="standard")
        before = termios.tcgetattr(self.slave)
        with session:
            self.assertNotEqual(session.fileno(), self.tty_in.fileno())
            self.assertTrue(os.isatty(session.fileno()))
        self.assertEqual(termios.tcgetattr(self.slave), before)

    def test_stdin_terminal_used_when_device_unavailable(self):
        """Piped stdout and no controlling terminal: draw on stdin"""
        stdout = io.StringIO()
        session = TerminalSession(stdin=self.tty_in, stdout=stdout,
                                  device="/nonexistent/tty", color_system="standard")
        before = termios.tcgetattr(self.slave)
        with session:
            self.assertEqual(session.fileno(), self.tty_in.fileno())
            self.assertEqual(session.mode, TerminalMode.RAW)
        self.assertEqual(termios.tcgetattr(self.slave), before)
        self.assertIn(b"\x1b[?25l", read_available(self.master))
        self.assertEqual(stdout.getvalue(), "")
        # stdin itself stays open for the caller
        self.assertFalse(self.tty_in.closed)
        os.fstat(self.tty_in.fileno())

    def test_no_terminal_error(self):
        session = TerminalSession(stdin=io.BytesIO(), stdout=io.StringIO(),
                                  device="/nonexistent/tty")
        with self.assertRaises(NoTerminalError) as ctx:
            with session:
                pass
        self.assertIn("interactive terminal", str(ctx.exception))
        # A failed acquire must not keep the terminal locked
        with self.make_session() as other:
            self.assertTrue(other.acquired)

    def test_device_that_is_not_a_terminal(self):
        session = TerminalSession(stdin=io.BytesIO(), stdout=io.StringIO(), device=os.devnull)
        with self.assertRaises(NoTerminalError):
            session.acquire()

    def test_size_falls_back_for_unsized_pty(self):
        with self.make_session() as session:
            columns, lines = session.size()
            self.assertGreater(columns, 0)
            self.assertGreater(lines, 0)

if __name__ == '__main__':
    unittest.main()
