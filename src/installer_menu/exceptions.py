"""Custom exceptions for installer-menu."""


class MenuError(Exception):
    """Base exception for all installer-menu errors.

    Callers that only care whether the interactive menu is usable can
    catch this single class.
    """

    pass


class NoTerminalError(MenuError):
    """No interactive terminal could be obtained.

    Raised when neither standard input nor the terminal device is a
    terminal. Not retryable: the caller has to leave interactive mode
    and tell the operator to run from a real terminal.
    """

    pass


class TerminalBusyError(MenuError):
    """The terminal is already held by another menu in this process."""

    pass
