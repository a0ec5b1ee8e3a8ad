import sys
import argparse
import logging
from pathlib import Path

from rich.console import Console

from . import VERSION
from .config import ConfigManager
from .exceptions import MenuError, NoTerminalError
from .installer import Installer, DEFAULT_WORK_DIR
from .menu import MenuController, MenuSpec
from .utils import setup_logging, get_logger, CONFIG_FILE, LOG_FILE

# stdout carries the selection for $(...) callers; everything else goes to stderr
console = Console(stderr=True)

logger = get_logger(__name__)

EXIT_CONFIRMED = 0
EXIT_CANCELLED = 1
EXIT_NO_TERMINAL = 3
EXIT_INTERRUPTED = 130

def print_output(message, style="bold green", error=False):
    if error:
        console.print(f"[bold red]Error:[/bold red] {message}")
    else:
        console.print(f"[{style}]{message}[/{style}]")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="installer-menu",
        description="Arrow-key selection menu for installer scripts",
        epilog="Prints the selected index (or label) on stdout. "
               "Exit status: 0 selected, 1 cancelled, 3 no terminal.",
    )
    parser.add_argument("--version", action="version", version=f"installer-menu v{VERSION}")
    parser.add_argument("options", nargs="*", help="Menu options in display order")
    parser.add_argument("--title", default="", help="Title shown above the options")
    parser.add_argument("--label", action="store_true", help="Print the selected label instead of its index")
    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="Configuration file (default: %(default)s)")
    parser.add_argument("--escape-timeout", type=float, help="Seconds to wait after ESC for an arrow sequence")
    parser.add_argument("--no-vim-keys", action="store_true", help="Do not treat j/k as down/up")
    parser.add_argument("--eof-confirms", action="store_true", help="Treat end of input as confirm instead of cancel")
    parser.add_argument("--installer", action="store_true", help="Run the installer main menu")
    parser.add_argument("--work-dir", type=Path, default=DEFAULT_WORK_DIR, help="Directory holding the installer scripts")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level")
    return parser

def main(argv=None):
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.installer and not args.options:
        parser.error("at least one option is required (or use --installer)")

    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        config = ConfigManager(args.config).config.override(
            escape_timeout=args.escape_timeout,
            vim_keys=False if args.no_vim_keys else None,
            eof_confirms=True if args.eof_confirms else None,
        )
    except ValueError as e:
        parser.error(str(e))

    controller = MenuController(config=config)

    try:
        if args.installer:
            Installer(controller, args.work_dir, console=console).run()
            choice = None
        else:
            choice = controller.run(MenuSpec(args.title, tuple(args.options)))
    except NoTerminalError as e:
        logger.error(f"No terminal: {e}")
        print_output(str(e), error=True)
        sys.exit(EXIT_NO_TERMINAL)
    except KeyboardInterrupt:
        logger.warning("Interrupted by the operator")
        print_output("Interrupted.", style="yellow")
        sys.exit(EXIT_INTERRUPTED)
    except MenuError as e:
        logger.error(f"Menu error: {e}")
        print_output(str(e), error=True)
        sys.exit(1)
    except Exception as e:
        logger.critical(f"Unhandled exception: {e}", exc_info=True)
        print_output(f"An error occurred: {e}", error=True)
        print_output(f"Check the log file for details: {LOG_FILE}", style="yellow")
        sys.exit(1)

    if args.installer:
        sys.exit(0)

    if choice is None:
        sys.exit(EXIT_CANCELLED)

    print(args.options[choice] if args.label else choice)
    sys.exit(EXIT_CONFIRMED)

if __name__ == "__main__":
    main()
