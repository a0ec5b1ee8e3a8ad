import logging
import os
from pathlib import Path

# Configuration
# Use the actual user's home directory, not root's home when running with sudo
if os.environ.get('SUDO_USER'):
    MENU_DIR = Path(f"/home/{os.environ['SUDO_USER']}") / ".installer-menu"
else:
    MENU_DIR = Path.home() / ".installer-menu"

CONFIG_FILE = MENU_DIR / "config.json"
LOG_FILE = MENU_DIR / "installer-menu.log"
TTY_DEVICE = "/dev/tty"

def setup_logging(level: int = logging.INFO, log_file: Path = LOG_FILE):
    """Setup logging configuration"""
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(levelname)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.FileHandler(log_file),
            # No stream handler: anything written to the terminal corrupts the menu
        ]
    )

def get_logger(name: str):
    return logging.getLogger(name)
