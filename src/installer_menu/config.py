"""
Configuration management for installer-menu
Handles loading and saving of the menu behaviour settings
"""

import json
import math
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .utils import CONFIG_FILE, TTY_DEVICE, get_logger

logger = get_logger(__name__)

# Seconds to wait for each byte that may follow ESC before treating it as a
# standalone Escape keypress.
ESCAPE_TIMEOUT = 0.1

@dataclass
class MenuConfig:
    """Menu behaviour configuration"""
    escape_timeout: float = ESCAPE_TIMEOUT
    vim_keys: bool = True
    eof_confirms: bool = False
    cursor_marker: str = "> "
    highlight_style: str = "reverse"
    clear_on_exit: bool = True
    tty_device: str = TTY_DEVICE
    color_system: str = "auto"

    def __post_init__(self):
        if not math.isfinite(self.escape_timeout) or self.escape_timeout <= 0:
            raise ValueError(f"escape_timeout must be a positive number, got {self.escape_timeout}")

    def override(self, **changes: Any) -> "MenuConfig":
        """Return a copy with the non-None values in changes applied"""
        data = asdict(self)
        data.update({key: value for key, value in changes.items() if value is not None})
        return MenuConfig(**data)

class ConfigManager:
    """Manages the menu configuration file"""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self.config: MenuConfig = self.load()

    def load(self) -> MenuConfig:
        """Load configuration from file"""
        if not self.config_file.exists():
            return MenuConfig()

        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")

            known = {f.name for f in fields(MenuConfig)}
            unknown = sorted(set(data) - known)
            if unknown:
                logger.warning(f"Ignoring unknown config keys in {self.config_file}: {', '.join(unknown)}")

            config = MenuConfig(**{key: value for key, value in data.items() if key in known})
            logger.info(f"Configuration loaded from {self.config_file}")
            return config
        except Exception as e:
            logger.error(f"Error loading config {self.config_file}: {e}")
            return MenuConfig()

    def save(self) -> bool:
        """Save configuration to file"""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            data: Dict[str, Any] = asdict(self.config)

            with open(self.config_file, 'w') as f:
                json.dump(data, f, indent=2)

            logger.info(f"Configuration saved to {self.config_file}")
            return True
        except Exception as e:
            logger.error(f"Error saving config: {e}")
            return False
