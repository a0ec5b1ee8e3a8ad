"""
Installer main menu
Lets the operator pick installer actions with the arrow-key menu and hands
each choice to the matching installer script in the work directory
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from .menu import MenuController, MenuSpec, confirm
from .utils import get_logger

logger = get_logger(__name__)

DEFAULT_WORK_DIR = Path("/tmp/pelican-installer")

MAIN_MENU_TITLE = "Pelican Installer - Main Menu"
# (label, script); None means leave the menu
MAIN_MENU: List[Tuple[str, Optional[str]]] = [
    ("Install Panel", "panel.sh"),
    ("Install Wings", "wings.sh"),
    ("SSL Tools", "ssl.sh"),
    ("Update", "update.sh"),
    ("Uninstall", "uninstall.sh"),
    ("Exit", None),
]

UNINSTALL_SCRIPT = "uninstall.sh"

LEFTOVER_PATHS = [
    (Path("/var/www/pelican"), "/var/www/pelican"),
    (Path("/etc/nginx/sites-enabled/pelican.conf"), "nginx vhost"),
    (Path("/etc/systemd/system/pelican-queue.service"), "pelican-queue.service"),
]

WINGS_UNIT = "wings.service"

LEFTOVER_TITLE = "Previous installation remnants detected"
LEFTOVER_UNINSTALL, LEFTOVER_PROCEED, LEFTOVER_EXIT = range(3)
LEFTOVER_MENU = ["Run uninstall now", "Proceed anyway", "Exit"]

class Installer:
    """Dispatches installer menu choices to the installer scripts"""

    def __init__(self, controller: MenuController, work_dir: Path = DEFAULT_WORK_DIR,
                 console=None):
        self.controller = controller
        self.work_dir = Path(work_dir)
        self.console = console

    def say(self, message: str, style: str = "bold green"):
        if self.console is not None:
            self.console.print(f"[{style}]{message}[/{style}]")

    def detect_leftovers(self) -> List[str]:
        """List remnants of a previous installation"""
        leftovers = [label for path, label in LEFTOVER_PATHS if path.exists()]
        if shutil.which("wings"):
            leftovers.append("wings binary")
        if self._unit_installed(WINGS_UNIT):
            leftovers.append(WINGS_UNIT)
        return leftovers

    def _unit_installed(self, unit: str) -> bool:
        """Ask systemd whether a unit file is known, wherever it was installed"""
        try:
            result = subprocess.run(
                ["systemctl", "list-unit-files", "--no-legend", unit],
                capture_output=True, text=True, timeout=10,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Could not query systemd for {unit}: {e}")
            return False
        return any(line.split()[:1] == [unit] for line in result.stdout.splitlines())

    def run_script(self, script: str) -> Tuple[bool, str]:
        """Run an installer script from the work directory with bash"""
        path = self.work_dir / script
        if not path.is_file():
            logger.error(f"Installer script not found: {path}")
            return False, f"{script} is not available in {self.work_dir}"

        try:
            # Not captured: the script talks to the operator directly
            result = subprocess.run(["bash", str(path)])
        except OSError as e:
            logger.error(f"Failed to start {path}: {e}")
            return False, str(e)

        logger.info(f"Script '{path}' finished with status: {result.returncode}")
        if result.returncode != 0:
            return False, f"{script} exited with status {result.returncode}"
        return True, f"{script} completed"

    def handle_leftovers(self) -> bool:
        """Offer to clean up a previous installation; False means stop here"""
        leftovers = self.detect_leftovers()
        if not leftovers:
            return True

        logger.info(f"Detected previous installation remnants: {', '.join(leftovers)}")
        title = "\n".join([LEFTOVER_TITLE] + [f"  - {item}" for item in leftovers])
        choice = self.controller.run(MenuSpec(title, tuple(LEFTOVER_MENU)))

        if choice == LEFTOVER_UNINSTALL:
            self._report(*self.run_script(UNINSTALL_SCRIPT))
            return True
        if choice == LEFTOVER_PROCEED:
            logger.info("Proceeding despite remnants")
            return True
        return False

    def confirm_uninstall(self) -> bool:
        return confirm("Remove the panel, its database and web server config?",
                       controller=self.controller)

    def run(self) -> int:
        """Show the main menu until Exit or cancel; return the number of scripts run"""
        if not self.handle_leftovers():
            self.say("Exiting.", style="yellow")
            return 0

        spec = MenuSpec(MAIN_MENU_TITLE, tuple(label for label, _ in MAIN_MENU))
        runs = 0
        while True:
            choice = self.controller.run(spec)
            if choice is None:
                break

            label, script = MAIN_MENU[choice]
            if script is None:
                break
            if script == UNINSTALL_SCRIPT and not self.confirm_uninstall():
                continue

            logger.info(f"Main menu: {label}")
            self._report(*self.run_script(script))
            runs += 1

        self.say("Bye.", style="bold blue")
        return runs

    def _report(self, success: bool, message: str):
        self.say(message, style="green" if success else "red")
