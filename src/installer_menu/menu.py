"""
Arrow-key selection menu
Ties the terminal session, key decoder and renderer together in a small
state machine that returns the confirmed option index or None on cancel
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from .config import MenuConfig
from .keys import KeyDecoder, KeyEvent
from .render import MenuRenderer
from .terminal import TerminalSession
from .utils import get_logger

logger = get_logger(__name__)

@dataclass(frozen=True)
class MenuSpec:
    """Title and ordered options of one menu invocation"""
    title: str
    options: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))
        if not self.options:
            raise ValueError("a menu needs at least one option")

    @property
    def count(self) -> int:
        return len(self.options)

class MenuState(Enum):
    RENDERING = "rendering"
    AWAITING_KEY = "awaiting_key"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

@dataclass
class SelectionState:
    """Highlighted option of a running menu"""
    count: int
    selected_index: int = 0
    state: MenuState = field(default=MenuState.RENDERING)

    def apply(self, event: KeyEvent) -> MenuState:
        """Apply one key event and return the resulting state"""
        if event is KeyEvent.UP:
            self.selected_index = (self.selected_index - 1 + self.count) % self.count
            self.state = MenuState.RENDERING
        elif event is KeyEvent.DOWN:
            self.selected_index = (self.selected_index + 1) % self.count
            self.state = MenuState.RENDERING
        elif event is KeyEvent.CONFIRM:
            self.state = MenuState.CONFIRMED
        elif event is KeyEvent.CANCEL:
            self.state = MenuState.CANCELLED
        else:
            self.state = MenuState.RENDERING
        return self.state

    @property
    def finished(self) -> bool:
        return self.state in (MenuState.CONFIRMED, MenuState.CANCELLED)

class MenuController:
    """Runs menus on a terminal session, one at a time"""

    def __init__(self, session: Optional[TerminalSession] = None,
                 config: Optional[MenuConfig] = None):
        self.config = config or MenuConfig()
        self.session = session or TerminalSession(
            device=self.config.tty_device,
            color_system=self.config.color_system,
        )

    def run(self, spec: MenuSpec) -> Optional[int]:
        """Show the menu until the operator confirms or cancels.

        Returns:
            Zero-based index of the confirmed option, or None if cancelled

        Raises:
            NoTerminalError: no interactive terminal is available
        """
        selection = SelectionState(count=spec.count)

        with self.session as session:
            decoder = self._decoder(session)
            renderer = self._renderer(session, spec)
            renderer.render(selection.selected_index)

            while True:
                selection.state = MenuState.AWAITING_KEY
                selection.apply(decoder.read_key())
                if selection.finished:
                    break
                renderer.redraw(selection.selected_index)

            if self.config.clear_on_exit:
                renderer.clear()

        if selection.state is MenuState.CONFIRMED:
            logger.info(f"Menu '{spec.title}': selected {selection.selected_index} ({spec.options[selection.selected_index]})")
            return selection.selected_index

        logger.info(f"Menu '{spec.title}': cancelled")
        return None

    def _decoder(self, session: TerminalSession) -> KeyDecoder:
        return KeyDecoder(
            session.fileno(),
            escape_timeout=self.config.escape_timeout,
            vim_keys=self.config.vim_keys,
            eof_confirms=self.config.eof_confirms,
        )

    def _renderer(self, session: TerminalSession, spec: MenuSpec) -> MenuRenderer:
        _, lines = session.size()
        # The row under the block holds the cursor
        return MenuRenderer(
            session.console,
            spec.title,
            spec.options,
            cursor_marker=self.config.cursor_marker,
            highlight_style=self.config.highlight_style,
            max_height=max(1, lines - 1),
        )

def select(options: Sequence[str], title: str = "",
           config: Optional[MenuConfig] = None,
           controller: Optional[MenuController] = None) -> Optional[int]:
    """Show a selection menu, return the selected index or None if cancelled"""
    controller = controller or MenuController(config=config)
    return controller.run(MenuSpec(title, tuple(options)))

def confirm(message: str, default: bool = False,
            config: Optional[MenuConfig] = None,
            controller: Optional[MenuController] = None) -> bool:
    """Show a yes/no menu, return True for yes.

    The default answer is listed first so it starts highlighted;
    cancelling counts as no.
    """
    options = ("Yes", "No") if default else ("No", "Yes")
    index = select(options, title=message, config=config, controller=controller)
    if index is None:
        return False
    return options[index] == "Yes"
