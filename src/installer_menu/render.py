"""Drawing of the menu block on the terminal."""

from typing import List, Optional

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.style import Style
from rich.text import Text

from .utils import get_logger

logger = get_logger(__name__)

DEFAULT_MARKER = "> "

class MenuRenderer:
    """Draws a title and one row per option, and redraws them in place.

    Every row is cropped to the console width instead of wrapping, so the
    block is exactly ``height`` terminal rows tall. The height is computed
    once from the title and options and used for every erase.

    When ``max_height`` is given and the block would not fit, only a window
    of options around the selected one is shown (and the title is cut if it
    alone fills the screen). Rows pushed into scrollback cannot be erased.
    """

    def __init__(self, console: Console, title: str, options: List[str],
                 cursor_marker: str = DEFAULT_MARKER, highlight_style: str = "reverse",
                 max_height: Optional[int] = None):
        self.console = console
        self.title_lines = title.splitlines() if title else []
        # One row per option, whatever the label contains
        self.options = [" ".join(option.splitlines()) for option in options]
        self.cursor_marker = cursor_marker
        self.padding = " " * len(cursor_marker)
        self.highlight_style = Style.parse(highlight_style)
        self.visible_options = len(self.options)
        self._top = 0
        self._drawn = False

        full_height = len(self.title_lines) + len(self.options)
        if max_height is not None and full_height > max_height:
            logger.warning(f"Menu needs {full_height} rows but only {max_height} fit on the terminal, "
                           "showing a scrolling window")
            self.visible_options = max(1, min(len(self.options), max_height - len(self.title_lines)))
            self.title_lines = self.title_lines[:max(0, max_height - self.visible_options)]

        self.height = len(self.title_lines) + self.visible_options

    def render(self, index: int):
        """Print the title, then each option with the one at index highlighted"""
        for line in self.title_lines:
            self._print_row(Text(line, style="bold"))

        self._scroll_to(index)
        for i in range(self._top, self._top + self.visible_options):
            option = self.options[i]
            if i == index:
                row = Text(f"{self.cursor_marker}{option}", style=self.highlight_style)
            else:
                row = Text(f"{self.padding}{option}")
            self._print_row(row)

        self._drawn = True

    def redraw(self, index: int):
        """Erase the previously drawn block and render it again"""
        self.clear()
        self.render(index)

    def clear(self):
        """Erase the drawn block, leaving the cursor where it started"""
        if not self._drawn:
            return
        codes = [ControlType.CARRIAGE_RETURN]
        for _ in range(self.height):
            codes.append((ControlType.CURSOR_UP, 1))
            codes.append((ControlType.ERASE_IN_LINE, 2))
        self.console.control(Control(*codes))
        self._drawn = False

    def _scroll_to(self, index: int):
        # Move the window only as far as needed to keep index inside it
        if index < self._top:
            self._top = index
        elif index >= self._top + self.visible_options:
            self._top = index - self.visible_options + 1

    def _print_row(self, row: Text):
        row.no_wrap = True
        row.overflow = "crop"
        self.console.print(row, crop=True, soft_wrap=False)
