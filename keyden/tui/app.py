"""Main TUI application for keyden.

This module provides the KeydenApp class, which owns the shared TOTP timer
service and shows the live code list.
"""

from pathlib import Path
from typing import List, Optional

from loguru import logger
from textual.app import App
from textual.binding import Binding

from keyden.config import CONFIG_DIR, Config, get_config
from keyden.models import Token
from keyden.otp.timer import TOTPTimerService
from keyden.tui.screens.codes import CodesScreen


def _configure_tui_logging(level: str = "DEBUG") -> Path:
    """Send log output to a file instead of stderr.

    Textual apps need logging redirected to a file, otherwise log messages
    will corrupt the terminal UI.

    Returns:
        Path of the log file.
    """
    log_file = CONFIG_DIR / "tui.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(log_file, level=level, mode="w")
    return log_file


class KeydenApp(App):
    """Live TOTP code viewer.

    The app constructs the one TOTPTimerService for its lifetime and hands
    it to the screens that display codes.
    """

    TITLE = "keyden"
    SUB_TITLE = "Codes"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("?", "help", "Help"),
    ]

    def __init__(
        self,
        tokens: List[Token],
        search: str = "",
        config: Optional[Config] = None,
    ):
        """Initialize the TUI app.

        Args:
            tokens: Tokens to display.
            search: Initial search text.
            config: Configuration (default: global config).
        """
        super().__init__()
        config = config or get_config()
        self.tokens = tokens
        self.search = search
        self.timer = TOTPTimerService(
            interval=config.tick_interval,
            placeholder=config.placeholder,
        )

    def on_mount(self) -> None:
        """Show the code list once the app is running."""
        self.push_screen(CodesScreen(self.timer, self.tokens, search=self.search))

    def on_unmount(self) -> None:
        self.timer.stop()

    def action_help(self) -> None:
        """Show help information."""
        self.notify(
            "/: Search | Esc: Clear search | Arrow keys: Move | q: Quit",
            timeout=5,
        )


def run_tui(tokens: List[Token], search: str = "") -> None:
    """Run the TUI application.

    Args:
        tokens: Tokens to display.
        search: Initial search text.
    """
    config = get_config()
    _configure_tui_logging(config.log_level)

    app = KeydenApp(tokens, search=search, config=config)
    app.run()
