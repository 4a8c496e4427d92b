"""Live code list screen for TUI.

This screen shows every imported account with its current code and the
seconds left before it rotates. All rows are refreshed together once per
scheduler tick.
"""

from typing import List, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Input

from keyden.models import Token
from keyden.otp.timer import TOTPTimerService


def format_code(code: str) -> str:
    """Group a code in halves for readability ('123456' -> '123 456')."""
    if not code.isdigit() or len(code) < 6:
        return code
    half = len(code) // 2
    return f"{code[:half]} {code[half:]}"


class CodesScreen(Screen):
    """Screen listing tokens and their live codes.

    Sends visibility signals to the timer service as the screen is shown
    and hidden, so the shared clock only runs while codes are on screen.
    """

    CSS = """
    #search {
        margin: 0 1;
    }

    #codes {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("/", "focus_search", "Search"),
        Binding("escape", "clear_search", "Clear", show=False),
    ]

    def __init__(
        self,
        timer: TOTPTimerService,
        tokens: List[Token],
        search: str = "",
        name: Optional[str] = None,
    ):
        """Initialize the codes screen.

        Args:
            timer: Shared timer service owned by the app.
            tokens: Tokens to display.
            search: Initial search text.
            name: Screen name.
        """
        super().__init__(name=name)
        self.timer = timer
        self.tokens = tokens
        self.search = search
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(value=self.search, placeholder="Search accounts", id="search")
        yield DataTable(id="codes", cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#codes", DataTable)
        table.add_column("Issuer", key="issuer")
        table.add_column("Account", key="account")
        table.add_column("Code", key="code")
        table.add_column("Left", key="remaining")

        for token in self.tokens:
            self.timer.register(token)
        self._unsubscribe = self.timer.subscribe(self._on_tick)
        self._rebuild_rows()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self.timer.on_visibility_hide()
        for token in self.tokens:
            self.timer.unregister(token.id)

    def on_screen_resume(self) -> None:
        self.timer.on_visibility_show()
        self._refresh_rows()

    def on_screen_suspend(self) -> None:
        self.timer.on_visibility_hide()

    def on_input_changed(self, event: Input.Changed) -> None:
        self.search = event.value
        self._rebuild_rows()

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_clear_search(self) -> None:
        self.query_one("#search", Input).value = ""
        self.query_one("#codes", DataTable).focus()

    def _visible_tokens(self) -> List[Token]:
        return [token for token in self.tokens if token.matches(self.search)]

    def _rebuild_rows(self) -> None:
        table = self.query_one("#codes", DataTable)
        if not table.columns:
            return
        table.clear()
        for token in self._visible_tokens():
            entry = self.timer.get_cached_data(token.id)
            code = format_code(entry.code) if entry else self.timer.placeholder
            remaining = f"{entry.remaining_seconds}s" if entry else ""
            table.add_row(token.issuer, token.account, code, remaining, key=token.id)

    def _refresh_rows(self) -> None:
        table = self.query_one("#codes", DataTable)
        if not table.row_count:
            return
        for token in self._visible_tokens():
            entry = self.timer.get_cached_data(token.id)
            if entry is None:
                continue
            table.update_cell(token.id, "code", format_code(entry.code))
            table.update_cell(token.id, "remaining", f"{entry.remaining_seconds}s")

    def _on_tick(self, tick: int) -> None:
        self._refresh_rows()
