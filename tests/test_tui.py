"""Tests for the live code TUI."""

import pytest
from textual.widgets import DataTable

from keyden.config import Config
from keyden.models import Token
from keyden.tui.app import KeydenApp
from keyden.tui.screens.codes import CodesScreen, format_code

SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def tokens():
    return [
        Token(secret=SECRET, issuer="GitHub", account="alice", id="t1"),
        Token(secret="!!!", issuer="Broken", account="bob", id="t2"),
    ]


class TestFormatCode:
    """Tests for format_code()."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("123456", "123 456"),
            ("12345678", "1234 5678"),
            ("------", "------"),
            ("1234", "1234"),
        ],
    )
    def test_format(self, code, expected):
        assert format_code(code) == expected


class TestKeydenApp:
    """Tests for KeydenApp with the timer service."""

    @pytest.mark.asyncio
    async def test_codes_screen_drives_timer(self, tokens):
        app = KeydenApp(tokens, config=Config())

        async with app.run_test() as pilot:
            await pilot.pause()
            assert isinstance(app.screen, CodesScreen)
            assert app.timer.should_run is True
            assert app.timer.is_active is True
            assert sorted(app.timer.registered_ids) == ["t1", "t2"]

            table = app.screen.query_one("#codes", DataTable)
            assert table.row_count == 2
            assert app.timer.get_cached_data("t2").code == "------"

        assert app.timer.is_active is False

    @pytest.mark.asyncio
    async def test_initial_search_filters_rows(self, tokens):
        app = KeydenApp(tokens, search="git", config=Config())

        async with app.run_test() as pilot:
            await pilot.pause()
            table = app.screen.query_one("#codes", DataTable)
            assert table.row_count == 1
