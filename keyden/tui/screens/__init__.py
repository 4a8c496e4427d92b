"""TUI screens for keyden."""

from keyden.tui.screens.codes import CodesScreen

__all__ = ["CodesScreen"]
