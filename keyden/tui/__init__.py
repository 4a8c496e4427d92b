"""TUI module for keyden live code display."""

from keyden.tui.app import KeydenApp, run_tui

__all__ = ["KeydenApp", "run_tui"]
