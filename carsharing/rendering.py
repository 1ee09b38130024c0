"""Rendering helpers for menu screens."""

from __future__ import annotations

from rich.text import Text


def format_title(title: str) -> Text:
    """Render a menu title."""
    return Text(title, style="bold")


def format_option(index: int, description: str) -> Text:
    """Render a numbered option line as ``<index>. <description>``."""
    text = Text()
    text.append(f"{index}.", style="bold cyan")
    text.append(f" {description}")
    return text


def format_numbered(items: list[str]) -> list[Text]:
    """Render a plain 1-based numbered listing."""
    return [format_option(idx, item) for idx, item in enumerate(items, start=1)]


def format_back(has_parent: bool) -> Text:
    """Render the trailing 0 entry."""
    return format_option(0, "Back" if has_parent else "Exit")
