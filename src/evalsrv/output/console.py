"""Rich Console factory, theme, and renderers for evalsrv CLI output.

Consoles render to a StringIO buffer so renderers return plain strings.
In non-TTY environments (tests, pipes) Rich disables color codes.
"""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from evalsrv.config.settings import EvalsrvSettings

EVALSRV_THEME = Theme(
    {
        "evalsrv.section": "bold cyan",
        "evalsrv.key": "dim",
        "evalsrv.value": "bold",
        "evalsrv.command": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=EVALSRV_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def render_settings(settings: EvalsrvSettings, *, no_color: bool = False) -> str:
    """Render the resolved [server] and [client] sections as a table."""
    console = create_console(no_color=no_color)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Section", style="evalsrv.section")
    table.add_column("Key", style="evalsrv.key")
    table.add_column("Value", style="evalsrv.value")

    for section_name in ("server", "client"):
        section = getattr(settings, section_name)
        for key, value in section.model_dump().items():
            table.add_row(section_name, key, str(value))

    source = str(settings.config_path) if settings.config_path else "(defaults)"
    console.print(f"Config: {escape(source)}")
    console.print(table)
    return get_output(console).rstrip("\n")


def render_exchange(pairs: Sequence[tuple[str, str]], *, no_color: bool = False) -> str:
    """Render command/response pairs, one ``> command`` / response block each."""
    console = create_console(no_color=no_color)
    for command, response in pairs:
        console.print(f"[evalsrv.command]> {escape(command)}[/]")
        console.print(response, markup=False)
    return get_output(console).rstrip("\n")
