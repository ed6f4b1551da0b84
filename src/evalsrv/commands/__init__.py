"""Subcommand modules for evalsrv.

Provides register_commands() which uses deferred imports to keep
``evalsrv --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from evalsrv.commands.config_cmd import config_cmd
    from evalsrv.commands.send import send
    from evalsrv.commands.serve import serve

    cli.add_command(serve)
    cli.add_command(send)
    cli.add_command(config_cmd)
