"""config — show the resolved settings."""

from __future__ import annotations

import json

import click

from evalsrv.commands._base import EvalCommand


@click.command(
    "config",
    cls=EvalCommand,
    examples="""\
  # Table of effective [server] and [client] values
  evalsrv config

  # As JSON, from an explicit file
  evalsrv --json -c ./evalsrv.toml config""",
)
@click.pass_obj
def config_cmd(app: object) -> None:
    """Show effective settings after merging flags, env vars and evalsrv.toml."""
    from evalsrv.commands._context import AppContext
    from evalsrv.output.console import render_settings

    assert isinstance(app, AppContext)
    settings = app.settings
    if settings.json_output:
        payload = {
            "config_path": str(settings.config_path) if settings.config_path else None,
            "server": settings.server.model_dump(mode="json"),
            "client": settings.client.model_dump(mode="json"),
        }
        click.echo(json.dumps(payload))
    else:
        click.echo(render_settings(settings))
