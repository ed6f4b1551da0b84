"""send — send command lines to a running server and print the replies."""

from __future__ import annotations

import json

import click

from evalsrv.commands._base import EvalCommand


@click.command(
    cls=EvalCommand,
    examples="""\
  # One command, default client address
  evalsrv send "2+2"

  # Several commands on one connection, answered in order
  evalsrv send "x = 21" "x * 2"

  # Machine-readable output
  evalsrv --json send --port 9000 '2**10'""",
)
@click.argument("commands", nargs=-1, required=True)
@click.option("--host", default=None, help="Server address. [default: client.host]")
@click.option("--port", default=None, type=int, help="Server port. [default: client.port]")
@click.option(
    "--timeout",
    default=None,
    type=float,
    help="Seconds to keep retrying the connection. [default: client.connect_timeout]",
)
@click.pass_obj
def send(
    app: object,
    commands: tuple[str, ...],
    host: str | None,
    port: int | None,
    timeout: float | None,
) -> None:
    """Send COMMANDS over one connection, one line each."""
    from evalsrv.client import LineClient
    from evalsrv.commands._context import AppContext
    from evalsrv.errors import ClientConnectError
    from evalsrv.output.console import render_exchange

    assert isinstance(app, AppContext)
    cfg = app.settings.client
    client = LineClient(
        host or cfg.host,
        cfg.port if port is None else port,
        connect_timeout=cfg.connect_timeout if timeout is None else timeout,
        retry_interval=cfg.retry_interval,
    )

    pairs: list[tuple[str, str]] = []
    try:
        with client:
            for command in commands:
                pairs.append((command, client.send(command)))
    except ClientConnectError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except (ConnectionError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if app.settings.json_output:
        payload = [{"command": c, "response": r} for c, r in pairs]
        click.echo(json.dumps(payload))
    elif app.settings.quiet:
        for _, response in pairs:
            click.echo(response)
    else:
        click.echo(render_exchange(pairs))
