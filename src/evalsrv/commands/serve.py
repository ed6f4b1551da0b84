"""serve — run the line evaluation server until interrupted."""

from __future__ import annotations

import click
import structlog

from evalsrv.commands._base import EvalCommand

logger = structlog.get_logger(__name__)

LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


@click.command(
    cls=EvalCommand,
    examples="""\
  # Serve on the configured port (default 9999, loopback only)
  evalsrv serve

  # Restricted arithmetic evaluator on all interfaces
  evalsrv serve --host 0.0.0.0 --port 9000 --evaluator arithmetic

  # JSON connection logs
  evalsrv --log-json serve""",
)
@click.option("--host", default=None, help="Bind address. [default: server.host]")
@click.option("--port", default=None, type=int, help="Listen port. [default: server.port]")
@click.option("--evaluator", default=None, help="Evaluator name. [default: server.evaluator]")
@click.pass_obj
def serve(app: object, host: str | None, port: int | None, evaluator: str | None) -> None:
    """Evaluate newline-terminated commands from TCP clients.

    With the python evaluator every client can run arbitrary code with
    this process's privileges.
    """
    from evalsrv.commands._context import AppContext
    from evalsrv.errors import BindError, UnknownEvaluatorError
    from evalsrv.server.main import ServerMain

    assert isinstance(app, AppContext)
    cfg = app.settings.server
    host = host or cfg.host
    port = cfg.port if port is None else port
    name = evaluator or cfg.evaluator

    try:
        factory = app.plugins.get_factory(name)
    except UnknownEvaluatorError as exc:
        raise click.BadParameter(str(exc), param_hint="'--evaluator'") from exc

    if name == "python" and host not in LOOPBACK_HOSTS:
        logger.warning("unrestricted_evaluator_exposed", host=host, evaluator=name)

    server = ServerMain(factory, host=host, reuse_address=cfg.reuse_address)
    try:
        server.run(port)
    except BindError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
