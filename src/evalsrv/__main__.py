"""Allow ``python -m evalsrv``."""

from evalsrv.cli import cli

if __name__ == "__main__":
    cli()
