"""evalsrv — a line-oriented TCP evaluation server."""

__version__ = "0.1.0"
