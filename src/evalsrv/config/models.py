"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, evalsrv.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_PORT = 9999
LOOPBACK = "127.0.0.1"


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    host: str = LOOPBACK
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    evaluator: str = "python"
    reuse_address: bool = True


class ClientConfig(BaseModel):
    """[client] section."""

    model_config = {"frozen": True}

    host: str = LOOPBACK
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    connect_timeout: float = Field(default=5.0, gt=0)
    retry_interval: float = Field(default=0.05, gt=0)
