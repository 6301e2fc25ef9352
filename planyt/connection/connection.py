from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class ConnectionSettings:
    """Dremio Flight SQL endpoint and credentials."""

    uri: str
    username: Optional[str] = None
    password: Optional[str] = None

    def db_kwargs(self) -> Dict[str, Any]:
        kwargs = {"username": self.username, "password": self.password}
        return {k: v for k, v in kwargs.items() if v is not None}


def get_connection() -> ConnectionSettings:
    load_dotenv()
    host = os.getenv("DREMIO_HOST", "localhost")
    port = os.getenv("DREMIO_PORT", "32010")
    # grpc+tls://host:port, or grpc://host:port without TLS
    use_tls = os.getenv("DREMIO_USE_TLS", "false").lower() == "true"
    protocol = "grpc+tls" if use_tls else "grpc"

    return ConnectionSettings(
        uri=f"{protocol}://{host}:{port}",
        username=os.getenv("DREMIO_USER"),
        password=os.getenv("DREMIO_PASSWORD"),
    )
