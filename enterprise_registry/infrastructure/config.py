"""
Configuration Management - Loads settings from the environment and .env files
"""

import logging
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


@dataclass
class LoggingConfig:
    """Logging configuration settings"""

    level: str = "INFO"
    format_type: str = "json"
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Load logging config from environment variables"""
        format_type = os.getenv("LOG_FORMAT", "json").lower()
        if format_type not in ("json", "text"):
            logger.warning(f"Unknown LOG_FORMAT '{format_type}', falling back to json")
            format_type = "json"

        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            format_type=format_type,
            log_file=os.getenv("LOG_FILE") or None,
        )


class DSNBuilder:
    """
    Fluent builder for PostgreSQL connection URLs.

    Credentials are percent-encoded. Query parameters are only emitted for
    settings that differ from the libpq defaults.
    """

    def __init__(self) -> None:
        self.host = "localhost"
        self.port = 5432
        self.database = "registry"
        self.user = ""
        self.password: str | None = None
        self.ssl_mode = "prefer"
        self.ssl_files: dict[str, str] = {}

    def with_host(self, host: str) -> "DSNBuilder":
        self.host = host
        return self

    def with_port(self, port: int) -> "DSNBuilder":
        self.port = port
        return self

    def with_database(self, database: str) -> "DSNBuilder":
        self.database = database
        return self

    def with_credentials(self, user: str, password: str | None = None) -> "DSNBuilder":
        self.user = user
        self.password = password
        return self

    def with_ssl(
        self,
        mode: str = "prefer",
        cert: str | None = None,
        key: str | None = None,
        ca: str | None = None,
    ) -> "DSNBuilder":
        """Set the SSL mode and the client certificate, key and root CA files."""
        self.ssl_mode = mode
        files = {"sslcert": cert, "sslkey": key, "sslrootcert": ca}
        self.ssl_files = {name: path for name, path in files.items() if path}
        return self

    def _userinfo(self) -> str:
        user = quote(self.user, safe="")
        if self.password:
            return f"{user}:{quote(self.password, safe='')}@"
        return f"{user}@" if user else ""

    def build(self) -> str:
        """
        Build the connection URL.

        Returns:
            postgresql:// URL accepted by psycopg
        """
        query: dict[str, Any] = {}
        if self.ssl_mode != "prefer":
            query["sslmode"] = self.ssl_mode
        query.update(self.ssl_files)

        dsn = f"postgresql://{self._userinfo()}{self.host}:{self.port}/{self.database}"
        return f"{dsn}?{urlencode(query, safe='/')}" if query else dsn
