"""Configuration management for catalog-admin.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

CONFIG_FILENAME = "catalog-admin.toml"
DEFAULT_TIMEOUT = 30.0


@dataclass
class ServerConfig:
    """Console server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class CatalogConfig:
    """Catalog store connection configuration."""

    base_url: str | None = None
    token: str = ""
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    catalog: CatalogConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for catalog-admin.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        return cls(server=ServerConfig(), catalog=CatalogConfig())

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        server = cls._parse_server(data.get("server"))
        catalog = cls._parse_catalog(data.get("catalog"))

        return cls(server=server, catalog=catalog, config_path=path)

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section.

        Args:
            data: Raw server section data

        Returns:
            ServerConfig instance
        """
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_catalog(cls, data: object) -> CatalogConfig:
        """Parse catalog configuration section.

        Args:
            data: Raw catalog section data

        Returns:
            CatalogConfig instance
        """
        if data is None:
            return CatalogConfig()

        if not isinstance(data, dict):
            raise ValueError("catalog section must be a dictionary")

        base_url = data.get("base_url")
        if base_url is not None and not isinstance(base_url, str):
            raise ValueError("catalog.base_url must be a string")

        token = data.get("token", "")
        if not isinstance(token, str):
            raise ValueError("catalog.token must be a string")

        timeout = data.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, int | float):
            raise ValueError("catalog.timeout must be a number")
        if timeout <= 0:
            raise ValueError("catalog.timeout must be positive")

        return CatalogConfig(base_url=base_url, token=token, timeout=float(timeout))

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        base_url: str | None = None,
        token: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. This follows
        the immutable pattern - the original Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            base_url: Override catalog.base_url
            token: Override catalog.token

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        catalog = self.catalog
        if base_url is not None or token is not None:
            catalog = replace(
                self.catalog,
                base_url=base_url if base_url is not None else self.catalog.base_url,
                token=token if token is not None else self.catalog.token,
            )

        return replace(self, server=server, catalog=catalog)
