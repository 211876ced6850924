"""Configuration management for Booknav.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from booknav.core.location import DEFAULT_DOCUMENT
from booknav.core.sidebar import DEFAULT_STORAGE_KEY, IndexAlias, SidebarOptions

CONFIG_FILENAME = "booknav.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class BookConfig:
    """Book output configuration."""

    toc_file: Path = field(default_factory=lambda: Path("toc.html"))
    build_dir: Path = field(default_factory=lambda: Path("book"))


@dataclass
class SidebarConfig:
    """Sidebar behavior configuration."""

    storage_key: str = DEFAULT_STORAGE_KEY
    default_document: str = DEFAULT_DOCUMENT
    index_alias: IndexAlias = IndexAlias.FIRST_ENTRY
    row_height: int = 24
    viewport_height: int = 600

    def to_options(self) -> SidebarOptions:
        """Convert to controller options."""
        return SidebarOptions(
            storage_key=self.storage_key,
            default_document=self.default_document,
            index_alias=self.index_alias,
            row_height=self.row_height,
            viewport_height=self.viewport_height,
        )


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    book: BookConfig
    sidebar: SidebarConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for booknav.toml in current directory and parents.

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
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            book=BookConfig(),
            sidebar=SidebarConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            book=cls._parse_book(data.get("book"), config_dir),
            sidebar=cls._parse_sidebar(data.get("sidebar")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
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
    def _parse_book(cls, data: object, config_dir: Path) -> BookConfig:
        """Parse book configuration section.

        Args:
            data: Raw book section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            BookConfig instance
        """
        if data is None:
            return BookConfig(
                toc_file=config_dir / "toc.html",
                build_dir=config_dir / "book",
            )

        if not isinstance(data, dict):
            raise ValueError("book section must be a dictionary")

        toc_file = data.get("toc_file", "toc.html")
        if not isinstance(toc_file, str):
            raise ValueError("book.toc_file must be a string")

        build_dir = data.get("build_dir", "book")
        if not isinstance(build_dir, str):
            raise ValueError("book.build_dir must be a string")

        return BookConfig(
            toc_file=config_dir / toc_file,
            build_dir=config_dir / build_dir,
        )

    @classmethod
    def _parse_sidebar(cls, data: object) -> SidebarConfig:
        """Parse sidebar configuration section.

        Args:
            data: Raw sidebar section data

        Returns:
            SidebarConfig instance
        """
        if data is None:
            return SidebarConfig()

        if not isinstance(data, dict):
            raise ValueError("sidebar section must be a dictionary")

        storage_key = data.get("storage_key", DEFAULT_STORAGE_KEY)
        if not isinstance(storage_key, str) or not storage_key:
            raise ValueError("sidebar.storage_key must be a non-empty string")

        default_document = data.get("default_document", DEFAULT_DOCUMENT)
        if not isinstance(default_document, str) or not default_document:
            raise ValueError("sidebar.default_document must be a non-empty string")

        index_alias_raw = data.get("index_alias", IndexAlias.FIRST_ENTRY.value)
        try:
            index_alias = IndexAlias(index_alias_raw)
        except ValueError:
            choices = ", ".join(f'"{alias.value}"' for alias in IndexAlias)
            raise ValueError(f"sidebar.index_alias must be one of {choices}") from None

        row_height = data.get("row_height", 24)
        if not isinstance(row_height, int) or isinstance(row_height, bool) or row_height <= 0:
            raise ValueError("sidebar.row_height must be a positive integer")

        viewport_height = data.get("viewport_height", 600)
        if (
            not isinstance(viewport_height, int)
            or isinstance(viewport_height, bool)
            or viewport_height <= 0
        ):
            raise ValueError("sidebar.viewport_height must be a positive integer")

        return SidebarConfig(
            storage_key=storage_key,
            default_document=default_document,
            index_alias=index_alias,
            row_height=row_height,
            viewport_height=viewport_height,
        )

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        return LiveReloadConfig(enabled=enabled)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        toc_file: Path | None = None,
        build_dir: Path | None = None,
        index_alias: IndexAlias | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            toc_file: Override book.toc_file
            build_dir: Override book.build_dir
            index_alias: Override sidebar.index_alias
            live_reload_enabled: Override live_reload.enabled

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

        book = self.book
        if toc_file is not None or build_dir is not None:
            book = replace(
                self.book,
                toc_file=toc_file if toc_file is not None else self.book.toc_file,
                build_dir=build_dir if build_dir is not None else self.book.build_dir,
            )

        sidebar = self.sidebar
        if index_alias is not None:
            sidebar = replace(self.sidebar, index_alias=index_alias)

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(
            self,
            server=server,
            book=book,
            sidebar=sidebar,
            live_reload=live_reload,
        )
