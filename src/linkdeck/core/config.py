"""Server configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_DIR = Path("/data")
DATA_FILENAME = "links.json"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_STATIC_FILE = Path(__file__).resolve().parent.parent / "web" / "static" / "index.html"

API_LINKS_PATH = "/api/links"


@dataclass(frozen=True)
class ServerConfig:
    """Paths and bind address, built once at startup and passed down.

    ``data_file`` is always ``data_dir / links.json``.
    """

    data_dir: Path = DEFAULT_DATA_DIR
    static_file: Path = DEFAULT_STATIC_FILE
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    data_file: Path = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data_dir", Path(self.data_dir))
        object.__setattr__(self, "static_file", Path(self.static_file))
        object.__setattr__(self, "data_file", self.data_dir / DATA_FILENAME)


def default_config() -> ServerConfig:
    """Return the configuration used when no options are given."""
    return ServerConfig()
