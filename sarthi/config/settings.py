"""
Central configuration for the Sarthi completion engine.

All tunables live here. Nothing is hardcoded in module code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache


def _project_root() -> Path:
    """Walk up from this file to find the project root (where pyproject.toml lives)."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    # Fallback: two levels up from config/settings.py
    return Path(__file__).resolve().parent.parent.parent


@dataclass(frozen=True)
class RemoteSettings:
    """Settings for the remote suggestion backend connection."""

    # Websocket endpoint of the suggestion backend
    endpoint: str = "wss://codehelper-backend.onrender.com/ws"

    # Base reconnect delay (seconds). Actual wait = base * attempt
    reconnect_delay: float = 5.0

    # How long a connection may stay unopened before it is abandoned (seconds)
    connection_timeout: float = 45.0

    # Reconnect attempts before falling back to local suggestions for good
    max_reconnect_attempts: int = 5

    # Disable to run with local + static suggestions only
    enabled: bool = True


@dataclass(frozen=True)
class CompletionSettings:
    """Settings for prefix extraction, ranking and re-tokenization."""

    # Shortest prefix that triggers suggestions
    min_prefix_length: int = 2

    # Maximum suggestions returned per edit
    max_suggestions: int = 10

    # Interval between full re-tokenizations of the buffer (seconds)
    parse_interval: float = 2.0

    # Language assumed when the caller does not name one
    default_language: str = "cpp"


@dataclass(frozen=True)
class LoggingSettings:
    """Settings for console and rotating-file logging."""

    # Log file name inside Settings.logs_dir
    file_name: str = "sarthi.log"

    # Rotate the log file after this many bytes
    max_bytes: int = 10 * 1024 * 1024  # 10 MB

    # Rotated files kept alongside the active one
    backup_count: int = 5

    # Third-party loggers held at WARNING unless debug is on
    quiet_loggers: tuple[str, ...] = ("aiohttp", "uvicorn.access")


@dataclass
class Settings:
    """
    Top-level settings container. Aggregates all subsystem settings.

    Usage:
        settings = get_settings()
        print(settings.remote.reconnect_delay)
        print(settings.completion.max_suggestions)
        print(settings.logging.file_name)
    """

    project_root: Path = field(default_factory=_project_root)
    debug: bool = False
    remote: RemoteSettings = field(default_factory=RemoteSettings)
    completion: CompletionSettings = field(default_factory=CompletionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def data_dir(self) -> Path:
        """Root directory for all runtime data (indexes, logs)."""
        return self.project_root / "data"

    @property
    def indexes_dir(self) -> Path:
        """Directory for saved prefix index snapshots."""
        return self.data_dir / "indexes"

    @property
    def logs_dir(self) -> Path:
        """Root directory for log files."""
        return self.data_dir / "logs"

    def ensure_dirs(self) -> None:
        """Create all required data directories if they don't exist."""
        self.indexes_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Returns the singleton Settings instance.

    Call this instead of constructing Settings() directly so the entire
    application shares one config object.
    """
    settings = Settings()
    settings.ensure_dirs()
    return settings
