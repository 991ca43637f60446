from pydantic import BaseModel, Field
import os

from aw_client.errors import ConfigError

DEFAULT_PORT = 5600
DEFAULT_TESTING_PORT = 5666


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_port() -> int | None:
    raw = os.getenv("AW_SERVER_PORT", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"AW_SERVER_PORT must be an integer, got {raw!r}") from exc


def _env_timeout() -> float:
    raw = os.getenv("AW_CLIENT_TIMEOUT", "120")
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"AW_CLIENT_TIMEOUT must be a number of seconds, got {raw!r}") from exc


class Settings(BaseModel):
    server_host: str = Field(default_factory=lambda: os.getenv("AW_SERVER_HOST", "127.0.0.1"))
    server_port: int | None = Field(default_factory=_env_port)
    testing: bool = Field(default_factory=lambda: _env_bool("AW_TESTING"))
    timeout_s: float = Field(default_factory=_env_timeout)
    log_level: str = Field(default_factory=lambda: os.getenv("AW_LOG_LEVEL", "INFO").upper())

    @property
    def port(self) -> int:
        if self.server_port is not None:
            return self.server_port
        return DEFAULT_TESTING_PORT if self.testing else DEFAULT_PORT


def load_settings() -> Settings:
    """Read settings from the environment; raises ConfigError on unparsable values."""
    return Settings()
