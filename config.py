"""Config management for the GitHub OAuth provider."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_SCOPE = "repo user"
DEFAULT_SERVICE_NAME = "github-oauth-provider"


class ConfigError(Exception):
    """Raised when required configuration is missing or inconsistent."""


class Config:
    """Configuration container."""

    def __init__(self, data: dict = None):
        self.data = data or {}

    @property
    def client_id(self) -> Optional[str]:
        return self.data.get("client_id")

    @property
    def client_secret(self) -> Optional[str]:
        return self.data.get("client_secret")

    @property
    def server_url(self) -> Optional[str]:
        """Public origin of this service, overriding the request origin."""
        url = self.data.get("server_url")
        return url.rstrip("/") if url else None

    @property
    def scope(self) -> str:
        return self.data.get("scope") or DEFAULT_SCOPE

    @property
    def verify_state(self) -> bool:
        return bool(self.data.get("verify_state", False))

    @property
    def state_secret(self) -> Optional[str]:
        return self.data.get("state_secret")

    @property
    def token_exchange_timeout(self) -> float:
        return float(self.data.get("token_exchange_timeout", 10.0))

    @property
    def host(self) -> str:
        return self.data.get("host") or "0.0.0.0"

    @property
    def port(self) -> int:
        return int(self.data.get("port", 8787))

    @property
    def log_level(self) -> str:
        return (self.data.get("log_level") or "INFO").upper()

    @property
    def service_name(self) -> str:
        return self.data.get("service_name") or DEFAULT_SERVICE_NAME

    @property
    def supabase_url(self) -> Optional[str]:
        return self.data.get("supabase_url")

    @property
    def supabase_anon_key(self) -> Optional[str]:
        return self.data.get("supabase_anon_key")

    def missing(self) -> list:
        """Names of required environment variables that are not set."""
        missing = []
        if not self.client_id:
            missing.append("CLIENT_ID")
        if not self.client_secret:
            missing.append("CLIENT_SECRET")
        if self.verify_state and not self.state_secret:
            missing.append("STATE_SECRET")
        return missing

    def is_valid(self) -> bool:
        """Check if config has required fields."""
        return not self.missing()

    def validate(self) -> "Config":
        """Raise ConfigError if any required value is absent."""
        missing = self.missing()
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        return self


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config(env_file: Path = None) -> Config:
    """Load config from the environment.

    A `.env` file in the working directory (or `env_file`) is loaded first
    without overriding variables already set in the process.
    """
    env_file = env_file or Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    try:
        timeout = float(os.getenv("TOKEN_EXCHANGE_TIMEOUT", "10"))
        port = int(os.getenv("PORT", "8787"))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric configuration: {e}") from e

    return Config({
        "client_id": os.getenv("CLIENT_ID") or os.getenv("GITHUB_CLIENT_ID"),
        "client_secret": os.getenv("CLIENT_SECRET") or os.getenv("GITHUB_CLIENT_SECRET"),
        "server_url": os.getenv("SERVER_URL"),
        "scope": os.getenv("OAUTH_SCOPE", DEFAULT_SCOPE),
        "verify_state": _env_flag("VERIFY_STATE"),
        "state_secret": os.getenv("STATE_SECRET"),
        "token_exchange_timeout": timeout,
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": port,
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "service_name": os.getenv("SERVICE_NAME", DEFAULT_SERVICE_NAME),
        "supabase_url": os.getenv("SUPABASE_URL", ""),
        "supabase_anon_key": os.getenv("SUPABASE_ANON_KEY", ""),
    })
