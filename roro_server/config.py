"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from roro_engine.config import DEFAULT_CONFIG, EngineConfig

# Load .env from project root (single .env for server and scripts)
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)

STORAGE_BACKENDS = ("memory", "firebase")


def _bool_env(key: str, default: bool) -> bool:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Storage: "memory" (process-local) or "firebase" (Firestore)
    storage_backend: str = "memory"
    # When storage_backend=firebase: path to service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Optional JSON file with engine overrides (weights, scoring, telemetry, experiments)
    engine_config_path: Optional[Path] = None

    # Cookies: anonymous session id and per-experiment sticky variant
    cookie_max_age_days: int = 180
    cookie_secure: bool = False

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        backend = os.getenv("STORAGE_BACKEND", "memory").strip().lower() or "memory"
        if backend not in STORAGE_BACKENDS:
            backend = "memory"

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            storage_backend=backend,
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            engine_config_path=_path_env("ENGINE_CONFIG_PATH"),
            cookie_max_age_days=int(os.getenv("COOKIE_MAX_AGE_DAYS", "180")),
            cookie_secure=_bool_env("COOKIE_SECURE", False),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.storage_backend == "firebase":
            if not self.firebase_credentials_path:
                errors.append("STORAGE_BACKEND=firebase requires FIREBASE_CREDENTIALS_PATH")
            elif not Path(self.firebase_credentials_path).is_file():
                errors.append(f"Firebase credentials file not found: {self.firebase_credentials_path}")

        if self.engine_config_path and not Path(self.engine_config_path).is_file():
            errors.append(f"Engine config file not found: {self.engine_config_path}")

        return len(errors) == 0, errors

    def load_engine_config(self) -> EngineConfig:
        """Engine config from ENGINE_CONFIG_PATH, or defaults."""
        if self.engine_config_path and Path(self.engine_config_path).is_file():
            return EngineConfig.from_file(self.engine_config_path)
        return DEFAULT_CONFIG


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
