"""
Configuration management for the Carrier Tracker.
Handles loading settings from environment variables and config files.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv


DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
DEFAULT_ACCEPT_LANGUAGE = "es-CO,es;q=0.9,en;q=0.8"


@dataclass
class TrackerConfig:
    """Main configuration class for the tracker."""

    # === HTTP ===
    request_timeout: float = 15.0  # seconds, whole fetch
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE

    # Shared outbound connection pool (0 = one connection set per query)
    pool_limit: int = 20
    max_concurrency: int = 10  # batch lookups

    # === Extraction thresholds ===
    min_content_bytes: int = 100
    min_text_length: int = 50

    # === Carrier endpoints ===
    copetran_base_url: str = "https://autogestion.copetran.com.co/gestion_2"
    transmoralar_base_url: str = "https://transmoralar.softwareparati.com"

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # empty = console only

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "TrackerConfig":
        """Load configuration from environment variables."""

        # Try to load from .env file
        if env_file:
            load_dotenv(env_file)
        else:
            # Try common locations
            for env_path in ["config.env", ".env", "../config.env"]:
                if Path(env_path).exists():
                    load_dotenv(env_path)
                    break

        defaults = cls()

        return cls(
            # HTTP
            request_timeout=float(os.getenv("TRACKER_REQUEST_TIMEOUT", str(defaults.request_timeout))),
            max_redirects=int(os.getenv("TRACKER_MAX_REDIRECTS", str(defaults.max_redirects))),
            user_agent=os.getenv("TRACKER_USER_AGENT", DEFAULT_USER_AGENT),
            accept_language=os.getenv("TRACKER_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
            pool_limit=int(os.getenv("TRACKER_POOL_LIMIT", str(defaults.pool_limit))),
            max_concurrency=int(os.getenv("TRACKER_MAX_CONCURRENCY", str(defaults.max_concurrency))),

            # Thresholds
            min_content_bytes=int(os.getenv("TRACKER_MIN_CONTENT_BYTES", str(defaults.min_content_bytes))),
            min_text_length=int(os.getenv("TRACKER_MIN_TEXT_LENGTH", str(defaults.min_text_length))),

            # Carriers
            copetran_base_url=os.getenv("COPETRAN_BASE_URL", defaults.copetran_base_url),
            transmoralar_base_url=os.getenv("TRANSMORALAR_BASE_URL", defaults.transmoralar_base_url),

            # Logging
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", ""),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.request_timeout <= 0:
            errors.append("TRACKER_REQUEST_TIMEOUT must be positive")
        if self.max_redirects < 0:
            errors.append("TRACKER_MAX_REDIRECTS cannot be negative")
        if self.pool_limit < 0:
            errors.append("TRACKER_POOL_LIMIT cannot be negative")
        if self.max_concurrency < 1:
            errors.append("TRACKER_MAX_CONCURRENCY must be at least 1")

        for name in ("copetran_base_url", "transmoralar_base_url"):
            if not getattr(self, name).startswith(("http://", "https://")):
                errors.append(f"{name.upper()} must be an http(s) URL")

        return errors


# Global config instance
_config: Optional[TrackerConfig] = None


def get_config() -> TrackerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = TrackerConfig.from_env()
    return _config


def init_config(env_file: Optional[str] = None) -> TrackerConfig:
    """Initialize configuration from environment."""
    global _config
    _config = TrackerConfig.from_env(env_file)
    return _config
