"""Configuration via environment variables with cloud-native secret support.

Supports:
  - Environment variables and .env files (local use)
  - Token references to AWS Secrets Manager, GCP Secret Manager or a file
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from mmadmin.secrets import resolve_secret

DEFAULT_PAGE_SIZE = 200
OUTPUT_FORMATS = ("plain", "json")


@dataclass(frozen=True)
class ServerConfig:
    url: str
    token: str
    timeout: float = 30.0
    max_retries: int = 3
    retry_base_seconds: float = 1.0

    @property
    def api_url(self) -> str:
        return f"{self.url.rstrip('/')}/api/v4"


@dataclass(frozen=True)
class OutputConfig:
    format: str = "plain"
    log_level: str = "WARNING"
    log_format: str = "text"


@dataclass(frozen=True)
class AdminConfig:
    server: ServerConfig
    output: OutputConfig = field(default_factory=OutputConfig)
    page_size: int = DEFAULT_PAGE_SIZE


def load_config(env: dict[str, str] | None = None) -> AdminConfig:
    """Load configuration from environment variables.

    ``env`` replaces ``os.environ`` (and skips .env loading) when given.
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    url = env.get("MMADMIN_URL", "")
    if not url:
        raise ValueError("MMADMIN_URL environment variable is required")

    token_raw = env.get("MMADMIN_TOKEN", "")
    if not token_raw:
        raise ValueError("MMADMIN_TOKEN environment variable is required")

    server = ServerConfig(
        url=url,
        token=resolve_secret(token_raw, "MMADMIN_TOKEN"),
        timeout=float(env.get("MMADMIN_TIMEOUT", "30")),
        max_retries=int(env.get("MMADMIN_MAX_RETRIES", "3")),
    )

    fmt = env.get("MMADMIN_FORMAT", "plain").lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"MMADMIN_FORMAT must be one of {', '.join(OUTPUT_FORMATS)}")

    output = OutputConfig(
        format=fmt,
        log_level=env.get("LOG_LEVEL", "WARNING"),
        log_format=env.get("LOG_FORMAT", "text").lower(),
    )

    page_size = int(env.get("MMADMIN_PAGE_SIZE", str(DEFAULT_PAGE_SIZE)))
    if page_size <= 0:
        raise ValueError("MMADMIN_PAGE_SIZE must be a positive integer")

    return AdminConfig(server=server, output=output, page_size=page_size)
