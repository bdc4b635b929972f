"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class ReportSettings:
    """
    Runtime settings shared by every report job.
    """

    artifacts_topic: str = "visualizations"
    throttle_seconds: float = 1.0
    total_region: str = "Total"
    scheduler_enabled: bool = True


@dataclass(frozen=True)
class RendererSettings:
    """
    Chart rendering service settings.
    """

    url: str | None = None
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class PublisherSettings:
    """
    Message bus REST proxy settings.
    """

    base_url: str | None = None
    timeout_seconds: float = 10.0


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report settings from environment variables.
    """

    return ReportSettings(
        artifacts_topic=_get_str_env("REPORT_ARTIFACTS_TOPIC", "visualizations"),
        throttle_seconds=max(0.0, _get_float_env("REPORT_THROTTLE_SECONDS", 1.0)),
        total_region=_get_str_env("REPORT_TOTAL_REGION", "Total"),
        scheduler_enabled=_get_bool_env("REPORT_SCHEDULER_ENABLED", True),
    )


@lru_cache(maxsize=1)
def get_renderer_settings() -> RendererSettings:
    """
    Return cached renderer settings from environment variables.
    """

    return RendererSettings(
        url=_get_optional_str_env("RENDERER_URL"),
        timeout_seconds=max(1.0, _get_float_env("RENDERER_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_publisher_settings() -> PublisherSettings:
    """
    Return cached publisher settings from environment variables.
    """

    return PublisherSettings(
        base_url=_get_optional_str_env("PUBLISHER_BASE_URL"),
        timeout_seconds=max(1.0, _get_float_env("PUBLISHER_TIMEOUT_SECONDS", 10.0)),
    )
