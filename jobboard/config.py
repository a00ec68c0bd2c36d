"""Load settings from config/settings.yaml, .env and environment overrides."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobboard.log import get_logger
from jobboard.models import FallbackPolicy

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT_DIR / "data"

DEFAULT_API_URL = "https://6857e2b721f5d3463e5676b9.mockapi.io/api/v1"


@dataclass
class Settings:
    api_base_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    fallback_policy: FallbackPolicy = FallbackPolicy.SILENT
    storage_path: Path | None = DATA_DIR / "local_storage.json"
    storage_key: str = "appliedJobs"
    submit_endpoint: str | None = None
    submit_delay: float = 2.0


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _storage_path(value: Any) -> Path | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in ("none", "memory"):
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else ROOT_DIR / path


def _number(value: Any, default: float, name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number (got {value!r})") from None


def _policy(value: Any) -> FallbackPolicy:
    try:
        return FallbackPolicy(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in FallbackPolicy)
        raise ValueError(f"fallback_policy must be one of: {allowed} (got {value!r})") from None


def load_settings(path: str | Path | None = None) -> Settings:
    """Merge defaults, the YAML file (if present) and JOBBOARD_* environment variables."""
    settings_path = Path(path or get_env("JOBBOARD_SETTINGS") or SETTINGS_PATH)
    data: dict[str, Any] = {}
    if settings_path.exists():
        with open(settings_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{settings_path} must contain a mapping")
        log.debug("Loaded settings from %s", settings_path)

    env_overrides = {
        "api_base_url": get_env("JOBBOARD_API_URL"),
        "timeout": get_env("JOBBOARD_TIMEOUT"),
        "fallback_policy": get_env("JOBBOARD_FALLBACK_POLICY"),
        "storage_path": get_env("JOBBOARD_STORAGE"),
        "submit_endpoint": get_env("JOBBOARD_SUBMIT_URL"),
    }
    data.update({k: v for k, v in env_overrides.items() if v})

    defaults = Settings()
    return Settings(
        api_base_url=str(data.get("api_base_url") or defaults.api_base_url),
        timeout=_number(data.get("timeout"), defaults.timeout, "timeout"),
        fallback_policy=_policy(data.get("fallback_policy", defaults.fallback_policy.value)),
        storage_path=_storage_path(data["storage_path"]) if "storage_path" in data else defaults.storage_path,
        storage_key=str(data.get("storage_key") or defaults.storage_key),
        submit_endpoint=data.get("submit_endpoint") or None,
        submit_delay=_number(data.get("submit_delay"), defaults.submit_delay, "submit_delay"),
    )
