"""
Runtime configuration for the Firebase analytics dashboard.
"""

from __future__ import annotations

import os
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field


class DashboardConfig(BaseModel):
    data_dir: str = Field(default_factory=lambda: os.path.join(os.getcwd(), "data"))
    """Root directory holding one sub-folder per exported project."""

    default_folder: str = "default"
    """Folder used when a request does not name one."""

    log_level: str = "INFO"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or default


def load_dashboard_config(overrides: Optional[Mapping[str, Any]] = None) -> DashboardConfig:
    """
    Build the config from model defaults, then ``overrides``, then the environment.
    """

    cfg = DashboardConfig()
    o = dict(overrides or {})

    return DashboardConfig(
        data_dir=_env_str("FIREBASE_DASHBOARD_DATA_DIR", str(o.get("data_dir", cfg.data_dir))),
        default_folder=_env_str(
            "FIREBASE_DASHBOARD_DEFAULT_FOLDER", str(o.get("default_folder", cfg.default_folder))
        ),
        log_level=_env_str("LOG_LEVEL", str(o.get("log_level", cfg.log_level))).upper(),
        cors_allow_origins=_env_list(
            "CORS_ALLOW_ORIGINS", list(o.get("cors_allow_origins", cfg.cors_allow_origins))
        ),
    )
