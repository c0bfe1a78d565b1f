from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("config/server.yaml")


@dataclass(frozen=True)
class ServerSettings:
    """Server-wide settings for the BigQuery connection."""

    project_id: Optional[str] = None  # None: project from application default credentials
    location: Optional[str] = None  # e.g. "US", "EU", "asia-northeast1"

    def with_overrides(
        self, *, project_id: Optional[str] = None, location: Optional[str] = None
    ) -> "ServerSettings":
        """Return a copy with non-empty overrides applied (CLI flags win over YAML)."""
        return replace(
            self,
            project_id=project_id or self.project_id,
            location=location or self.location,
        )


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_settings(settings_file: Optional[Path] = None) -> ServerSettings:
    """Load settings from YAML.

    A missing default file yields default settings; a missing file that was
    asked for explicitly is an error.
    """
    explicit = settings_file is not None
    path = Path(settings_file) if explicit else DEFAULT_SETTINGS_PATH
    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Settings file not found: {path}")
        logger.debug("No settings file at %s, using defaults", path)
        return ServerSettings()

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    bigquery_section = data.get("bigquery", {}) or {}
    if not isinstance(bigquery_section, dict):
        raise ValueError(f"'bigquery' section must be a mapping: {path}")

    return ServerSettings(
        project_id=_optional_str(bigquery_section.get("project_id")),
        location=_optional_str(bigquery_section.get("location")),
    )
