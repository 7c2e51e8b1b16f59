"""Environment-driven configuration for the planhealth server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .models import CANONICAL_KINDS
from .rules import ClassificationRules, ConfigurationError, load_rules

PROJECT_ROOT_ENV = "PLANHEALTH_PROJECT_ROOT"
LOG_LEVEL_ENV = "PLANHEALTH_LOG_LEVEL"
LOG_FILE_ENV = "PLANHEALTH_LOG_FILE"
RULES_FILE_ENV = "PLANHEALTH_RULES_FILE"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RootResolutionError(ValueError):
    """Raised when no project folder can be found for a call."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-wide settings read once at startup."""

    project_root: Optional[Path] = None
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    rules_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        def _path(name: str) -> Optional[Path]:
            value = os.getenv(name)
            return Path(value).expanduser() if value and value.strip() else None

        log_level = (os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigurationError(
                f"{LOG_LEVEL_ENV} must be one of {', '.join(_LOG_LEVELS)}, got '{log_level}'"
            )

        return cls(
            project_root=_path(PROJECT_ROOT_ENV),
            log_level=log_level,
            log_file=_path(LOG_FILE_ENV),
            rules_file=_path(RULES_FILE_ENV),
        )

    def load_rules(self) -> ClassificationRules:
        return load_rules(self.rules_file)


def _candidate_bases() -> List[Path]:
    cwd = Path.cwd().resolve()
    return [cwd, *cwd.parents]


def _locate_project_root() -> Optional[Path]:
    """Find the nearest directory (cwd upwards) holding any canonical document."""
    for base in _candidate_bases():
        if any((base / kind.filename).is_file() for kind in CANONICAL_KINDS):
            return base
    return None


def resolve_root(root: Optional[str], settings: Optional[Settings] = None) -> Path:
    """Resolve the project folder for a call.

    Order: explicit ``root``, then ``PLANHEALTH_PROJECT_ROOT``, then the
    nearest directory from the working directory upwards that contains a
    canonical document.
    """
    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise RootResolutionError(f"Provided root '{root}' does not exist.")
        return resolved

    settings = settings or Settings.from_env()
    if settings.project_root:
        env_path = settings.project_root.resolve()
        if not env_path.exists():
            raise RootResolutionError(
                f"Environment variable {PROJECT_ROOT_ENV} points to '{settings.project_root}', which does not exist."
            )
        return env_path

    detected_root = _locate_project_root()
    if detected_root:
        return detected_root

    raise RootResolutionError(
        "Unable to determine project root automatically. Provide the 'root' argument when calling the tool "
        f"or set the {PROJECT_ROOT_ENV} environment variable."
    )
