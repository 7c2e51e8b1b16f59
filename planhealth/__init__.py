"""planhealth - planning-document health and milestone state package."""

from .config import Settings
from .models import DocumentKind, FillStatus, ProjectSnapshot, ProjectStatus
from .workflow import HealthManager

__all__ = [
    "HealthManager",
    "DocumentKind",
    "FillStatus",
    "ProjectSnapshot",
    "ProjectStatus",
    "Settings",
]
