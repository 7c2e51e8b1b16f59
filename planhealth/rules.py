"""Classification rules for the canonical planning documents.

All classifier constants live here as data: one ``ClassificationThresholds``
record per document kind plus the two placeholder-count boundaries. The
default table is built once at import time and exposed read-only; a YAML file
can override it (see ``load_rules``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from .models import ClassificationThresholds, DocumentKind

logger = logging.getLogger("planhealth.rules")


class ConfigurationError(ValueError):
    """Raised when a rules override file is invalid."""


OVERVIEW_PLACEHOLDERS = (
    "<What are you building, for whom, and why does it matter?>",
    "<What hurts today?>",
    "<Why does it hurt?>",
    "<What happens if you don't solve it?>",
    "<Who?>",
    "<Where/when do they use it?>",
    "<Who is explicitly not the target?>",
    "<What changes for the user?>",
    "<Why this vs alternatives?>",
    "<Observable/testable bullets>",
    "<deadlines, cadence>",
    "<stack constraints, hosting constraints>",
    '<budget or "as close to $0 as possible">',
    "<privacy, local-first, offline, etc.>",
    "<Assumption>",
    "<Reason>",
    "<Test>",
    "<Name>",
    "<Risk>",
    "<Plan>",
    "<Signal>",
    "<Short Codename>",
)

ROADMAP_PLACEHOLDERS = (
    "<Milestone title>",
    "<Milestone Title>",
    "<Slice Name>",
    "<1-2 sentence description of what it delivers>",
    "<1-2 sentence description>",
    "<One sentence. \"We're trying to…\">",
    "<One sentence value>",
    "<What exists when done?>",
    "<Demo-able bullet>",
    "<Testable bullet>",
    "<User can… bullet>",
    "<External constraint / other milestone>",
    "<If this grows, move detail to Archive.md with rationale.>",
)

# More than this many bracketed placeholders forces template_only.
TEMPLATE_ONLY_PLACEHOLDER_LIMIT = 5
# At least this many (up to the limit) forces thin once past the length bar.
THIN_PLACEHOLDER_MINIMUM = 2


@dataclass(frozen=True, slots=True)
class ClassificationRules:
    """Immutable rule table consulted by the classifier."""

    thresholds: Mapping[DocumentKind, ClassificationThresholds]
    template_only_placeholder_limit: int = TEMPLATE_ONLY_PLACEHOLDER_LIMIT
    thin_placeholder_minimum: int = THIN_PLACEHOLDER_MINIMUM

    def for_kind(self, kind: DocumentKind) -> Optional[ClassificationThresholds]:
        return self.thresholds.get(kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "thresholds": {kind.value: rule.to_dict() for kind, rule in self.thresholds.items()},
            "template_only_placeholder_limit": self.template_only_placeholder_limit,
            "thin_placeholder_minimum": self.thin_placeholder_minimum,
        }


_DEFAULT_THRESHOLDS: Dict[DocumentKind, ClassificationThresholds] = {
    DocumentKind.OVERVIEW: ClassificationThresholds(min_meaningful=200, placeholders=OVERVIEW_PLACEHOLDERS),
    DocumentKind.ROADMAP: ClassificationThresholds(min_meaningful=150, placeholders=ROADMAP_PLACEHOLDERS),
    DocumentKind.TASKS: ClassificationThresholds(min_meaningful=50),
    DocumentKind.LOG: ClassificationThresholds(min_meaningful=20),
    DocumentKind.IDEAS: ClassificationThresholds(min_meaningful=20),
    DocumentKind.ARCHIVE: ClassificationThresholds(min_meaningful=50),
}

DEFAULT_RULES = ClassificationRules(thresholds=MappingProxyType(dict(_DEFAULT_THRESHOLDS)))


def _coerce_threshold(kind: DocumentKind, raw: Any, base: ClassificationThresholds) -> ClassificationThresholds:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Rules for '{kind.value}' must be a mapping, got {type(raw).__name__}")

    unknown = set(raw) - {"min_meaningful", "placeholders", "treat_empty_as_template"}
    if unknown:
        raise ConfigurationError(f"Unknown keys for '{kind.value}': {', '.join(sorted(unknown))}")

    min_meaningful = raw.get("min_meaningful", base.min_meaningful)
    if not isinstance(min_meaningful, int) or isinstance(min_meaningful, bool) or min_meaningful < 0:
        raise ConfigurationError(f"min_meaningful for '{kind.value}' must be a non-negative integer")

    placeholders = raw.get("placeholders", list(base.placeholders))
    if not isinstance(placeholders, list) or not all(isinstance(p, str) and p for p in placeholders):
        raise ConfigurationError(f"placeholders for '{kind.value}' must be a list of non-empty strings")

    treat_empty = raw.get("treat_empty_as_template", base.treat_empty_as_template)
    if not isinstance(treat_empty, bool):
        raise ConfigurationError(f"treat_empty_as_template for '{kind.value}' must be a boolean")

    return ClassificationThresholds(
        min_meaningful=min_meaningful,
        placeholders=tuple(placeholders),
        treat_empty_as_template=treat_empty,
    )


def rules_from_mapping(data: Mapping[str, Any], base: ClassificationRules = DEFAULT_RULES) -> ClassificationRules:
    """Overlay a plain mapping (as read from YAML) on top of ``base``.

    Expected shape::

        template_only_placeholder_limit: 5
        thin_placeholder_minimum: 2
        thresholds:
          Overview: {min_meaningful: 250}
          Log: {treat_empty_as_template: false}
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("Rules file must contain a mapping at the top level")

    raw_thresholds = data.get("thresholds") or {}
    if not isinstance(raw_thresholds, Mapping):
        raise ConfigurationError("thresholds must be a mapping of document kind to rules")

    thresholds = dict(base.thresholds)
    for name, raw in raw_thresholds.items():
        kind = DocumentKind.coerce(name)
        if kind is None:
            raise ConfigurationError(f"Unknown document kind in rules file: '{name}'")
        thresholds[kind] = _coerce_threshold(kind, raw, thresholds[kind])

    limits = {}
    for key in ("template_only_placeholder_limit", "thin_placeholder_minimum"):
        value = data.get(key, getattr(base, key))
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigurationError(f"{key} must be a non-negative integer")
        limits[key] = value

    if limits["thin_placeholder_minimum"] > limits["template_only_placeholder_limit"]:
        raise ConfigurationError("thin_placeholder_minimum cannot exceed template_only_placeholder_limit")

    return ClassificationRules(thresholds=MappingProxyType(thresholds), **limits)


def load_rules(path: Optional[Path | str] = None) -> ClassificationRules:
    """Load classification rules, overlaying an optional YAML file on the defaults."""
    if path is None:
        return DEFAULT_RULES

    rules_path = Path(path).expanduser()
    try:
        data = yaml.safe_load(rules_path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ConfigurationError(f"Could not read rules file '{rules_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Rules file '{rules_path}' is not valid YAML: {e}") from e

    rules = rules_from_mapping(data)
    logger.info(f"Loaded classification rules from {rules_path}")
    return rules
