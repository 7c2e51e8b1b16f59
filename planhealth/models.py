"""Data models for planning-document health tracking.

This module contains the core data structures used throughout planhealth,
representing the six canonical project documents, their fill status, the
project snapshot, readiness gating, and the milestone/slice entities parsed
from Roadmap.md together with the derived milestone transition state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


class DocumentKind(Enum):
    """The closed set of canonical planning documents, in canonical order."""

    OVERVIEW = "Overview"
    ROADMAP = "Roadmap"
    TASKS = "Tasks"
    LOG = "Log"
    IDEAS = "Ideas"
    ARCHIVE = "Archive"

    @property
    def filename(self) -> str:
        return f"{self.value}.md"

    @classmethod
    def coerce(cls, value: Union["DocumentKind", str]) -> Optional["DocumentKind"]:
        """Resolve a kind from an enum member, a name or a filename.

        Accepts ``DocumentKind.TASKS``, ``"Tasks"``, ``"tasks"`` and
        ``"Tasks.md"``. Returns None for anything outside the closed set.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        cleaned = value.strip()
        if cleaned.lower().endswith(".md"):
            cleaned = cleaned[:-3]
        for kind in cls:
            if kind.value.lower() == cleaned.lower():
                return kind
        return None


CANONICAL_KINDS: Tuple[DocumentKind, ...] = tuple(DocumentKind)


class FillStatus(Enum):
    """Completeness verdict for a single document."""

    MISSING = "missing"
    TEMPLATE_ONLY = "template_only"
    THIN = "thin"
    FILLED = "filled"

    @property
    def is_weak(self) -> bool:
        """True for the two sibling states that exist but need filling."""
        return self in (FillStatus.TEMPLATE_ONLY, FillStatus.THIN)


class MilestoneStatus(Enum):
    """Lifecycle status of a roadmap milestone."""

    PLANNED = "planned"
    ACTIVE = "active"
    DONE = "done"
    BLOCKED = "blocked"
    CUT = "cut"

    @classmethod
    def parse(cls, raw: str) -> "MilestoneStatus":
        """Normalize a raw status string, defaulting to planned."""
        lowered = raw.strip().lower()
        for status in cls:
            if status.value == lowered:
                return status
        return cls.PLANNED


# ----------------------------------------------------------------------
# Classification
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClassificationThresholds:
    """Per-kind rules for the template classifier."""

    min_meaningful: int
    placeholders: Tuple[str, ...] = ()
    treat_empty_as_template: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "min_meaningful": self.min_meaningful,
            "placeholders": list(self.placeholders),
            "treat_empty_as_template": self.treat_empty_as_template,
        }


@dataclass(frozen=True, slots=True)
class Classification:
    """Result of classifying one document body."""

    status: FillStatus
    reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"status": self.status.value, "reasons": list(self.reasons)}


@dataclass(frozen=True, slots=True)
class HeadingValidation:
    """Structural check of a document's level-2/level-3 headings.

    ``has_milestone_subheadings`` is only meaningful for Roadmap.md and is
    None for every other kind.
    """

    is_valid: bool
    missing_headings: Tuple[str, ...] = ()
    extra_headings: Tuple[str, ...] = ()
    has_milestone_subheadings: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {
            "is_valid": self.is_valid,
            "missing_headings": list(self.missing_headings),
            "extra_headings": list(self.extra_headings),
        }
        if self.has_milestone_subheadings is not None:
            data["has_milestone_subheadings"] = self.has_milestone_subheadings
        return data


# ----------------------------------------------------------------------
# Snapshot
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DocumentRead:
    """What a document reader returns for a file that exists."""

    text: str
    size_bytes: Optional[int] = None
    modified_at: Optional[str] = None


def _read_only(mapping: Mapping) -> Mapping:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True, slots=True)
class MisplacedSection:
    """A section found in one document that belongs in another."""

    section: str
    belongs_in: DocumentKind

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"section": self.section, "belongs_in": self.belongs_in.filename}


@dataclass(frozen=True, slots=True)
class DocumentEntry:
    """Health record for one canonical document inside a snapshot.

    ``frontmatter`` is stored as a read-only mapping.
    """

    kind: DocumentKind
    exists: bool
    status: FillStatus
    reasons: Tuple[str, ...] = ()
    frontmatter: Mapping[str, Any] = field(default_factory=dict)
    size_bytes: Optional[int] = None
    modified_at: Optional[str] = None
    headings: Optional[HeadingValidation] = None
    misplaced: Tuple[MisplacedSection, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "frontmatter", _read_only(self.frontmatter))

    @classmethod
    def missing(cls, kind: DocumentKind) -> "DocumentEntry":
        """Build the entry for a document that could not be read."""
        return cls(kind=kind, exists=False, status=FillStatus.MISSING, reasons=("File missing",))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "kind": self.kind.value,
            "file": self.kind.filename,
            "exists": self.exists,
            "status": self.status.value,
            "reasons": list(self.reasons),
            "frontmatter": dict(self.frontmatter),
            "size_bytes": self.size_bytes,
            "modified_at": self.modified_at,
            "headings": self.headings.to_dict() if self.headings else None,
            "misplaced": [item.to_dict() for item in self.misplaced],
        }


@dataclass(frozen=True, slots=True)
class WeakDocument:
    """A document that exists but is template-only or thin."""

    kind: DocumentKind
    status: FillStatus
    reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "kind": self.kind.value,
            "file": self.kind.filename,
            "status": self.status.value,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True, slots=True)
class ReadinessAssessment:
    """Whether a project has enough basis for advanced workflows."""

    is_ready: bool
    missing_basics: Tuple[str, ...]
    prioritized_files: Tuple[DocumentKind, ...]
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "is_ready": self.is_ready,
            "missing_basics": list(self.missing_basics),
            "prioritized_files": [kind.filename for kind in self.prioritized_files],
            "summary": self.summary,
        }


@dataclass(frozen=True, slots=True)
class ProjectSnapshot:
    """Deterministic view of a project's canonical documents.

    Snapshots are never patched: a refresh builds a new one. ``entries`` is
    stored as a read-only mapping.
    """

    name: str
    path: str
    captured_at: str
    entries: Mapping[DocumentKind, DocumentEntry]
    missing: Tuple[DocumentKind, ...]
    weak: Tuple[WeakDocument, ...]
    readiness: ReadinessAssessment
    github_repos: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "entries", _read_only(self.entries))

    def entry(self, kind: DocumentKind) -> DocumentEntry:
        return self.entries[kind]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "path": self.path,
            "captured_at": self.captured_at,
            "expected_files": [kind.filename for kind in CANONICAL_KINDS],
            "entries": {kind.filename: self.entries[kind].to_dict() for kind in CANONICAL_KINDS if kind in self.entries},
            "missing": [kind.filename for kind in self.missing],
            "weak": [item.to_dict() for item in self.weak],
            "readiness": self.readiness.to_dict(),
            "github_repos": list(self.github_repos),
        }


# ----------------------------------------------------------------------
# Roadmap and tasks
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Milestone:
    """A roadmap milestone; identity is the id string."""

    id: str
    title: str
    status: MilestoneStatus = MilestoneStatus.PLANNED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"id": self.id, "title": self.title, "status": self.status.value}


@dataclass(frozen=True, slots=True)
class Slice:
    """A vertical slice owned by a milestone (by id reference)."""

    id: str
    name: str
    milestone_id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"id": self.id, "name": self.name, "milestone_id": self.milestone_id}


@dataclass(frozen=True, slots=True)
class RoadmapParseResult:
    """Entities extracted from Roadmap.md."""

    milestones: Tuple[Milestone, ...] = ()
    slices: Tuple[Slice, ...] = ()
    current_focus_milestone_id: Optional[str] = None
    duplicate_milestone_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "milestones": [m.to_dict() for m in self.milestones],
            "slices": [s.to_dict() for s in self.slices],
            "current_focus_milestone_id": self.current_focus_milestone_id,
            "duplicate_milestone_ids": list(self.duplicate_milestone_ids),
        }


@dataclass(frozen=True, slots=True)
class TaskCounts:
    """Top-level checklist items in the current section of Tasks.md."""

    total: int = 0
    completed: int = 0

    @property
    def remaining(self) -> int:
        return self.total - self.completed

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary representation."""
        return {"total": self.total, "completed": self.completed, "remaining": self.remaining}


# ----------------------------------------------------------------------
# Milestone transition state (closed sum type)
# ----------------------------------------------------------------------


class TransitionKind(Enum):
    NONE = "none"
    TASKS_COMPLETE = "tasks_complete"
    MILESTONE_COMPLETE = "milestone_complete"
    ALL_COMPLETE = "all_complete"


@dataclass(frozen=True, slots=True)
class NoTransition:
    """Still actively working; nothing to surface."""

    @property
    def kind(self) -> TransitionKind:
        return TransitionKind.NONE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"status": self.kind.value}


@dataclass(frozen=True, slots=True)
class TasksComplete:
    """Every current task is done but the milestone is not marked done."""

    milestone: Milestone
    next_milestone: Optional[Milestone] = None

    @property
    def kind(self) -> TransitionKind:
        return TransitionKind.TASKS_COMPLETE

    @property
    def has_next_milestone(self) -> bool:
        return self.next_milestone is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "status": self.kind.value,
            "milestone": self.milestone.to_dict(),
            "has_next_milestone": self.has_next_milestone,
            "next_milestone": self.next_milestone.to_dict() if self.next_milestone else None,
        }


@dataclass(frozen=True, slots=True)
class MilestoneComplete:
    """The current milestone is marked done."""

    milestone: Milestone
    incomplete_tasks: int = 0
    next_milestone: Optional[Milestone] = None

    @property
    def kind(self) -> TransitionKind:
        return TransitionKind.MILESTONE_COMPLETE

    @property
    def has_incomplete_tasks(self) -> bool:
        return self.incomplete_tasks > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "status": self.kind.value,
            "milestone": self.milestone.to_dict(),
            "has_incomplete_tasks": self.has_incomplete_tasks,
            "incomplete_tasks": self.incomplete_tasks,
            "next_milestone": self.next_milestone.to_dict() if self.next_milestone else None,
        }


@dataclass(frozen=True, slots=True)
class AllComplete:
    """No current milestone and every milestone is done."""

    @property
    def kind(self) -> TransitionKind:
        return TransitionKind.ALL_COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"status": self.kind.value}


MilestoneTransitionState = Union[NoTransition, TasksComplete, MilestoneComplete, AllComplete]


@dataclass(frozen=True, slots=True)
class ProjectStatus:
    """Milestone progress derived from Roadmap.md and Tasks.md."""

    current_milestone: Optional[Milestone]
    active_slice: Optional[Slice]
    tasks_completed: int
    tasks_total: int
    all_milestones: Tuple[Milestone, ...]
    all_slices: Tuple[Slice, ...]
    computed_at: str
    transition_state: MilestoneTransitionState = field(default_factory=NoTransition)

    @property
    def milestone_status(self) -> Optional[MilestoneStatus]:
        return self.current_milestone.status if self.current_milestone else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "current_milestone": self.current_milestone.to_dict() if self.current_milestone else None,
            "active_slice": self.active_slice.to_dict() if self.active_slice else None,
            "tasks_completed": self.tasks_completed,
            "tasks_total": self.tasks_total,
            "milestone_status": self.milestone_status.value if self.milestone_status else None,
            "all_milestones": [m.to_dict() for m in self.all_milestones],
            "all_slices": [s.to_dict() for s in self.all_slices],
            "computed_at": self.computed_at,
            "transition_state": self.transition_state.to_dict(),
        }

