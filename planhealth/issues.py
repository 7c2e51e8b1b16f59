"""Remediation issues derived from a snapshot and a transition state.

Issues carry fix labels only; running a fix (creating a file, asking an AI
to fill it, closing a milestone) is left to the consumer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .models import (
    AllComplete,
    DocumentKind,
    FillStatus,
    Milestone,
    MilestoneComplete,
    MilestoneTransitionState,
    MisplacedSection,
    NoTransition,
    ProjectSnapshot,
    TasksComplete,
)


class IssueType(Enum):
    MISSING = "missing"
    TEMPLATE_ONLY = "template_only"
    THIN = "thin"
    HEADINGS_INVALID = "headings_invalid"
    MISPLACED_CONTENT = "misplaced_content"
    TASKS_COMPLETE = "tasks_complete"
    MILESTONE_COMPLETE = "milestone_complete"
    MILESTONE_TASKS_REMAIN = "milestone_tasks_remain"
    ALL_MILESTONES_COMPLETE = "all_milestones_complete"

    @property
    def icon(self) -> str:
        return ISSUE_ICONS[self]


ISSUE_ICONS: Dict[IssueType, str] = {
    IssueType.MISSING: "!",
    IssueType.TEMPLATE_ONLY: "?",
    IssueType.THIN: "~",
    IssueType.HEADINGS_INVALID: "☰",
    IssueType.MISPLACED_CONTENT: "⇄",
    IssueType.TASKS_COMPLETE: "\U0001F3AF",
    IssueType.MILESTONE_COMPLETE: "✓",
    IssueType.MILESTONE_TASKS_REMAIN: "⚠",
    IssueType.ALL_MILESTONES_COMPLETE: "★",
}


@dataclass(frozen=True, slots=True)
class ProjectIssue:
    """A problem or milestone event that deserves the user's attention."""

    file: str
    type: IssueType
    message: str
    fix_label: str
    details: Optional[str] = None
    secondary_fix_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "file": self.file,
            "type": self.type.value,
            "icon": self.type.icon,
            "message": self.message,
            "details": self.details,
            "fix_label": self.fix_label,
            "secondary_fix_label": self.secondary_fix_label,
        }


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def format_missing_headings(headings: Sequence[str]) -> str:
    """List missing headings without their ``##`` markers."""
    return "Missing: " + ", ".join(re.sub(r"^##+ ", "", heading) for heading in headings)


def explain_misplaced(kind: DocumentKind, misplaced: Sequence[MisplacedSection]) -> str:
    """E.g. 'Tasks.md: "## Elevator Pitch" belongs in Overview.md'."""
    reasons = "; ".join(f'"{item.section}" belongs in {item.belongs_in.filename}' for item in misplaced)
    return f"{kind.filename}: {reasons}"


def _milestone_label(milestone: Milestone) -> str:
    return f'{milestone.id} "{milestone.title}"'


def build_issues(snapshot: ProjectSnapshot) -> List[ProjectIssue]:
    """Build the ordered document issue list for a snapshot.

    One issue per prioritized non-filled document, then heading issues for
    Overview.md and Roadmap.md when they exist and are not already flagged
    as missing or template-only. Documents holding sections that belong
    elsewhere get one misplaced-content issue each, in canonical order.
    """
    issues: List[ProjectIssue] = []

    for kind in snapshot.readiness.prioritized_files:
        entry = snapshot.entries[kind]
        name = kind.filename
        if not entry.exists:
            issues.append(ProjectIssue(name, IssueType.MISSING, f"{name} does not exist", "Create File"))
        elif entry.status is FillStatus.TEMPLATE_ONLY:
            issues.append(ProjectIssue(name, IssueType.TEMPLATE_ONLY, f"{name} has not been filled in", "Fill with AI"))
        elif entry.status is FillStatus.THIN:
            issues.append(ProjectIssue(name, IssueType.THIN, f"{name} needs more content", "Expand with AI"))

    for kind in (DocumentKind.OVERVIEW, DocumentKind.ROADMAP):
        entry = snapshot.entries.get(kind)
        if entry is None or not entry.exists or entry.headings is None or entry.headings.is_valid:
            continue
        already_flagged = any(
            issue.file == kind.filename and issue.type in (IssueType.MISSING, IssueType.TEMPLATE_ONLY)
            for issue in issues
        )
        if already_flagged:
            continue
        missing = entry.headings.missing_headings
        issues.append(
            ProjectIssue(
                file=kind.filename,
                type=IssueType.HEADINGS_INVALID,
                message=f"Missing {len(missing)} heading(s)",
                details=format_missing_headings(missing),
                fix_label="Add Missing (AI)",
                secondary_fix_label="Reformat File",
            )
        )

    for kind, entry in snapshot.entries.items():
        if not entry.misplaced:
            continue
        issues.append(
            ProjectIssue(
                file=kind.filename,
                type=IssueType.MISPLACED_CONTENT,
                message=explain_misplaced(kind, entry.misplaced),
                fix_label="Move Content",
            )
        )

    return issues


def build_transition_issues(state: MilestoneTransitionState) -> List[ProjectIssue]:
    """Map a milestone transition state to at most one Roadmap.md issue."""
    roadmap = DocumentKind.ROADMAP.filename

    if isinstance(state, NoTransition):
        return []

    if isinstance(state, AllComplete):
        return [ProjectIssue(roadmap, IssueType.ALL_MILESTONES_COMPLETE, "All milestones complete!", "Celebrate!")]

    if isinstance(state, TasksComplete):
        following = state.next_milestone
        return [
            ProjectIssue(
                file=roadmap,
                type=IssueType.TASKS_COMPLETE,
                message=f"All tasks complete for {_milestone_label(state.milestone)}!",
                details=(
                    f'Ready to close and move to {following.id}: "{following.title}"'
                    if following
                    else "No more planned milestones — consider wrapping up or planning new ones"
                ),
                fix_label="Close Milestone",
                secondary_fix_label="Plan Next Steps",
            )
        ]

    if isinstance(state, MilestoneComplete):
        following = state.next_milestone
        if state.has_incomplete_tasks:
            return [
                ProjectIssue(
                    file=roadmap,
                    type=IssueType.MILESTONE_TASKS_REMAIN,
                    message=(
                        f"{_milestone_label(state.milestone)} marked done, "
                        f"but {_plural(state.incomplete_tasks, 'task')} remain"
                    ),
                    details=f"{_plural(state.incomplete_tasks, 'task')} in Current section",
                    fix_label="Review Tasks",
                    secondary_fix_label="Plan Anyway",
                )
            ]
        return [
            ProjectIssue(
                file=roadmap,
                type=IssueType.MILESTONE_COMPLETE,
                message=f"{_milestone_label(state.milestone)} complete!",
                details=f'Ready to start {following.id}: "{following.title}"' if following else "No more planned milestones",
                fix_label="Plan Next Phase",
            )
        ]

    raise TypeError(f"Unhandled transition state: {state!r}")
