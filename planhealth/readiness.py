"""Readiness gating: may advanced workflows run on this project yet?"""

from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

from .models import DocumentEntry, DocumentKind, FillStatus, ReadinessAssessment

# Basis before action before direction before history.
PRIORITY_ORDER: Tuple[DocumentKind, ...] = (
    DocumentKind.OVERVIEW,
    DocumentKind.IDEAS,
    DocumentKind.TASKS,
    DocumentKind.ROADMAP,
    DocumentKind.LOG,
    DocumentKind.ARCHIVE,
)

READY_SUMMARY = "Project has sufficient basis for workflows."


def _status(entries: Mapping[DocumentKind, DocumentEntry], kind: DocumentKind) -> FillStatus:
    entry = entries.get(kind)
    if entry is None or not entry.exists:
        return FillStatus.MISSING
    return entry.status


def _blocker(kind: DocumentKind, status: FillStatus) -> Optional[str]:
    """Return the blocker message for a kind/status pair, if it is a hard blocker."""
    name = kind.filename
    if status is FillStatus.MISSING:
        if kind in (DocumentKind.OVERVIEW, DocumentKind.TASKS, DocumentKind.ROADMAP):
            return f"{name} is missing"
        return None

    if kind is DocumentKind.OVERVIEW:
        if status is FillStatus.TEMPLATE_ONLY:
            return f"{name} has not been filled in"
        if status is FillStatus.THIN:
            return f"{name} needs more content"
    elif kind is DocumentKind.TASKS:
        if status is FillStatus.TEMPLATE_ONLY:
            return f"{name} has no actionable items"
    elif kind is DocumentKind.ROADMAP:
        if status is FillStatus.TEMPLATE_ONLY:
            return f"{name} has no milestones defined"
    return None


def summarize_blockers(missing_basics: List[str]) -> str:
    if not missing_basics:
        return READY_SUMMARY
    if len(missing_basics) == 1:
        return f"Before workflows: {missing_basics[0]}"
    ellipsis = "..." if len(missing_basics) > 2 else ""
    return f"Before workflows, address: {'; '.join(missing_basics[:2])}{ellipsis}"


def assess_readiness(entries: Mapping[DocumentKind, DocumentEntry]) -> ReadinessAssessment:
    """Compute the readiness gate, blocker list and remediation order.

    Hard blockers are checked in the order Overview, Tasks, Roadmap and lead
    the prioritized list; every other non-filled document follows in
    ``PRIORITY_ORDER``.
    """
    missing_basics: List[str] = []
    prioritized: List[DocumentKind] = []

    for kind in (DocumentKind.OVERVIEW, DocumentKind.TASKS, DocumentKind.ROADMAP):
        message = _blocker(kind, _status(entries, kind))
        if message:
            missing_basics.append(message)
            prioritized.append(kind)

    for kind in PRIORITY_ORDER:
        if kind in prioritized:
            continue
        if _status(entries, kind) is not FillStatus.FILLED:
            prioritized.append(kind)

    return ReadinessAssessment(
        is_ready=not missing_basics,
        missing_basics=tuple(missing_basics),
        prioritized_files=tuple(prioritized),
        summary=summarize_blockers(missing_basics),
    )
