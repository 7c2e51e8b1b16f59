"""Plain-text renderings embedded verbatim into generated prompts.

Both formatters are deterministic: the same snapshot or status always
produces byte-identical output.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping

from .models import (
    CANONICAL_KINDS,
    AllComplete,
    MilestoneComplete,
    NoTransition,
    ProjectSnapshot,
    ProjectStatus,
    TasksComplete,
)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def format_frontmatter(frontmatter: Mapping[str, Any]) -> str:
    """Render frontmatter as ``key: value; key: value`` in key insertion order."""
    if not frontmatter:
        return "none"
    return "; ".join(f"{key}: {_format_value(value)}" for key, value in frontmatter.items())


def format_snapshot_summary(snapshot: ProjectSnapshot) -> str:
    """Render a snapshot as the line-oriented report consumed by prompt builders."""
    lines: List[str] = [
        f"PROJECT: {snapshot.name}",
        f"PATH: {snapshot.path}",
        f"CAPTURED: {snapshot.captured_at}",
        f"GITHUB: {', '.join(snapshot.github_repos) if snapshot.github_repos else 'none'}",
        "",
        "CORE FILES:",
    ]

    for kind in CANONICAL_KINDS:
        entry = snapshot.entries.get(kind)
        if entry is None:
            continue
        reasons = f" ({'; '.join(entry.reasons)})" if entry.reasons else ""
        lines.append(f"- {kind.filename}: {entry.status.value}{reasons}")
        if entry.exists:
            lines.append(f"  frontmatter: {format_frontmatter(entry.frontmatter)}")

    if snapshot.missing:
        lines.extend(["", f"MISSING: {', '.join(kind.filename for kind in snapshot.missing)}"])

    if snapshot.weak:
        lines.extend(["", "NEEDS FILLING:"])
        for item in snapshot.weak:
            lines.append(f"- {item.kind.filename}: {item.status.value} ({'; '.join(item.reasons)})")

    lines.extend(["", f"READINESS: {snapshot.readiness.summary}"])
    return "\n".join(lines)


def describe_transition(status: ProjectStatus) -> str:
    state = status.transition_state
    if isinstance(state, NoTransition):
        return "none"
    if isinstance(state, AllComplete):
        return "all milestones complete"
    if isinstance(state, TasksComplete):
        follow = f"; next: {state.next_milestone.id}" if state.next_milestone else "; no planned milestone follows"
        return f"all current tasks done for {state.milestone.id}, milestone not yet marked done{follow}"
    if isinstance(state, MilestoneComplete):
        remaining = f", {state.incomplete_tasks} task(s) still open" if state.has_incomplete_tasks else ""
        follow = f"; next: {state.next_milestone.id}" if state.next_milestone else "; no planned milestone follows"
        return f"{state.milestone.id} marked done{remaining}{follow}"
    raise TypeError(f"Unhandled transition state: {state!r}")


def format_status_summary(status: ProjectStatus) -> str:
    """Render milestone progress as a short report."""
    milestone = status.current_milestone
    lines = [
        f"CURRENT MILESTONE: {f'{milestone.id} — {milestone.title} ({milestone.status.value})' if milestone else 'none'}",
        f"ACTIVE SLICE: {f'{status.active_slice.id} — {status.active_slice.name}' if status.active_slice else 'none'}",
        f"TASKS: {status.tasks_completed}/{status.tasks_total} complete",
        f"TRANSITION: {describe_transition(status)}",
    ]
    if status.all_milestones:
        lines.append("MILESTONES:")
        for item in status.all_milestones:
            lines.append(f"- {item.id} — {item.title} ({item.status.value})")
    return "\n".join(lines)
