"""Milestone transition evaluation and project status computation.

The transition state is a pure function of the current milestone, the full
milestone list and the task counts. It is evaluated fresh on every refresh
and never stored.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .models import (
    AllComplete,
    Milestone,
    MilestoneComplete,
    MilestoneStatus,
    MilestoneTransitionState,
    NoTransition,
    ProjectStatus,
    TasksComplete,
    utc_timestamp,
)
from .planhealth_logging import log_status_computed
from .roadmap import find_active_slice, find_current_milestone, parse_roadmap
from .tasks import count_current_section_tasks

logger = logging.getLogger("planhealth.transitions")


def find_next_planned_milestone(milestones: Sequence[Milestone], current: Milestone) -> Optional[Milestone]:
    """Return the first ``planned`` milestone listed after ``current``."""
    ids = [milestone.id for milestone in milestones]
    start = ids.index(current.id) + 1 if current.id in ids else 0
    for milestone in milestones[start:]:
        if milestone.status is MilestoneStatus.PLANNED and milestone.id != current.id:
            return milestone
    return None


def evaluate_transition(
    current_milestone: Optional[Milestone],
    all_milestones: Sequence[Milestone],
    tasks_completed: int,
    tasks_total: int,
) -> MilestoneTransitionState:
    """Classify where the project stands relative to its current milestone.

    - no current milestone and no milestones at all: ``none``
    - no current milestone and every milestone done: ``all_complete``
    - current milestone done: ``milestone_complete``
    - current milestone open with every current task checked: ``tasks_complete``
    - anything else: ``none``
    """
    if current_milestone is None:
        if all_milestones and all(m.status is MilestoneStatus.DONE for m in all_milestones):
            return AllComplete()
        return NoTransition()

    next_milestone = find_next_planned_milestone(all_milestones, current_milestone)

    if current_milestone.status is MilestoneStatus.DONE:
        return MilestoneComplete(
            milestone=current_milestone,
            incomplete_tasks=max(tasks_total - tasks_completed, 0),
            next_milestone=next_milestone,
        )

    if tasks_total > 0 and tasks_completed == tasks_total:
        return TasksComplete(milestone=current_milestone, next_milestone=next_milestone)

    return NoTransition()


def compute_project_status(
    roadmap_content: str,
    tasks_content: str,
    *,
    project: Optional[str] = None,
    computed_at: Optional[str] = None,
) -> ProjectStatus:
    """Parse Roadmap.md and Tasks.md into a fresh ``ProjectStatus``.

    Either document may be empty (for instance because the file is missing),
    in which case it contributes no milestones or no tasks.
    """
    roadmap = parse_roadmap(roadmap_content or "")
    counts = count_current_section_tasks(tasks_content or "")

    current = find_current_milestone(roadmap.milestones, roadmap.current_focus_milestone_id)
    state = evaluate_transition(current, roadmap.milestones, counts.completed, counts.total)

    status = ProjectStatus(
        current_milestone=current,
        active_slice=find_active_slice(roadmap.slices, current),
        tasks_completed=counts.completed,
        tasks_total=counts.total,
        all_milestones=roadmap.milestones,
        all_slices=roadmap.slices,
        computed_at=computed_at or utc_timestamp(),
        transition_state=state,
    )

    logger.debug(
        f"Status computed: milestone={current.id if current else None}, "
        f"tasks={counts.completed}/{counts.total}, transition={state.kind.value}"
    )
    log_status_computed(project, state.kind.value, counts.completed, counts.total)
    return status
