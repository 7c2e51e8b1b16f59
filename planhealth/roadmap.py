"""Roadmap.md parser for extracting milestones and vertical slices.

Expected format:

- Milestones: ``### M1 — Title`` (em dash, en dash or hyphen)
- Status lines within the next five lines: ``**Status:** active``
- Slices: ``#### VS1 — Name`` or ``##### VS1 — Name``, owned by the nearest
  preceding milestone (or ``### M1 Slices`` grouping)
- Current Focus: a ``## Current Focus`` section with a ``**Milestone:** M1`` line
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .frontmatter import strip_frontmatter
from .models import Milestone, MilestoneStatus, RoadmapParseResult, Slice
from .recognizers import (
    is_any_heading,
    is_current_focus_heading,
    match_focus_milestone,
    match_level2_heading,
    match_milestone_heading,
    match_slice_group_heading,
    match_slice_heading,
    match_status_line,
)

logger = logging.getLogger("planhealth.roadmap")

STATUS_LOOKAHEAD_LINES = 5


def find_status(lines: Sequence[str], heading_index: int) -> MilestoneStatus:
    """Look for a status line just below a milestone heading, stopping at any heading."""
    end = min(heading_index + 1 + STATUS_LOOKAHEAD_LINES, len(lines))
    for line in lines[heading_index + 1:end]:
        if is_any_heading(line):
            break
        status = match_status_line(line)
        if status:
            return MilestoneStatus.parse(status)
    return MilestoneStatus.PLANNED


@dataclass
class RoadmapScanState:
    """Mutable state threaded through one top-to-bottom scan of Roadmap.md."""

    milestone_id: Optional[str] = None
    in_current_focus: bool = False
    focus_milestone_id: Optional[str] = None
    milestones: Dict[str, Milestone] = field(default_factory=dict)
    slices: List[Slice] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)

    def consume(self, lines: Sequence[str], index: int) -> None:
        """Advance the scan by the line at ``index``."""
        line = lines[index].strip()

        if is_current_focus_heading(line):
            self.in_current_focus = True
            return

        if self.in_current_focus:
            if match_level2_heading(line) is not None:
                self.in_current_focus = False
            else:
                focus = match_focus_milestone(line)
                if focus:
                    self.focus_milestone_id = focus

        milestone = match_milestone_heading(line)
        if milestone:
            milestone_id, title = milestone
            self.add_milestone(Milestone(milestone_id, title, find_status(lines, index)))
            self.milestone_id = milestone_id
            return

        group = match_slice_group_heading(line)
        if group:
            self.milestone_id = group
            return

        slice_heading = match_slice_heading(line)
        if slice_heading and self.milestone_id:
            slice_id, name = slice_heading
            self.slices.append(Slice(slice_id, name, self.milestone_id))

    def add_milestone(self, milestone: Milestone) -> None:
        # Last occurrence wins; the first occurrence keeps its position.
        if milestone.id in self.milestones and milestone.id not in self.duplicates:
            self.duplicates.append(milestone.id)
        self.milestones[milestone.id] = milestone

    def result(self) -> RoadmapParseResult:
        if self.duplicates:
            logger.warning(f"Roadmap defines duplicate milestone ids: {', '.join(self.duplicates)}")
        return RoadmapParseResult(
            milestones=tuple(self.milestones.values()),
            slices=tuple(self.slices),
            current_focus_milestone_id=self.focus_milestone_id,
            duplicate_milestone_ids=tuple(self.duplicates),
        )


def parse_roadmap(content: str) -> RoadmapParseResult:
    """Parse Roadmap.md content (frontmatter allowed) into milestones and slices."""
    lines = strip_frontmatter(content).splitlines()
    state = RoadmapScanState()
    for index in range(len(lines)):
        state.consume(lines, index)
    return state.result()


def find_current_milestone(
    milestones: Sequence[Milestone],
    current_focus_milestone_id: Optional[str],
) -> Optional[Milestone]:
    """Pick the milestone being worked on.

    Priority:
    1. Milestone referenced in the Current Focus section
    2. First milestone with status ``active``
    3. None
    """
    if current_focus_milestone_id:
        for milestone in milestones:
            if milestone.id == current_focus_milestone_id:
                return milestone

    for milestone in milestones:
        if milestone.status is MilestoneStatus.ACTIVE:
            return milestone
    return None


def find_active_slice(slices: Sequence[Slice], current_milestone: Optional[Milestone]) -> Optional[Slice]:
    """Return the first slice belonging to the current milestone."""
    if current_milestone is None:
        return None
    for item in slices:
        if item.milestone_id == current_milestone.id:
            return item
    return None
