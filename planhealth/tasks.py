"""Task counting for the current-work section of Tasks.md.

Only top-level checklist items count: indented sub-items are excluded so a
task split into steps is still one unit of progress.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet

from .models import TaskCounts
from .recognizers import is_checked_task, is_unchecked_task, match_level2_heading

CURRENT_SECTION_ALIASES: FrozenSet[str] = frozenset({"current", "now", "next", "active tasks"})


def is_current_section(heading_text: str) -> bool:
    return heading_text.strip().lower() in CURRENT_SECTION_ALIASES


@dataclass
class TaskScanState:
    in_current: bool = False
    total: int = 0
    completed: int = 0

    def consume(self, line: str) -> None:
        heading = match_level2_heading(line)
        if heading is not None:
            self.in_current = is_current_section(heading)
            return
        if not self.in_current:
            return
        if is_checked_task(line):
            self.total += 1
            self.completed += 1
        elif is_unchecked_task(line):
            self.total += 1

    def result(self) -> TaskCounts:
        return TaskCounts(total=self.total, completed=self.completed)


def count_current_section_tasks(content: str) -> TaskCounts:
    """Count ``- [ ]`` and ``- [x]`` lines under ``## Current`` (or Now/Next/Active Tasks).

    Several current sections in one file accumulate into a single count.
    """
    state = TaskScanState()
    for line in content.splitlines():
        state.consume(line)
    return state.result()
