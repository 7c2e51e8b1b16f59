"""Line recognizers for the markdown grammar of the planning documents.

Every pattern the parsers rely on is kept here behind a named function, so
callers ask "is this a milestone heading?" rather than matching regexes
themselves.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

# "### M1 — Title", "### M1 - Title", "### M1 – Title"
_MILESTONE_HEADING = re.compile(r"^###(?!#)\s*(?P<id>M\d+)\s*[—–-]\s*(?P<title>.+)$")
# "#### VS1 — Name" or "##### VS1 — Name"
_SLICE_HEADING = re.compile(r"^#{4,5}(?!#)\s*(?P<id>VS\d+)\s*[—–-]\s*(?P<name>.+)$")
# "### M1 Slices" grouping inside the Vertical Slices section
_SLICE_GROUP_HEADING = re.compile(r"^###(?!#)\s*(?P<id>M\d+)\s+slices\b", re.IGNORECASE)
_STATUS_LINE = re.compile(
    r"^(?:[-*]\s+)?\*\*Status:\*\*\s*`?(?P<status>planned|active|done|blocked|cut)\b",
    re.IGNORECASE,
)
_CURRENT_FOCUS_HEADING = re.compile(r"^##\s*Current\s*Focus\s*$", re.IGNORECASE)
_FOCUS_MILESTONE = re.compile(r"^(?:[-*]\s+)?\*\*Milestone:\*\*\s*(?P<id>M\d+)\b", re.IGNORECASE)
_LEVEL2_HEADING = re.compile(r"^##\s+(?P<text>.+)$")
_ANY_HEADING = re.compile(r"^#{1,6}\s")
_SECTION_HEADING = re.compile(r"^(?P<level>#{2,3})\s+(?P<text>.+)$")
_TITLE_HEADING = re.compile(r"^#\s+(?P<text>.+)$")
_TRAILING_ANNOTATION = re.compile(r"\s*\([^)]*\)\s*$")
_UNCHECKED_TASK = re.compile(r"^- \[ \]")
_CHECKED_TASK = re.compile(r"^- \[x\]", re.IGNORECASE)


def match_milestone_heading(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(id, title)`` for a level-3 milestone heading."""
    match = _MILESTONE_HEADING.match(line.strip())
    if not match:
        return None
    return match.group("id").upper(), match.group("title").strip()


def is_milestone_heading(line: str) -> bool:
    return match_milestone_heading(line) is not None


def match_slice_heading(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(id, name)`` for a level-4/5 vertical slice heading."""
    match = _SLICE_HEADING.match(line.strip())
    if not match:
        return None
    return match.group("id").upper(), match.group("name").strip()


def match_slice_group_heading(line: str) -> Optional[str]:
    """Return the milestone id of a "### M1 Slices" grouping heading."""
    match = _SLICE_GROUP_HEADING.match(line.strip())
    return match.group("id").upper() if match else None


def match_status_line(line: str) -> Optional[str]:
    """Return the lowercase status from a ``**Status:** <status>`` line."""
    match = _STATUS_LINE.match(line.strip())
    return match.group("status").lower() if match else None


def is_current_focus_heading(line: str) -> bool:
    return bool(_CURRENT_FOCUS_HEADING.match(line.strip()))


def match_focus_milestone(line: str) -> Optional[str]:
    """Return the milestone id from a ``**Milestone:** M1 ...`` line."""
    match = _FOCUS_MILESTONE.match(line.strip())
    return match.group("id").upper() if match else None


def match_level2_heading(line: str) -> Optional[str]:
    """Return the text of a ``## `` heading (not ``###``)."""
    match = _LEVEL2_HEADING.match(line)
    return match.group("text").strip() if match else None


def is_any_heading(line: str) -> bool:
    return bool(_ANY_HEADING.match(line.strip()))


def is_unchecked_task(line: str) -> bool:
    """Unindented ``- [ ]`` only."""
    return bool(_UNCHECKED_TASK.match(line))


def is_checked_task(line: str) -> bool:
    """Unindented ``- [x]`` / ``- [X]`` only."""
    return bool(_CHECKED_TASK.match(line))


def strip_annotation(text: str) -> str:
    """Drop a trailing parenthetical such as "(1–2 sentences)"."""
    return _TRAILING_ANNOTATION.sub("", text).strip()


def normalize_heading(heading: str) -> str:
    """Comparison key for a heading: annotation removed, slashes and case folded."""
    text = strip_annotation(heading)
    text = re.sub(r"\s*/\s*", "/", text)
    text = re.sub(r"\s+", " ", text)
    return text.lower()


def match_section_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return ``(level, text)`` for a level-2 or level-3 heading line."""
    match = _SECTION_HEADING.match(line.rstrip())
    if not match:
        return None
    return len(match.group("level")), match.group("text").strip()


def is_title_heading(line: str) -> bool:
    """A single-hash document title such as "# Overview"."""
    return bool(_TITLE_HEADING.match(line.rstrip()))


def extract_section_headings(body: str) -> List[Tuple[int, str]]:
    """Return ``(level, text)`` for every level-2 and level-3 heading line."""
    headings: List[Tuple[int, str]] = []
    for line in body.splitlines():
        heading = match_section_heading(line)
        if heading:
            headings.append(heading)
    return headings
