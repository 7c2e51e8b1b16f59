"""Heading validation and repair for the structured templates.

Overview.md and Roadmap.md have a canonical heading outline. This module checks
text against that outline and can rebuild text into it. It also spots sections
written into the wrong document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .frontmatter import frontmatter_block, strip_frontmatter
from .models import DocumentKind, HeadingValidation, MisplacedSection
from .recognizers import (
    extract_section_headings,
    is_title_heading,
    match_milestone_heading,
    match_section_heading,
    match_slice_group_heading,
    normalize_heading,
)

OVERVIEW_EXPECTED_HEADINGS: Tuple[str, ...] = (
    "## Elevator Pitch",
    "## Problem Statement",
    "## Target Users & Use Context",
    "## Value Proposition",
    "## Scope",
    "### In-Scope",
    "### Out-of-Scope (Anti-Goals)",
    '## Success Criteria (Definition of "Done")',
    "## Constraints",
    "## Reference Links",
)

ROADMAP_EXPECTED_HEADINGS: Tuple[str, ...] = (
    "## Current Focus",
    "## Milestone Index",
    "## Milestones",
    "## Vertical Slices",
    "## Cut / Deferred Milestones",
)

EXPECTED_HEADINGS: Dict[DocumentKind, Tuple[str, ...]] = {
    DocumentKind.OVERVIEW: OVERVIEW_EXPECTED_HEADINGS,
    DocumentKind.ROADMAP: ROADMAP_EXPECTED_HEADINGS,
}


def _heading_text(expected: str) -> str:
    return expected.lstrip("#").strip()


def _compare(expected_headings: Tuple[str, ...], found: List[Tuple[int, str]]) -> Tuple[List[str], List[Tuple[int, str]]]:
    """Return (missing canonical headings, found headings not in the canonical list)."""
    expected_keys = {normalize_heading(_heading_text(h)) for h in expected_headings}
    found_keys = {normalize_heading(text) for _, text in found}

    missing = [h for h in expected_headings if normalize_heading(_heading_text(h)) not in found_keys]
    extra = [(level, text) for level, text in found if normalize_heading(text) not in expected_keys]
    return missing, extra


def validate_overview_headings(content: str) -> HeadingValidation:
    """Check Overview.md for every canonical heading.

    Matching ignores case and a trailing parenthetical annotation, so
    "## Elevator Pitch (1–2 sentences)" satisfies "## Elevator Pitch".
    """
    found = extract_section_headings(strip_frontmatter(content))
    missing, extra = _compare(OVERVIEW_EXPECTED_HEADINGS, found)
    return HeadingValidation(
        is_valid=not missing,
        missing_headings=tuple(missing),
        extra_headings=tuple(f"{'#' * level} {text}" for level, text in extra),
    )


def validate_roadmap_headings(content: str) -> HeadingValidation:
    """Check Roadmap.md for every canonical heading.

    Level-3 milestone headings ("### M1 — Title") and their slice groupings
    ("### M1 Slices") are user content and never reported as extra.
    """
    found = extract_section_headings(strip_frontmatter(content))
    has_milestones = any(level == 3 and match_milestone_heading(f"### {text}") for level, text in found)

    missing, extra = _compare(ROADMAP_EXPECTED_HEADINGS, found)
    extra_headings = [
        f"{'#' * level} {text}"
        for level, text in extra
        if not (
            level == 3
            and (match_milestone_heading(f"### {text}") or match_slice_group_heading(f"### {text}"))
        )
    ]
    return HeadingValidation(
        is_valid=not missing,
        missing_headings=tuple(missing),
        extra_headings=tuple(extra_headings),
        has_milestone_subheadings=has_milestones,
    )


def validate_headings(kind: Union[DocumentKind, str], content: str) -> Optional[HeadingValidation]:
    """Validate headings for kinds that have a canonical structure; None otherwise."""
    resolved = DocumentKind.coerce(kind)
    if resolved is DocumentKind.OVERVIEW:
        return validate_overview_headings(content)
    if resolved is DocumentKind.ROADMAP:
        return validate_roadmap_headings(content)
    return None


# ----------------------------------------------------------------------
# Misplaced sections
# ----------------------------------------------------------------------

MISPLACED_SECTIONS: Dict[DocumentKind, Tuple[Tuple[str, DocumentKind], ...]] = {
    DocumentKind.OVERVIEW: (
        ("## Next 1–3 Actions", DocumentKind.TASKS),
        ("## Scratch Ideas", DocumentKind.IDEAS),
    ),
    DocumentKind.TASKS: (
        ("## Elevator Pitch", DocumentKind.OVERVIEW),
        ("## Problem Statement", DocumentKind.OVERVIEW),
    ),
    DocumentKind.ROADMAP: (
        ("## Next 1–3 Actions", DocumentKind.TASKS),
    ),
}


def _section_key(text: str) -> str:
    # "1–3" and "1-3" name the same section.
    return normalize_heading(text).replace("–", "-").replace("—", "-")


def find_misplaced_sections(kind: Union[DocumentKind, str], content: str) -> Tuple[MisplacedSection, ...]:
    """Return the sections of ``content`` that belong in another document.

    Each section is reported once, in table order, using its canonical heading.
    """
    resolved = DocumentKind.coerce(kind)
    rules = MISPLACED_SECTIONS.get(resolved, ())
    if not rules:
        return ()

    found_keys = {_section_key(text) for _, text in extract_section_headings(strip_frontmatter(content))}
    return tuple(
        MisplacedSection(section=heading, belongs_in=target)
        for heading, target in rules
        if _section_key(_heading_text(heading)) in found_keys
    )


# ----------------------------------------------------------------------
# Heading repair
# ----------------------------------------------------------------------

OVERVIEW_SECTION_TEMPLATES: Tuple[Tuple[str, str], ...] = (
    ("## Elevator Pitch (1–2 sentences)", "<What are you building, for whom, and why does it matter?>"),
    (
        "## Problem Statement",
        "- **Current pain:** <What hurts today?>\n"
        "- **Root cause (best guess):** <Why does it hurt?>\n"
        "- **Consequence of doing nothing:** <What happens if you don't solve it?>",
    ),
    (
        "## Target Users & Use Context",
        "- **Primary user(s):** <Who?>\n"
        "- **User context:** <Where/when do they use it?>\n"
        "- **Non-users / excluded users:** <Who is explicitly not the target?>",
    ),
    (
        "## Value Proposition",
        "- **Primary benefit:** <What changes for the user?>\n"
        "- **Differentiator:** <Why this vs alternatives?>",
    ),
    ("## Scope", ""),
    ("### In-Scope", "- <Bullets>"),
    ("### Out-of-Scope (Anti-Goals)", "- <Bullets>"),
    (
        '## Success Criteria (Definition of "Done")',
        "- **Minimum shippable success (MVP):**\n"
        "  - <Observable/testable bullets>\n"
        "- **Nice-to-have success:**\n"
        "  - <Bullets>\n"
        "- **Hard constraints that must remain true:**\n"
        "  - <Bullets>",
    ),
    (
        "## Constraints",
        "- **Time:** <deadlines, cadence>\n"
        "- **Tech:** <stack constraints, hosting constraints>\n"
        '- **Money:** <budget or "as close to $0 as possible">\n'
        "- **Operational:** <privacy, local-first, offline, etc.>",
    ),
    (
        "## Reference Links",
        "- Repo: <...>\n"
        "- Docs: <...>\n"
        "- Key decisions: (see [[Log]]; long-term outcomes in [[Archive]])",
    ),
)

DEFAULT_MILESTONE_CONTENT = """### M1 — <Milestone Title>
**Status:** planned  <!-- planned | active | done | blocked | cut -->
**Why it matters:** <One sentence value>
**Outcome:** <What exists when done?>

**Definition of Done (observable)**
- <Demo-able bullet>
- <Testable bullet>
- <User can… bullet>

**Dependencies**
- <External constraint / other milestone>

**Links**
- Tasks: [[Tasks]]
- Key log entries: [[Log]]"""

DEFAULT_VERTICAL_SLICES_CONTENT = """Vertical slices are the features needed to reach each milestone.
Each slice is a demo-able, end-to-end deliverable.

### M1 Slices

#### VS1 — <Slice Name>
<1-2 sentence description of what it delivers>

#### VS2 — <Slice Name>
<1-2 sentence description>

### M2 Slices

#### VS3 — <Slice Name>
<1-2 sentence description>"""

ROADMAP_SECTION_TEMPLATES: Tuple[Tuple[str, str], ...] = (
    (
        "## Current Focus",
        "- **Milestone:** M1 — <Milestone title>\n"
        '- **Intent:** <One sentence. "We\'re trying to…">',
    ),
    (
        "## Milestone Index (fast scan)",
        "- M1 — <Milestone title> (Status: planned)\n"
        "- M2 — <Milestone title> (Status: planned)",
    ),
    ("## Milestones", DEFAULT_MILESTONE_CONTENT),
    ("## Vertical Slices", DEFAULT_VERTICAL_SLICES_CONTENT),
    (
        "## Cut / Deferred Milestones (kept intentionally small)",
        "- <If this grows, move detail to Archive.md with rationale.>",
    ),
)


@dataclass
class _Section:
    heading: str
    key: str
    lines: List[str] = field(default_factory=list)

    def render(self) -> str:
        text = "\n".join(self.lines).strip()
        return f"{self.heading}\n{text}" if text else self.heading


def _split_sections(body: str, max_level: int) -> Tuple[Optional[str], str, List[_Section]]:
    """Split a body into (title line, text before the first section, sections).

    Headings deeper than ``max_level`` stay inside the section that holds them.
    """
    title: Optional[str] = None
    preamble: List[str] = []
    sections: List[_Section] = []
    for line in body.splitlines():
        heading = match_section_heading(line)
        if heading and heading[0] <= max_level:
            sections.append(_Section(heading=line.rstrip(), key=normalize_heading(heading[1])))
        elif sections:
            sections[-1].lines.append(line)
        elif title is None and is_title_heading(line):
            title = line.rstrip()
        else:
            preamble.append(line)
    return title, "\n".join(preamble).strip(), sections


def _fix_headings(
    content: str,
    title: str,
    templates: Tuple[Tuple[str, str], ...],
    max_level: int,
) -> str:
    frontmatter = frontmatter_block(content)
    if frontmatter and not frontmatter.endswith("\n"):
        frontmatter += "\n"
    existing_title, preamble, sections = _split_sections(content[len(frontmatter):], max_level)

    first_by_key: Dict[str, _Section] = {}
    for section in sections:
        first_by_key.setdefault(section.key, section)

    blocks = [existing_title or title]
    if preamble:
        blocks.append(preamble)

    used = set()
    for heading, placeholder in templates:
        key = normalize_heading(_heading_text(heading))
        section = first_by_key.get(key)
        if section is not None:
            blocks.append(section.render())
            used.add(id(section))
        else:
            blocks.append(f"{heading}\n{placeholder}" if placeholder else heading)

    # Sections outside the outline keep their text, after the canonical ones.
    blocks.extend(section.render() for section in sections if id(section) not in used)
    return frontmatter + "\n\n".join(blocks) + "\n"


def fix_overview_headings(content: str, project_name: str) -> str:
    """Rebuild Overview.md text into the canonical outline.

    Frontmatter and the existing title are kept. Each canonical section keeps
    its current text when present and gets the template placeholder otherwise.
    """
    return _fix_headings(content, f"# Overview — {project_name}", OVERVIEW_SECTION_TEMPLATES, max_level=3)


def fix_roadmap_headings(content: str, project_name: str) -> str:
    """Rebuild Roadmap.md text into the canonical outline.

    Only level-2 headings split sections, so milestones and slice groupings
    move together with the section that holds them.
    """
    return _fix_headings(content, f"# Roadmap — {project_name}", ROADMAP_SECTION_TEMPLATES, max_level=2)


def fix_headings(kind: Union[DocumentKind, str], content: str, project_name: str) -> Optional[str]:
    """Repair headings for kinds that have a canonical structure; None otherwise."""
    resolved = DocumentKind.coerce(kind)
    if resolved is DocumentKind.OVERVIEW:
        return fix_overview_headings(content, project_name)
    if resolved is DocumentKind.ROADMAP:
        return fix_roadmap_headings(content, project_name)
    return None
