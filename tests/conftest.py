"""Shared pytest fixtures for the planhealth test suite.

Provides:
- filled_documents: text for all six canonical documents, each filled in
- write_project: factory writing a mapping of documents into a project folder
- reset_observability: clears global hooks and metrics between tests
"""

from pathlib import Path
from typing import Dict

import pytest

from planhealth.models import DocumentKind
from planhealth.planhealth_logging import observability_hooks, performance_monitor


OVERVIEW_FILLED = """---
schema_version: 2
status: active
github: acme/field-notes, acme/field-notes-docs
---

# Overview

## Elevator Pitch
Field Notes is an offline-first notebook that helps volunteer botanists record plant sightings during survey walks.

## Problem Statement
Survey volunteers lose sightings because paper forms get wet and phone apps need signal in remote valleys.

## Target Users & Use Context
Volunteer botanists on weekend survey walks, often with gloves on and no connectivity.

## Value Proposition
Capture a sighting in under ten seconds and sync it later without retyping anything.

## Scope

### In-Scope
- Quick capture of species, location and photo
- Deferred sync to the county records database

### Out-of-Scope (Anti-Goals)
- Species identification from photos

## Success Criteria (Definition of "Done")
- A volunteer can record twenty sightings on one walk without signal

## Constraints
- Runs on five-year-old Android phones

## Reference Links
- County records database API documentation
"""

ROADMAP_FILLED = """---
schema_version: 2
---

# Roadmap

## Current Focus
**Milestone:** M1 — Offline capture
Getting the capture screen usable with gloves on.

## Milestone Index
- M1 — Offline capture
- M2 — Deferred sync

## Milestones

### M1 — Offline capture
**Status:** active
Volunteers can record sightings with no connectivity.

### M2 — Deferred sync
**Status:** planned
Sightings upload automatically once a connection returns.

## Vertical Slices

### M1 Slices

#### VS1 — Capture form
Species, location and photo on one screen.

#### VS2 — Local storage
Sightings survive an app restart.

### M2 Slices

#### VS3 — Upload queue
Retry uploads with backoff until the records API accepts them.

## Cut / Deferred Milestones
- Photo identification, cut for the first season.
"""

TASKS_FILLED = """# Tasks

## Current
- [x] Sketch the capture form layout
- [ ] Wire the species picker to the local list
  - [ ] Handle species with no common name
- [ ] Persist sightings in local storage

## Next
- [ ] Draft the upload queue retry policy

## Later
- [ ] Explore a tablet layout
"""

LOG_FILLED = """# Log

## 2024-05-04
Walked the north valley route and noted that the picker is too slow with gloves.
"""

IDEAS_FILLED = """# Ideas

- Voice capture for species names when hands are muddy
- Share a walk summary with the survey coordinator
"""

ARCHIVE_FILLED = """# Archive

## Cut: Photo identification
Dropped for the first season because models were unreliable on low-end phones.
"""


@pytest.fixture
def filled_documents() -> Dict[DocumentKind, str]:
    """Text for every canonical document, each past its length threshold."""
    return {
        DocumentKind.OVERVIEW: OVERVIEW_FILLED,
        DocumentKind.ROADMAP: ROADMAP_FILLED,
        DocumentKind.TASKS: TASKS_FILLED,
        DocumentKind.LOG: LOG_FILLED,
        DocumentKind.IDEAS: IDEAS_FILLED,
        DocumentKind.ARCHIVE: ARCHIVE_FILLED,
    }


@pytest.fixture
def write_project(tmp_path):
    """Return a function writing documents into a fresh project folder."""

    def _write(documents: Dict[DocumentKind, str], name: str = "field-notes") -> Path:
        project = tmp_path / name
        project.mkdir(parents=True, exist_ok=True)
        for kind, text in documents.items():
            (project / kind.filename).write_text(text, encoding="utf-8")
        return project

    return _write


@pytest.fixture(autouse=True)
def reset_observability():
    """Keep global hooks and metrics from leaking between tests."""
    yield
    observability_hooks.hooks.clear()
    performance_monitor.clear()
