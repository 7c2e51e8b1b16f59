"""Project snapshot building.

A snapshot is assembled from the six canonical documents. Reading is
delegated to an injected reader so the same builder serves a local folder,
a vault API or test fixtures. The six reads are independent and are
dispatched concurrently; the snapshot is only assembled once every read has
finished, and a failed read degrades to a ``missing`` entry.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .classifier import classify
from .frontmatter import split_frontmatter
from .headings import find_misplaced_sections, validate_headings
from .models import (
    CANONICAL_KINDS,
    DocumentEntry,
    DocumentKind,
    DocumentRead,
    ProjectSnapshot,
    WeakDocument,
    utc_timestamp,
)
from .planhealth_logging import (
    log_document_read_failed,
    log_operation,
    log_performance,
    log_snapshot_built,
)
from .readiness import assess_readiness
from .rules import DEFAULT_RULES, ClassificationRules

logger = logging.getLogger("planhealth.snapshot")

ReadResult = Optional[Union[str, DocumentRead]]
DocumentReader = Callable[[DocumentKind], ReadResult]
AsyncDocumentReader = Callable[[DocumentKind], Awaitable[ReadResult]]


class FilesystemReader:
    """Read canonical documents from a project folder on disk."""

    def __init__(self, root: Path | str):
        self.root = Path(root).expanduser().resolve()

    def path_for(self, kind: DocumentKind) -> Path:
        return self.root / kind.filename

    def read(self, kind: DocumentKind) -> ReadResult:
        """Return the document, or None when the file does not exist.

        Permission and decoding errors propagate; the snapshot builder turns
        them into ``missing`` entries.
        """
        path = self.path_for(kind)
        if not path.is_file():
            return None
        text = path.read_text(encoding="utf-8")
        stats = path.stat()
        modified = datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)
        return DocumentRead(
            text=text,
            size_bytes=stats.st_size,
            modified_at=modified.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z",
        )

    async def aread(self, kind: DocumentKind) -> ReadResult:
        return await asyncio.to_thread(self.read, kind)

    __call__ = read


def parse_github_repos(frontmatter: Mapping[str, Any]) -> Tuple[str, ...]:
    """Read the ``github`` frontmatter key as a list of ``owner/repo`` strings."""
    raw = frontmatter.get("github")
    if isinstance(raw, list):
        items = [str(item).strip() for item in raw if item is not None]
    elif isinstance(raw, str):
        if raw.strip().lower() in ("", "n/a"):
            return ()
        items = [part.strip() for part in raw.split(",")]
    else:
        return ()
    return tuple(item for item in items if item and item.lower() != "n/a")


def build_entry(kind: DocumentKind, read: ReadResult, rules: ClassificationRules = DEFAULT_RULES) -> DocumentEntry:
    """Classify one document read into a snapshot entry."""
    if read is None:
        return DocumentEntry.missing(kind)
    if isinstance(read, str):
        read = DocumentRead(text=read)

    frontmatter, _ = split_frontmatter(read.text)
    classification = classify(kind, read.text, rules)
    return DocumentEntry(
        kind=kind,
        exists=True,
        status=classification.status,
        reasons=classification.reasons,
        frontmatter=frontmatter,
        size_bytes=read.size_bytes,
        modified_at=read.modified_at,
        headings=validate_headings(kind, read.text),
        misplaced=find_misplaced_sections(kind, read.text),
    )


def assemble_snapshot(
    name: str,
    path: str,
    reads: Mapping[DocumentKind, ReadResult],
    *,
    rules: ClassificationRules = DEFAULT_RULES,
    captured_at: Optional[str] = None,
) -> ProjectSnapshot:
    """Build a snapshot from a completed set of reads.

    The result depends only on the contents of ``reads``, never on the order
    in which they completed.
    """
    entries: Dict[DocumentKind, DocumentEntry] = {}
    for kind in CANONICAL_KINDS:
        entries[kind] = build_entry(kind, reads.get(kind), rules)
        logger.debug(
            f"{kind.filename}: {entries[kind].status.value}",
            extra={"extra_fields": {"document": kind.filename, "reasons": list(entries[kind].reasons)}},
        )

    missing = tuple(kind for kind in CANONICAL_KINDS if not entries[kind].exists)
    weak = tuple(
        WeakDocument(kind=kind, status=entries[kind].status, reasons=entries[kind].reasons)
        for kind in CANONICAL_KINDS
        if entries[kind].exists and entries[kind].status.is_weak
    )
    readiness = assess_readiness(entries)

    snapshot = ProjectSnapshot(
        name=name,
        path=path,
        captured_at=captured_at or utc_timestamp(),
        entries=entries,
        missing=missing,
        weak=weak,
        readiness=readiness,
        github_repos=parse_github_repos(entries[DocumentKind.OVERVIEW].frontmatter),
    )

    logger.info(
        f"Snapshot for '{name}': {len(missing)} missing, {len(weak)} weak, ready={readiness.is_ready}"
    )
    log_snapshot_built(
        name,
        missing=[kind.filename for kind in missing],
        weak=[item.kind.filename for item in weak],
        is_ready=readiness.is_ready,
    )
    return snapshot


def _project_name(name: Optional[str], path: str) -> str:
    if name:
        return name
    normalized = path.replace("\\", "/").rstrip("/")
    return PurePath(normalized).name or normalized


def read_or_missing(project: str, reader: DocumentReader, kind: DocumentKind) -> ReadResult:
    """Call the reader, degrading any failure to None (missing) with a WARNING."""
    try:
        return reader(kind)
    except Exception as e:
        logger.warning(f"Reading {kind.filename} failed ({type(e).__name__}); treating as missing")
        log_document_read_failed(project, kind.filename, e)
        return None


@log_performance("build_snapshot")
def build_snapshot(
    path: str,
    reader: DocumentReader,
    *,
    name: Optional[str] = None,
    rules: ClassificationRules = DEFAULT_RULES,
    captured_at: Optional[str] = None,
    max_workers: int = len(CANONICAL_KINDS),
) -> ProjectSnapshot:
    """Read the six canonical documents concurrently and build a snapshot."""
    project = _project_name(name, path)
    with log_operation("build_snapshot", project=project, path=path):
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="planhealth-read") as executor:
            futures = {kind: executor.submit(read_or_missing, project, reader, kind) for kind in CANONICAL_KINDS}
            reads = {kind: future.result() for kind, future in futures.items()}
        return assemble_snapshot(project, path, reads, rules=rules, captured_at=captured_at)


async def _safe_aread(project: str, reader: AsyncDocumentReader, kind: DocumentKind) -> ReadResult:
    try:
        return await reader(kind)
    except Exception as e:
        logger.warning(f"Reading {kind.filename} failed ({type(e).__name__}); treating as missing")
        log_document_read_failed(project, kind.filename, e)
        return None


async def abuild_snapshot(
    path: str,
    reader: AsyncDocumentReader,
    *,
    name: Optional[str] = None,
    rules: ClassificationRules = DEFAULT_RULES,
    captured_at: Optional[str] = None,
) -> ProjectSnapshot:
    """Async variant of ``build_snapshot``: the six reads are gathered."""
    project = _project_name(name, path)
    results: List[ReadResult] = await asyncio.gather(
        *(_safe_aread(project, reader, kind) for kind in CANONICAL_KINDS)
    )
    reads = dict(zip(CANONICAL_KINDS, results))
    return assemble_snapshot(project, path, reads, rules=rules, captured_at=captured_at)
