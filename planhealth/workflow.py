"""Project health management for planhealth.

This module provides the service facade over the classification, snapshot,
readiness and milestone modules. Each public method returns a plain
dictionary suitable for an MCP tool response, including guidance about the
next step, and reports failures in the dictionary instead of raising.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .classifier import classify
from .headings import fix_headings, validate_headings
from .issues import build_issues, build_transition_issues
from .models import DocumentKind, ProjectSnapshot, ProjectStatus
from .planhealth_logging import log_error_with_context, log_operation, log_performance
from .rules import DEFAULT_RULES, ClassificationRules
from .snapshot import FilesystemReader, build_snapshot, read_or_missing
from .summary import format_snapshot_summary, format_status_summary
from .transitions import compute_project_status

logger = logging.getLogger("planhealth.workflow")

# Guidance shown when a document is the top remediation item.
_REMEDIATION_STEPS: Dict[DocumentKind, str] = {
    DocumentKind.OVERVIEW: "Fill in Overview.md: elevator pitch, problem, users, scope and success criteria",
    DocumentKind.IDEAS: "Capture open questions and raw ideas in Ideas.md",
    DocumentKind.TASKS: "Add actionable checklist items under '## Current' in Tasks.md",
    DocumentKind.ROADMAP: "Define at least one milestone ('### M1 — Title') with a **Status:** line in Roadmap.md",
    DocumentKind.LOG: "Start a dated entry in Log.md",
    DocumentKind.ARCHIVE: "Create Archive.md for completed or cut work",
}


class HealthManager:
    """Inspects the canonical planning documents of one project folder."""

    def __init__(self, root: Path | str, rules: Optional[ClassificationRules] = None):
        """Initialize the manager for a project root."""
        self.reader = FilesystemReader(root)
        self.root = self.reader.root
        self.rules = rules or DEFAULT_RULES

    # ------------------------------------------------------------------
    # Snapshot and readiness
    # ------------------------------------------------------------------

    def build(self) -> ProjectSnapshot:
        """Build a fresh snapshot of the project."""
        return build_snapshot(str(self.root), self.reader, rules=self.rules)

    def read_text(self, kind: DocumentKind) -> str:
        """Return a document's text, or "" when it is missing or unreadable."""
        read = read_or_missing(self.root.name, self.reader, kind)
        if read is None:
            return ""
        return read if isinstance(read, str) else read.text

    def status(self) -> ProjectStatus:
        """Compute a fresh milestone status from Roadmap.md and Tasks.md."""
        return compute_project_status(
            self.read_text(DocumentKind.ROADMAP),
            self.read_text(DocumentKind.TASKS),
            project=self.root.name,
        )

    @log_performance("project_snapshot")
    def project_snapshot(self) -> Dict[str, Any]:
        """Return the full snapshot as a dictionary."""
        try:
            snapshot = self.build()
            readiness = snapshot.readiness
            return {
                "snapshot": snapshot.to_dict(),
                "next_suggested_step": "project_issues" if not readiness.is_ready else "project_status",
                "workflow_tip": readiness.summary,
                "message": f"Snapshot captured: {len(snapshot.missing)} missing, {len(snapshot.weak)} need filling",
            }
        except Exception as e:
            logger.error(f"Failed to build snapshot: {e}")
            log_error_with_context(e, {"operation": "project_snapshot", "root": str(self.root)})
            return {
                "error": f"Failed to build snapshot: {e}",
                "suggestion": "Check that the project root exists and is readable",
                "next_suggested_step": "project_snapshot",
                "snapshot": None,
            }

    def snapshot_summary(self) -> Dict[str, Any]:
        """Return the text summary used in prompts."""
        try:
            snapshot = self.build()
            return {
                "summary": format_snapshot_summary(snapshot),
                "is_ready": snapshot.readiness.is_ready,
            }
        except Exception as e:
            log_error_with_context(e, {"operation": "snapshot_summary", "root": str(self.root)})
            return {
                "error": f"Failed to summarize snapshot: {e}",
                "suggestion": "Check that the project root exists and is readable",
                "next_suggested_step": "project_snapshot",
            }

    def readiness(self) -> Dict[str, Any]:
        """Return only the readiness gate."""
        try:
            readiness = self.build().readiness
            first = readiness.prioritized_files[0] if readiness.prioritized_files else None
            return {
                "readiness": readiness.to_dict(),
                "next_suggested_step": "project_issues" if first else "project_status",
                "workflow_tip": _REMEDIATION_STEPS[first] if first else "All core documents are filled in",
            }
        except Exception as e:
            log_error_with_context(e, {"operation": "readiness", "root": str(self.root)})
            return {
                "error": f"Failed to assess readiness: {e}",
                "suggestion": "Check that the project root exists and is readable",
                "next_suggested_step": "project_snapshot",
            }

    # ------------------------------------------------------------------
    # Single-document checks
    # ------------------------------------------------------------------

    def classify_document(self, kind: Union[DocumentKind, str], content: str) -> Dict[str, Any]:
        """Classify arbitrary document text without touching the filesystem."""
        try:
            resolved = DocumentKind.coerce(kind)
            classification = classify(kind, content, self.rules)
            headings = validate_headings(kind, content)
            return {
                "file": resolved.filename if resolved else str(kind),
                "classification": classification.to_dict(),
                "headings": headings.to_dict() if headings else None,
            }
        except Exception as e:
            log_error_with_context(e, {"operation": "classify_document", "kind": str(kind)})
            return {
                "error": f"Failed to classify document: {e}",
                "suggestion": "Pass one of Overview, Roadmap, Tasks, Log, Ideas or Archive as the kind",
                "next_suggested_step": "classify_document",
            }

    def validate_headings(self, kind: Union[DocumentKind, str], content: str) -> Dict[str, Any]:
        """Check heading structure for Overview.md or Roadmap.md text."""
        resolved = DocumentKind.coerce(kind)
        if resolved not in (DocumentKind.OVERVIEW, DocumentKind.ROADMAP):
            return {
                "error": f"No canonical heading structure for '{kind}'",
                "suggestion": "Heading validation applies to Overview.md and Roadmap.md only",
                "next_suggested_step": "classify_document",
            }
        validation = validate_headings(resolved, content)
        return {"file": resolved.filename, "headings": validation.to_dict()}

    def fix_headings(self, kind: Union[DocumentKind, str], content: Optional[str] = None) -> Dict[str, Any]:
        """Return Overview.md or Roadmap.md text rebuilt into the canonical outline.

        When ``content`` is omitted the document is read from the project
        folder. The fixed text is returned for review and never written.
        """
        resolved = DocumentKind.coerce(kind)
        if resolved not in (DocumentKind.OVERVIEW, DocumentKind.ROADMAP):
            return {
                "error": f"No canonical heading structure for '{kind}'",
                "suggestion": "Heading repair applies to Overview.md and Roadmap.md only",
                "next_suggested_step": "classify_document",
            }

        original = self.read_text(resolved) if content is None else content
        if not original.strip():
            return {
                "error": f"{resolved.filename} has no content to reformat",
                "suggestion": f"Create {resolved.filename} first",
                "next_suggested_step": "project_issues",
            }

        fixed = fix_headings(resolved, original, self.root.name)
        logger.debug(f"Rebuilt headings for {resolved.filename}")
        return {
            "file": resolved.filename,
            "content": fixed,
            "changed": fixed != original,
            "headings": validate_headings(resolved, fixed).to_dict(),
            "next_suggested_step": "project_issues",
            "workflow_tip": f"Review the reformatted text, then save it to {resolved.filename}",
        }

    # ------------------------------------------------------------------
    # Milestones and issues
    # ------------------------------------------------------------------

    def project_status(self) -> Dict[str, Any]:
        """Return milestone progress and the transition state."""
        try:
            with log_operation("project_status", root=str(self.root)):
                status = self.status()
            return {
                "status": status.to_dict(),
                "summary": format_status_summary(status),
                "issues": [issue.to_dict() for issue in build_transition_issues(status.transition_state)],
            }
        except Exception as e:
            log_error_with_context(e, {"operation": "project_status", "root": str(self.root)})
            return {
                "error": f"Failed to compute project status: {e}",
                "suggestion": "Check that Roadmap.md and Tasks.md are readable UTF-8 files",
                "next_suggested_step": "project_snapshot",
            }

    def project_issues(self) -> Dict[str, Any]:
        """Return document issues followed by milestone transition issues."""
        try:
            snapshot = self.build()
            status = self.status()
            issues = build_issues(snapshot) + build_transition_issues(status.transition_state)
            count = len(issues)
            return {
                "issues": [issue.to_dict() for issue in issues],
                "count": count,
                "message": f"{count} issue{'s' if count > 1 else ''} to address" if issues else "No issues found",
            }
        except Exception as e:
            log_error_with_context(e, {"operation": "project_issues", "root": str(self.root)})
            return {
                "error": f"Failed to collect issues: {e}",
                "suggestion": "Check that the project root exists and is readable",
                "next_suggested_step": "project_snapshot",
                "issues": [],
            }

    def next_step(self) -> Dict[str, Any]:
        """Suggest the single most useful thing to do next."""
        try:
            snapshot = self.build()
            readiness = snapshot.readiness
            if readiness.prioritized_files and not readiness.is_ready:
                first = readiness.prioritized_files[0]
                return {
                    "focus_file": first.filename,
                    "reason": readiness.summary,
                    "next_suggested_step": "project_issues",
                    "workflow_tip": _REMEDIATION_STEPS[first],
                }

            transition_issues = build_transition_issues(self.status().transition_state)
            if transition_issues:
                issue = transition_issues[0]
                return {
                    "focus_file": issue.file,
                    "reason": issue.message,
                    "next_suggested_step": "project_status",
                    "workflow_tip": issue.details or issue.fix_label,
                }

            if readiness.prioritized_files:
                first = readiness.prioritized_files[0]
                return {
                    "focus_file": first.filename,
                    "reason": f"{first.filename} is {snapshot.entries[first].status.value}",
                    "next_suggested_step": "project_issues",
                    "workflow_tip": _REMEDIATION_STEPS[first],
                }

            return {
                "focus_file": DocumentKind.TASKS.filename,
                "reason": readiness.summary,
                "next_suggested_step": "project_status",
                "workflow_tip": "Keep working through the Current section of Tasks.md",
            }
        except Exception as e:
            log_error_with_context(e, {"operation": "next_step", "root": str(self.root)})
            return {
                "error": f"Failed to determine next step: {e}",
                "suggestion": "Check that the project root exists and is readable",
                "next_suggested_step": "project_snapshot",
            }
