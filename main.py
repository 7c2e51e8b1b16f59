"""MCP server exposing planning-document health and milestone tools."""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from planhealth.config import RootResolutionError, Settings, resolve_root
from planhealth.planhealth_logging import setup_logging
from planhealth.rules import ConfigurationError
from planhealth.summary import format_snapshot_summary
from planhealth.workflow import HealthManager

mcp = FastMCP("planhealth")


def _manager(root: Optional[str]) -> HealthManager:
    settings = Settings.from_env()
    resolved = resolve_root(root, settings)
    return HealthManager(resolved, rules=settings.load_rules())


def _manager_optional(root: Optional[str]) -> Optional[HealthManager]:
    try:
        return _manager(root)
    except RootResolutionError:
        return None


@mcp.tool()
def project_snapshot(root: Optional[str] = None) -> Dict[str, Any]:
    """Classify all six core documents (Overview, Roadmap, Tasks, Log, Ideas, Archive)
    as missing, template_only, thin or filled, and report readiness for workflows."""

    return _manager(root).project_snapshot()


@mcp.tool()
def snapshot_summary(root: Optional[str] = None) -> Dict[str, Any]:
    """Plain-text project summary suitable for embedding in an AI prompt."""

    return _manager(root).snapshot_summary()


@mcp.tool()
def readiness(root: Optional[str] = None) -> Dict[str, Any]:
    """Report whether the project has enough basis for advanced workflows,
    listing blockers and the order in which documents should be fixed."""

    return _manager(root).readiness()


@mcp.tool()
def classify_document(kind: str, content: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Classify the fill status of document text without reading it from disk.
    kind is a document name such as 'Overview' or 'Tasks.md'."""

    manager = _manager_optional(root)
    if manager is None:
        manager = HealthManager(".", rules=Settings.from_env().load_rules())
    return manager.classify_document(kind, content)


@mcp.tool()
def validate_headings(kind: str, content: str) -> Dict[str, Any]:
    """Check Overview.md or Roadmap.md text for the canonical heading structure."""

    return HealthManager(".").validate_headings(kind, content)


@mcp.tool()
def fix_headings(kind: str, content: Optional[str] = None, root: Optional[str] = None) -> Dict[str, Any]:
    """Rebuild Overview.md or Roadmap.md text into the canonical heading outline.
    Uses the file on disk when content is omitted. Nothing is written."""

    if content is None:
        return _manager(root).fix_headings(kind)
    manager = _manager_optional(root) or HealthManager(".")
    return manager.fix_headings(kind, content)


@mcp.tool()
def project_status(root: Optional[str] = None) -> Dict[str, Any]:
    """Parse Roadmap.md and Tasks.md into the current milestone, active slice,
    task progress and milestone transition state."""

    return _manager(root).project_status()


@mcp.tool()
def project_issues(root: Optional[str] = None) -> Dict[str, Any]:
    """List document problems and milestone events with suggested fix labels."""

    return _manager(root).project_issues()


@mcp.tool()
def next_step(root: Optional[str] = None) -> Dict[str, Any]:
    """Suggest the single most useful thing to work on next."""

    return _manager(root).next_step()


@mcp.resource("planhealth://snapshot")
def resource_snapshot() -> str:
    """Resource view of the project snapshot summary."""

    try:
        manager = _manager_optional(None)
    except ConfigurationError as e:
        return f"Invalid planhealth configuration: {e}"
    if not manager:
        return "No project root detected. Launch tools with a 'root' argument or set PLANHEALTH_PROJECT_ROOT."

    return format_snapshot_summary(manager.build())


if __name__ == "__main__":
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)
    mcp.run(transport="stdio")
