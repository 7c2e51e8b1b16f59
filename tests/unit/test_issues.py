"""Unit tests for remediation issues."""

from planhealth.issues import (
    IssueType,
    build_issues,
    build_transition_issues,
    format_missing_headings,
)
from planhealth.models import (
    AllComplete,
    DocumentKind,
    Milestone,
    MilestoneComplete,
    MilestoneStatus,
    NoTransition,
    TasksComplete,
)
from planhealth.snapshot import build_snapshot

M1 = Milestone("M1", "Capture", MilestoneStatus.ACTIVE)
M2 = Milestone("M2", "Sync", MilestoneStatus.PLANNED)


class TestBuildIssues:
    """Test cases for document issues."""

    def test_healthy_project(self, filled_documents):
        """A filled project with canonical headings has no issues."""
        snapshot = build_snapshot("/p", filled_documents.get)
        assert build_issues(snapshot) == []

    def test_empty_project(self):
        """Every missing document is an issue in priority order."""
        snapshot = build_snapshot("/p", lambda kind: None)
        issues = build_issues(snapshot)

        assert [issue.file for issue in issues] == [
            "Overview.md",
            "Tasks.md",
            "Roadmap.md",
            "Ideas.md",
            "Log.md",
            "Archive.md",
        ]
        assert all(issue.type is IssueType.MISSING for issue in issues)
        assert issues[0].message == "Overview.md does not exist"
        assert issues[0].fix_label == "Create File"

    def test_weak_documents(self, filled_documents):
        """Template-only and thin documents get fill and expand issues."""
        documents = dict(filled_documents)
        documents[DocumentKind.TASKS] = "---\nstatus: new\n---\n"
        documents[DocumentKind.LOG] = "Short."
        issues = build_issues(build_snapshot("/p", documents.get))

        assert [(i.file, i.type, i.message, i.fix_label) for i in issues] == [
            ("Tasks.md", IssueType.TEMPLATE_ONLY, "Tasks.md has not been filled in", "Fill with AI"),
            ("Log.md", IssueType.THIN, "Log.md needs more content", "Expand with AI"),
        ]

    def test_invalid_headings(self, filled_documents):
        """A filled Overview missing headings gets a headings issue."""
        documents = dict(filled_documents)
        documents[DocumentKind.OVERVIEW] = (
            documents[DocumentKind.OVERVIEW]
            .replace("## Constraints", "## Limits")
            .replace("## Reference Links", "## Links")
        )
        issues = build_issues(build_snapshot("/p", documents.get))

        assert len(issues) == 1
        issue = issues[0]
        assert issue.file == "Overview.md"
        assert issue.type is IssueType.HEADINGS_INVALID
        assert issue.message == "Missing 2 heading(s)"
        assert issue.details == "Missing: Constraints, Reference Links"
        assert issue.fix_label == "Add Missing (AI)"
        assert issue.secondary_fix_label == "Reformat File"

    def test_template_only_suppresses_heading_issue(self):
        """A template-only Roadmap is not also flagged for headings."""
        documents = {DocumentKind.ROADMAP: "---\nstatus: new\n---\n"}
        issues = build_issues(build_snapshot("/p", documents.get))
        roadmap_issues = [i for i in issues if i.file == "Roadmap.md"]

        assert [i.type for i in roadmap_issues] == [IssueType.TEMPLATE_ONLY]

    def test_thin_document_also_gets_heading_issue(self):
        """A thin Roadmap with missing headings carries both issues."""
        documents = {DocumentKind.ROADMAP: "## Milestones\n"}
        issues = build_issues(build_snapshot("/p", documents.get))
        roadmap_issues = [i for i in issues if i.file == "Roadmap.md"]

        assert [i.type for i in roadmap_issues] == [IssueType.THIN, IssueType.HEADINGS_INVALID]

    def test_misplaced_sections(self, filled_documents):
        """Sections that belong elsewhere are reported once per document."""
        documents = dict(filled_documents)
        documents[DocumentKind.TASKS] += "\n## Elevator Pitch\nA notebook.\n\n## Problem Statement\nWet paper.\n"
        issues = build_issues(build_snapshot("/p", documents.get))

        assert len(issues) == 1
        issue = issues[0]
        assert issue.file == "Tasks.md"
        assert issue.type is IssueType.MISPLACED_CONTENT
        assert issue.message == (
            'Tasks.md: "## Elevator Pitch" belongs in Overview.md; "## Problem Statement" belongs in Overview.md'
        )
        assert issue.fix_label == "Move Content"
        assert issue.to_dict()["icon"] == "⇄"

    def test_misplaced_after_heading_issues(self, filled_documents):
        """Misplaced-content issues follow heading issues."""
        documents = dict(filled_documents)
        documents[DocumentKind.OVERVIEW] = documents[DocumentKind.OVERVIEW].replace(
            "## Constraints", "## Next 1-3 Actions"
        )
        issues = build_issues(build_snapshot("/p", documents.get))

        assert [(i.file, i.type) for i in issues] == [
            ("Overview.md", IssueType.HEADINGS_INVALID),
            ("Overview.md", IssueType.MISPLACED_CONTENT),
        ]
        assert issues[1].message == 'Overview.md: "## Next 1–3 Actions" belongs in Tasks.md'

    def test_to_dict(self):
        """Issues serialize with their icon."""
        issue = build_issues(build_snapshot("/p", lambda kind: None))[0]
        data = issue.to_dict()

        assert data["type"] == "missing"
        assert data["icon"] == "!"
        assert data["details"] is None


class TestFormatMissingHeadings:
    def test_strips_markers(self):
        assert format_missing_headings(["## Scope", "### In-Scope"]) == "Missing: Scope, In-Scope"


class TestBuildTransitionIssues:
    """Test cases for milestone transition issues."""

    def test_none(self):
        assert build_transition_issues(NoTransition()) == []

    def test_all_complete(self):
        (issue,) = build_transition_issues(AllComplete())

        assert issue.type is IssueType.ALL_MILESTONES_COMPLETE
        assert issue.message == "All milestones complete!"
        assert issue.fix_label == "Celebrate!"

    def test_tasks_complete(self):
        """Closing out a milestone points at the next one."""
        (issue,) = build_transition_issues(TasksComplete(M1, M2))

        assert issue.file == "Roadmap.md"
        assert issue.type is IssueType.TASKS_COMPLETE
        assert issue.message == 'All tasks complete for M1 "Capture"!'
        assert issue.details == 'Ready to close and move to M2: "Sync"'
        assert (issue.fix_label, issue.secondary_fix_label) == ("Close Milestone", "Plan Next Steps")

    def test_tasks_complete_last_milestone(self):
        (issue,) = build_transition_issues(TasksComplete(M1, None))
        assert issue.details.startswith("No more planned milestones")

    def test_milestone_done_with_one_task_left(self):
        """Singular task wording."""
        (issue,) = build_transition_issues(MilestoneComplete(M1, 1, M2))

        assert issue.type is IssueType.MILESTONE_TASKS_REMAIN
        assert issue.message == 'M1 "Capture" marked done, but 1 task remain'
        assert issue.details == "1 task in Current section"
        assert (issue.fix_label, issue.secondary_fix_label) == ("Review Tasks", "Plan Anyway")

    def test_milestone_done_with_tasks_left(self):
        """Plural task wording."""
        (issue,) = build_transition_issues(MilestoneComplete(M1, 3, None))
        assert issue.message == 'M1 "Capture" marked done, but 3 tasks remain'

    def test_milestone_complete(self):
        """A clean milestone completion suggests the next phase."""
        (issue,) = build_transition_issues(MilestoneComplete(M1, 0, M2))

        assert issue.type is IssueType.MILESTONE_COMPLETE
        assert issue.message == 'M1 "Capture" complete!'
        assert issue.details == 'Ready to start M2: "Sync"'
        assert issue.fix_label == "Plan Next Phase"
        assert issue.secondary_fix_label is None
