"""Unit tests for the template classifier.

Covers the empty-body rule, placeholder stripping, the exact length
boundary and the exact placeholder-count boundaries (2 and 5).
"""

import pytest

from planhealth.classifier import classify, count_unfilled_placeholders, strip_placeholders
from planhealth.models import DocumentKind, FillStatus
from planhealth.rules import DEFAULT_RULES, rules_from_mapping


def _placeholders(count: int) -> str:
    return " ".join(f"<todo item {i}>" for i in range(count))


class TestCountUnfilledPlaceholders:
    """Test cases for bracketed placeholder counting."""

    def test_counts_generic_placeholders(self):
        """Plain bracketed phrases are counted."""
        assert count_unfilled_placeholders("<Who?> and <What hurts today?>") == 2

    def test_ignores_urls_and_emails(self):
        """Autolinks are not placeholders."""
        text = "See <https://example.com/docs> or mail <team@example.com>."
        assert count_unfilled_placeholders(text) == 0

    def test_ignores_html_tags(self):
        """Known HTML tags, closing tags and self-closing tags are not counted."""
        text = '<div class="note"> text </div> <br/> <img src="a.png" />'
        assert count_unfilled_placeholders(text) == 0

    def test_tag_name_must_match_exactly(self):
        """A word that merely starts like a tag name is still a placeholder."""
        assert count_unfilled_placeholders("<piece of text>") == 1
        assert count_unfilled_placeholders("<bold claim>") == 1

    def test_ignores_html_comments(self):
        """Comments are not placeholders."""
        assert count_unfilled_placeholders("<!-- hidden note -->") == 0

    def test_ignores_code_like_tokens(self):
        """Tokens containing = or : that do not start like a word are code."""
        assert count_unfilled_placeholders("Map<key=value> and <a:b>") == 0

    def test_word_with_colon_is_placeholder(self):
        """A capitalized phrase with a colon still reads as scaffolding."""
        assert count_unfilled_placeholders("<Note: fill this in>") == 1


class TestStripPlaceholders:
    """Test cases for known-placeholder removal."""

    def test_removes_whole_lines_and_inline(self):
        """Known placeholders are removed wherever they appear."""
        text = "<Who?>\nUsers: <Who?> today"
        assert strip_placeholders(text, ["<Who?>"]) == "Users:  today"

    def test_case_insensitive(self):
        """Matching ignores case."""
        assert strip_placeholders("<WHO?>", ["<Who?>"]) == ""


class TestClassify:
    """Test cases for classify."""

    def test_frontmatter_only_is_template(self):
        """An empty body is template_only for kinds that treat empty as template."""
        for kind in DocumentKind:
            result = classify(kind, "---\ntitle: x\n---\n")
            assert result.status is FillStatus.TEMPLATE_ONLY
            assert result.reasons == ("Body is empty",)

    def test_whitespace_only_is_template(self):
        """Whitespace and line endings alone count as empty."""
        result = classify(DocumentKind.LOG, "\r\n  \n\t")
        assert result.status is FillStatus.TEMPLATE_ONLY

    def test_empty_body_thin_when_flag_unset(self):
        """With the empty-is-template flag off an empty body is thin."""
        rules = rules_from_mapping({"thresholds": {"Log": {"treat_empty_as_template": False}}})
        result = classify(DocumentKind.LOG, "", rules)

        assert result.status is FillStatus.THIN
        assert result.reasons == ("No meaningful content detected",)

    def test_only_known_placeholders(self):
        """A body made only of known placeholders is template_only."""
        text = "<What hurts today?>\n<Why does it hurt?>"
        result = classify(DocumentKind.OVERVIEW, text)

        assert result.status is FillStatus.TEMPLATE_ONLY
        assert result.reasons == ("Only template headings/placeholders present",)

    def test_length_boundary_exact(self):
        """Content exactly at the threshold is filled."""
        assert classify(DocumentKind.OVERVIEW, "a" * 200).status is FillStatus.FILLED

    def test_length_boundary_one_below(self):
        """One character below the threshold is thin."""
        result = classify(DocumentKind.OVERVIEW, "a" * 199)

        assert result.status is FillStatus.THIN
        assert result.reasons == ("Only 199 chars of non-template content",)

    @pytest.mark.parametrize(
        "kind,threshold",
        [
            (DocumentKind.OVERVIEW, 200),
            (DocumentKind.ROADMAP, 150),
            (DocumentKind.TASKS, 50),
            (DocumentKind.LOG, 20),
            (DocumentKind.IDEAS, 20),
            (DocumentKind.ARCHIVE, 50),
        ],
    )
    def test_threshold_table(self, kind, threshold):
        """Each kind uses its own minimum meaningful length."""
        assert classify(kind, "x" * threshold).status is FillStatus.FILLED
        assert classify(kind, "x" * (threshold - 1)).status is FillStatus.THIN

    def test_known_placeholders_do_not_count_toward_length(self):
        """Length is measured after known placeholders are removed."""
        text = "a" * 150 + " <What are you building, for whom, and why does it matter?>"
        result = classify(DocumentKind.OVERVIEW, text)

        assert result.status is FillStatus.THIN
        assert result.reasons[0] == "Only 150 chars of non-template content"

    def test_short_body_reports_placeholder_count(self):
        """A short body mentions its placeholder count when nonzero."""
        result = classify(DocumentKind.TASKS, "Do it <soon>")

        assert result.status is FillStatus.THIN
        assert result.reasons == ("Only 12 chars of non-template content", "1 unfilled placeholders")

    def test_six_placeholders_force_template_only(self):
        """More than five placeholders dominate length."""
        text = "word " * 100 + _placeholders(6)
        result = classify(DocumentKind.OVERVIEW, text)

        assert result.status is FillStatus.TEMPLATE_ONLY
        assert result.reasons == ("6 unfilled placeholders remain",)

    def test_five_placeholders_are_thin(self):
        """Exactly five placeholders past the length bar is thin, not template_only."""
        text = "word " * 100 + _placeholders(5)
        result = classify(DocumentKind.OVERVIEW, text)

        assert result.status is FillStatus.THIN
        assert result.reasons == ("5 unfilled placeholders remain",)

    def test_two_placeholders_force_thin(self):
        """Two placeholders past the length bar is thin."""
        text = "word " * 100 + _placeholders(2)
        result = classify(DocumentKind.OVERVIEW, text)

        assert result.status is FillStatus.THIN
        assert result.reasons == ("2 unfilled placeholders remain",)

    @pytest.mark.parametrize("count", [0, 1])
    def test_zero_or_one_placeholder_is_filled(self, count):
        """A long body with at most one placeholder is filled."""
        text = "word " * 100 + _placeholders(count)
        result = classify(DocumentKind.OVERVIEW, text)

        assert result.status is FillStatus.FILLED
        assert result.reasons == ()

    def test_unknown_kind_is_filled(self):
        """Kinds without rules degrade to filled with an explicit reason."""
        result = classify("Changelog", "anything")

        assert result.status is FillStatus.FILLED
        assert result.reasons == ("No template rules configured",)

    def test_kind_accepts_filename(self):
        """Kinds may be given as names or filenames."""
        assert classify("tasks.md", "x" * 50).status is FillStatus.FILLED

    def test_idempotent(self):
        """Classifying the same text twice gives identical results."""
        text = "Some notes " + _placeholders(3)
        assert classify(DocumentKind.IDEAS, text) == classify(DocumentKind.IDEAS, text)

    def test_custom_boundaries(self):
        """The placeholder boundaries come from the rule table."""
        rules = rules_from_mapping({"template_only_placeholder_limit": 2, "thin_placeholder_minimum": 1})
        text = "word " * 100

        assert classify(DocumentKind.OVERVIEW, text + _placeholders(3), rules).status is FillStatus.TEMPLATE_ONLY
        assert classify(DocumentKind.OVERVIEW, text + _placeholders(1), rules).status is FillStatus.THIN
        assert classify(DocumentKind.OVERVIEW, text + _placeholders(1), DEFAULT_RULES).status is FillStatus.FILLED
