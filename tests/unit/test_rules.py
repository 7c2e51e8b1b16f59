"""Unit tests for the classification rule table and its YAML override."""

import pytest

from planhealth.models import DocumentKind
from planhealth.rules import (
    DEFAULT_RULES,
    TEMPLATE_ONLY_PLACEHOLDER_LIMIT,
    THIN_PLACEHOLDER_MINIMUM,
    ConfigurationError,
    load_rules,
    rules_from_mapping,
)


class TestDefaultRules:
    """Test cases for the built-in table."""

    def test_boundary_constants(self):
        """The placeholder boundaries are exactly 5 and 2."""
        assert TEMPLATE_ONLY_PLACEHOLDER_LIMIT == 5
        assert THIN_PLACEHOLDER_MINIMUM == 2
        assert DEFAULT_RULES.template_only_placeholder_limit == 5
        assert DEFAULT_RULES.thin_placeholder_minimum == 2

    def test_every_kind_has_rules(self):
        """Each canonical kind has a threshold record."""
        for kind in DocumentKind:
            assert DEFAULT_RULES.for_kind(kind) is not None

    def test_table_is_read_only(self):
        """The default table cannot be mutated."""
        with pytest.raises(TypeError):
            DEFAULT_RULES.thresholds[DocumentKind.LOG] = None

    def test_to_dict(self):
        """Serialization is keyed by kind name."""
        data = DEFAULT_RULES.to_dict()

        assert data["thresholds"]["Overview"]["min_meaningful"] == 200
        assert data["thresholds"]["Tasks"]["placeholders"] == []
        assert data["template_only_placeholder_limit"] == 5


class TestRulesFromMapping:
    """Test cases for overlaying overrides on the defaults."""

    def test_partial_override(self):
        """Only the given fields change."""
        rules = rules_from_mapping({"thresholds": {"overview.md": {"min_meaningful": 300}}})
        overview = rules.for_kind(DocumentKind.OVERVIEW)

        assert overview.min_meaningful == 300
        assert overview.placeholders == DEFAULT_RULES.for_kind(DocumentKind.OVERVIEW).placeholders
        assert rules.for_kind(DocumentKind.TASKS) == DEFAULT_RULES.for_kind(DocumentKind.TASKS)

    def test_defaults_untouched(self):
        """Overrides never modify the default table."""
        rules_from_mapping({"thresholds": {"Log": {"min_meaningful": 1}}})
        assert DEFAULT_RULES.for_kind(DocumentKind.LOG).min_meaningful == 20

    @pytest.mark.parametrize(
        "data",
        [
            {"thresholds": {"Changelog": {"min_meaningful": 1}}},
            {"thresholds": {"Log": {"min_meaningful": -1}}},
            {"thresholds": {"Log": {"min_meaningful": "ten"}}},
            {"thresholds": {"Log": {"placeholders": "<x>"}}},
            {"thresholds": {"Log": {"treat_empty_as_template": "yes"}}},
            {"thresholds": {"Log": {"colour": "blue"}}},
            {"thresholds": {"Log": 5}},
            {"thresholds": [1, 2]},
            {"template_only_placeholder_limit": True},
            {"template_only_placeholder_limit": 1, "thin_placeholder_minimum": 2},
        ],
    )
    def test_invalid_values(self, data):
        """Malformed overrides raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            rules_from_mapping(data)

    def test_top_level_must_be_mapping(self):
        """A list at the top level is rejected."""
        with pytest.raises(ConfigurationError):
            rules_from_mapping(["not", "a", "mapping"])


class TestLoadRules:
    """Test cases for reading a YAML rules file."""

    def test_no_path_returns_defaults(self):
        """Without a path the defaults are returned."""
        assert load_rules(None) is DEFAULT_RULES

    def test_loads_yaml(self, tmp_path):
        """A YAML file overrides the table."""
        path = tmp_path / "rules.yaml"
        path.write_text(
            "thin_placeholder_minimum: 3\n"
            "thresholds:\n"
            "  Ideas:\n"
            "    min_meaningful: 40\n"
            "    treat_empty_as_template: false\n",
            encoding="utf-8",
        )
        rules = load_rules(path)

        assert rules.thin_placeholder_minimum == 3
        assert rules.for_kind(DocumentKind.IDEAS).min_meaningful == 40
        assert rules.for_kind(DocumentKind.IDEAS).treat_empty_as_template is False

    def test_empty_file(self, tmp_path):
        """An empty file means no overrides."""
        path = tmp_path / "rules.yaml"
        path.write_text("", encoding="utf-8")

        assert load_rules(path).to_dict() == DEFAULT_RULES.to_dict()

    def test_missing_file(self, tmp_path):
        """An unreadable file is a configuration error."""
        with pytest.raises(ConfigurationError, match="Could not read"):
            load_rules(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML is a configuration error."""
        path = tmp_path / "rules.yaml"
        path.write_text("thresholds: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="not valid YAML"):
            load_rules(path)
