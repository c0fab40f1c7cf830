"""Tests for custom field helpers."""

import pytest

from jira_cli.fields import FieldKind, editable_custom_fields, field_kind


class TestFieldKind:
    """Tests for field_kind."""

    @pytest.mark.parametrize(
        "value,kind",
        [
            ("text", FieldKind.STRING),
            ("", FieldKind.STRING),
            (3, FieldKind.NUMBER),
            (2.5, FieldKind.NUMBER),
            (True, FieldKind.BOOL),
            (False, FieldKind.BOOL),
            (None, FieldKind.NULL),
            ({"value": "High"}, FieldKind.OBJECT),
            ([1, 2], FieldKind.ARRAY),
        ],
    )
    def test_kinds(self, value, kind):
        assert field_kind(value) is kind

    def test_scalar_kinds(self):
        assert {k for k in FieldKind if k.is_scalar} == {
            FieldKind.STRING,
            FieldKind.NUMBER,
            FieldKind.BOOL,
            FieldKind.NULL,
        }

    def test_rejects_non_json(self):
        with pytest.raises(TypeError):
            field_kind(object())


class TestEditableCustomFields:
    """Tests for editable_custom_fields."""

    def test_filters_and_names(self):
        raw_fields = {
            "summary": "Not custom",
            "customfield_10001": 8,
            "customfield_10002": "Team Rocket",
            "customfield_10003": {"value": "High"},
            "customfield_10004": ["a", "b"],
            "customfield_10005": "Not editable",
        }
        edit_metadata = {
            "summary": {"name": "Summary"},
            "customfield_10001": {"name": "Story Points"},
            "customfield_10002": {"name": "Team"},
            "customfield_10003": {"name": "Severity"},
            "customfield_10004": {"name": "Tags"},
        }

        assert editable_custom_fields(raw_fields, edit_metadata) == [
            ("Story Points", 8),
            ("Team", "Team Rocket"),
        ]

    def test_null_values_are_scalar(self):
        result = editable_custom_fields(
            {"customfield_1": None},
            {"customfield_1": {"name": "Flagged"}},
        )
        assert result == [("Flagged", None)]

    def test_missing_name_uses_key(self):
        result = editable_custom_fields({"customfield_1": "x"}, {"customfield_1": {}})
        assert result == [("customfield_1", "x")]

    def test_no_metadata(self):
        assert editable_custom_fields({"customfield_1": "x"}, {}) == []
