"""Tests for the JSON value model."""

import pytest

from pngdb.core.values import MISSING, ValueKind, dump_value, get_field, kind_of, parse_value


class TestKindOf:
    @pytest.mark.parametrize("value, kind", [
        ("text", ValueKind.STRING),
        (3, ValueKind.NUMBER),
        (2.5, ValueKind.NUMBER),
        (True, ValueKind.BOOLEAN),
        (False, ValueKind.BOOLEAN),
        ({"a": 1}, ValueKind.OBJECT),
        ([1, 2], ValueKind.ARRAY),
        (None, ValueKind.NULL),
    ])
    def test_kinds(self, value, kind):
        assert kind_of(value) is kind

    def test_bool_is_not_number(self):
        """bool subclasses int but is tagged as a boolean."""
        assert kind_of(True) is not ValueKind.NUMBER

    def test_rejects_non_json(self):
        with pytest.raises(TypeError):
            kind_of(object())


class TestParseAndDump:
    def test_dump_is_compact_and_ascii(self):
        assert dump_value({"name": "café", "n": [1, 2]}) == '{"name":"caf\\u00e9","n":[1,2]}'

    def test_parse_restores_dumped_text(self):
        value = {"name": "café", "score": 1.25, "tags": ["x"], "ok": True, "none": None}
        assert parse_value(dump_value(value)) == value

    def test_parse_rejects_malformed(self):
        with pytest.raises(ValueError):
            parse_value("{not json")

    def test_parse_rejects_nan(self):
        with pytest.raises(ValueError):
            parse_value('{"a": NaN}')

    def test_dump_rejects_nan(self):
        with pytest.raises(ValueError):
            dump_value(float("nan"))


class TestGetField:
    def test_present(self):
        assert get_field({"a": 1}, "a") == 1

    def test_present_null_is_not_missing(self):
        assert get_field({"a": None}, "a") is None

    def test_absent(self):
        assert get_field({"a": 1}, "b") is MISSING

    def test_non_object_has_no_fields(self):
        assert get_field([1, 2], "a") is MISSING
        assert get_field("a", "a") is MISSING
