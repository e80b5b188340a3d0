"""
Tests for attribute type checks
"""
import pytest

from cmdb.validation import AttributeType, check_type
from cmdb.validation.type_checks import describe_type, parse_date


class TestAttributeType:
    """Test the closed type enum"""

    def test_parse_known(self):
        assert AttributeType.parse("date") is AttributeType.DATE

    def test_parse_unknown(self):
        assert AttributeType.parse("integer") is None
        assert AttributeType.parse(None) is None


class TestCheckType:
    """Test check_type against each declared type"""

    @pytest.mark.parametrize("expected_type,value", [
        ("string", "hello"),
        ("string", ""),
        ("number", 4),
        ("number", 4.5),
        ("number", -1),
        ("boolean", True),
        ("boolean", False),
        ("array", [1, "two"]),
        ("array", []),
        ("object", {"a": 1}),
        ("date", "2024-01-15T10:30:00Z"),
        ("date", "2024-01-15T10:30:00.123+02:00"),
        ("date", "2024-01-15"),
        ("date", "2024/01/15"),
        ("date", "01-15-2024"),
        ("date", "01/15/2024"),
        ("date", "January 15, 2024"),
    ])
    def test_accepts(self, expected_type, value):
        assert check_type("field", value, expected_type) is None

    @pytest.mark.parametrize("expected_type,value", [
        ("string", 42),
        ("number", "42"),
        ("number", True),
        ("boolean", "true"),
        ("boolean", 1),
        ("array", {"a": 1}),
        ("array", "abc"),
        ("object", [1, 2]),
        ("date", 20240115),
        ("date", "15th of January"),
    ])
    def test_rejects(self, expected_type, value):
        error = check_type("field", value, expected_type)
        assert error is not None
        assert error.field == "field"
        assert error.value == value

    def test_number_mismatch_message(self):
        error = check_type("cpu_cores", "four", "number")
        assert error.message == "Expected number, got string"

    def test_bad_date_message(self):
        error = check_type("installed", "yesterday", "date")
        assert error.message == "Invalid date format, expected ISO 8601 or common date format"

    def test_unknown_type_is_an_error(self):
        """A corrupt schema type is reported, whatever the value"""
        error = check_type("field", "anything", "uuid")
        assert error is not None
        assert error.message == "Unknown type: uuid"


class TestHelpers:
    """Test date parsing and type naming"""

    def test_parse_date_prefers_rfc3339(self):
        parsed = parse_date("2024-03-01T00:00:00Z")
        assert parsed is not None
        assert parsed.tzinfo is not None

    def test_parse_date_fallback(self):
        parsed = parse_date("March 1, 2024")
        assert (parsed.year, parsed.month, parsed.day) == (2024, 3, 1)

    @pytest.mark.parametrize("value", [
        "2024-01-15T10:30:00.1234567Z",
        "2024-01-15T10:30:00.12345678+02:00",
        "2024-01-15T10:30:00.123456789Z",
    ])
    def test_parse_date_sub_microsecond_fraction(self, value):
        parsed = parse_date(value)
        assert parsed is not None
        assert parsed.microsecond == 123456

    def test_parse_date_no_match(self):
        assert parse_date("2024.03.01") is None

    def test_describe_type(self):
        assert describe_type(None) == "null"
        assert describe_type(True) == "boolean"
        assert describe_type(3) == "number"
        assert describe_type([]) == "array"
        assert describe_type({}) == "object"
