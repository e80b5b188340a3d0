"""
Tests for default application
"""
from cmdb.validation import AttributeDefinition, TypeSchema, apply_defaults


def app_schema():
    return TypeSchema(
        name="application",
        attributes=[
            AttributeDefinition(name="version", type="string", required=True),
            AttributeDefinition(name="port", type="number", default=8080),
            AttributeDefinition(name="environment", type="string", default="production"),
            AttributeDefinition(name="dependencies", type="array", default=["libc"]),
        ],
    )


class TestApplyDefaults:
    """Test filling absent attributes"""

    def test_fills_absent_attributes(self):
        result = apply_defaults({"version": "1.0"}, app_schema())
        assert result == {
            "version": "1.0",
            "port": 8080,
            "environment": "production",
            "dependencies": ["libc"],
        }

    def test_never_overwrites_present_values(self):
        """Present values stay, even ones that would fail validation"""
        result = apply_defaults({"port": "not-a-port", "environment": None}, app_schema())
        assert result["port"] == "not-a-port"
        assert result["environment"] is None

    def test_attributes_without_default_stay_absent(self):
        assert "version" not in apply_defaults({}, app_schema())

    def test_idempotent(self):
        schema = app_schema()
        once = apply_defaults({"version": "2.0"}, schema)
        assert apply_defaults(once, schema) == once

    def test_input_not_mutated(self):
        payload = {"version": "1.0"}
        apply_defaults(payload, app_schema())
        assert payload == {"version": "1.0"}

    def test_mutable_defaults_are_copied(self):
        schema = app_schema()
        first = apply_defaults({}, schema)
        first["dependencies"].append("openssl")

        assert apply_defaults({}, schema)["dependencies"] == ["libc"]

    def test_extra_keys_kept(self):
        result = apply_defaults({"custom": 1}, app_schema())
        assert result["custom"] == 1
