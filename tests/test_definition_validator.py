"""
Tests for schema definition checks
"""
from cmdb.validation import AttributeDefinition, TypeSchema, validate_definition


def schema(name="server", *attributes):
    return TypeSchema(name=name, attributes=list(attributes))


class TestValidateDefinition:
    """Test validation of schema definitions"""

    def test_valid_schema(self, server_schema):
        result = validate_definition(server_schema)
        assert result.is_valid is True

    def test_blank_schema_name(self):
        result = validate_definition(schema("  "))
        assert result.errors[0].field == "name"
        assert result.errors[0].message == "Schema name cannot be empty"

    def test_blank_attribute_name(self):
        result = validate_definition(schema("server", AttributeDefinition(name="", type="string")))
        assert result.errors[0].field == "attributes[0].name"
        assert result.errors[0].message == "Attribute name cannot be empty"

    def test_duplicate_attribute_name(self):
        result = validate_definition(schema(
            "server",
            AttributeDefinition(name="x", type="string"),
            AttributeDefinition(name="x", type="number"),
        ))
        assert result.is_valid is False
        assert len(result.errors) == 1
        assert result.errors[0].field == "attributes[1].name"
        assert "Duplicate attribute name" in result.errors[0].message

    def test_invalid_type(self):
        result = validate_definition(schema("server", AttributeDefinition(name="x", type="integer")))
        assert result.errors[0].field == "attributes[0].type"
        assert result.errors[0].message == "Invalid attribute type: integer"

    def test_default_must_match_type(self):
        result = validate_definition(schema(
            "server",
            AttributeDefinition(name="cores", type="number", default="four"),
        ))
        assert result.errors[0].field == "attributes[0].default"
        assert result.errors[0].message == "Default value type mismatch: Expected number, got string"

    def test_default_ignores_constraint_rules(self):
        """Defaults are type-checked only"""
        result = validate_definition(schema(
            "server",
            AttributeDefinition(name="cores", type="number", default=0, validation={"min": 1}),
        ))
        assert result.is_valid is True

    def test_all_problems_collected(self):
        result = validate_definition(schema(
            "",
            AttributeDefinition(name="", type="string"),
            AttributeDefinition(name="a", type="bogus"),
            AttributeDefinition(name="a", type="boolean", default="yes"),
        ))
        assert [error.field for error in result.errors] == [
            "name",
            "attributes[0].name",
            "attributes[1].type",
            "attributes[2].name",
            "attributes[2].default",
        ]

    def test_repeated_blank_name_is_also_a_duplicate(self):
        result = validate_definition(schema(
            "server",
            AttributeDefinition(name="", type="string"),
            AttributeDefinition(name="", type="string"),
        ))
        assert [(error.field, error.message) for error in result.errors] == [
            ("attributes[0].name", "Attribute name cannot be empty"),
            ("attributes[1].name", "Attribute name cannot be empty"),
            ("attributes[1].name", "Duplicate attribute name: "),
        ]
