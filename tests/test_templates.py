"""
Tests for the built-in schema templates
"""
import pytest

from cmdb.services import CI_TYPE_TEMPLATES, RELATIONSHIP_TYPE_TEMPLATES, clone_template
from cmdb.validation import validate_attributes, validate_definition


class TestTemplates:
    """Test the template catalog"""

    def test_catalog_names(self):
        assert set(CI_TYPE_TEMPLATES) == {"server", "application", "database", "network_device"}
        assert set(RELATIONSHIP_TYPE_TEMPLATES) == {"depends_on", "hosts", "connected_to", "runs_on"}

    @pytest.mark.parametrize("template", list(CI_TYPE_TEMPLATES.values()) + list(RELATIONSHIP_TYPE_TEMPLATES.values()))
    def test_every_template_is_a_valid_definition(self, template):
        assert validate_definition(template).is_valid is True

    def test_clone_is_independent(self):
        clone = clone_template(CI_TYPE_TEMPLATES, "server")
        clone.attributes.pop()

        assert len(CI_TYPE_TEMPLATES["server"].attributes) == 6

    def test_clone_unknown(self):
        assert clone_template(CI_TYPE_TEMPLATES, "mainframe") is None

    def test_cloned_schema_validates_payloads(self):
        schema = clone_template(CI_TYPE_TEMPLATES, "network_device")

        good = validate_attributes({"device_type": "switch", "management_ip": "192.168.1.1"}, schema)
        bad = validate_attributes({"device_type": "hub", "management_ip": "192.168.1.300"}, schema)

        assert good.is_valid is True
        assert [error.field for error in bad.errors] == ["device_type", "management_ip"]
