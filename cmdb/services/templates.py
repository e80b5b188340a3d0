"""
Built-in schema templates

Templates are ordinary schema definitions. Cloning one produces a TypeSchema
that goes through the same definition checks as any hand-written schema.
"""
from typing import Dict, List, Optional

from ..validation import AttributeDefinition, TypeSchema


def _attr(name, type_, required=False, description="", default=None, validation=None) -> AttributeDefinition:
    return AttributeDefinition(
        name=name,
        type=type_,
        required=required,
        description=description,
        default=default,
        validation=validation,
    )


_ENVIRONMENTS = ["development", "staging", "production"]

CI_TYPE_TEMPLATES: Dict[str, TypeSchema] = {
    "server": TypeSchema(
        name="server",
        description="Physical or virtual server",
        attributes=[
            _attr("ip_address", "string", True, "Primary IP address", validation={"format": "ipv4"}),
            _attr("cpu_cores", "number", True, "Number of CPU cores", validation={"min": 1}),
            _attr("memory_gb", "number", True, "Memory in GB", validation={"min": 1}),
            _attr("os_version", "string", description="Operating system version"),
            _attr("hostname", "string", description="Server hostname"),
            _attr("environment", "string", description="Deployment environment", validation={"enum": _ENVIRONMENTS}),
        ],
    ),
    "application": TypeSchema(
        name="application",
        description="Software application",
        attributes=[
            _attr("version", "string", True, "Application version"),
            _attr("framework", "string", description="Application framework"),
            _attr("dependencies", "array", description="List of dependencies"),
            _attr("environment", "string", True, "Deployment environment", validation={"enum": _ENVIRONMENTS}),
            _attr("language", "string", description="Programming language"),
            _attr("port", "number", description="Application port", validation={"min": 1, "max": 65535}),
        ],
    ),
    "database": TypeSchema(
        name="database",
        description="Database instance",
        attributes=[
            _attr(
                "engine", "string", True, "Database engine",
                validation={"enum": ["postgresql", "mysql", "mongodb", "redis", "oracle"]},
            ),
            _attr("version", "string", True, "Database version"),
            _attr("size_gb", "number", description="Database size in GB"),
            _attr("tables_count", "number", description="Number of tables"),
            _attr("connection_string", "string", description="Connection string"),
        ],
    ),
    "network_device": TypeSchema(
        name="network_device",
        description="Network infrastructure device",
        attributes=[
            _attr(
                "device_type", "string", True, "Type of network device",
                validation={"enum": ["router", "switch", "firewall", "access_point"]},
            ),
            _attr("management_ip", "string", True, "Management IP address", validation={"format": "ipv4"}),
            _attr("ports_count", "number", description="Number of ports"),
            _attr("vlan", "string", description="VLAN configuration"),
            _attr("model", "string", description="Device model"),
        ],
    ),
}

RELATIONSHIP_TYPE_TEMPLATES: Dict[str, TypeSchema] = {
    "depends_on": TypeSchema(
        name="depends_on",
        description="Source depends on target",
        attributes=[
            _attr("dependency_type", "string", description="Type of dependency"),
            _attr("is_critical", "boolean", description="Whether this is a critical dependency"),
        ],
    ),
    "hosts": TypeSchema(
        name="hosts",
        description="Source hosts target",
        attributes=[
            _attr("virtualization_type", "string", description="Type of virtualization"),
            _attr("resource_allocation", "object", description="Resource allocation details"),
        ],
    ),
    "connected_to": TypeSchema(
        name="connected_to",
        description="Source is connected to target",
        attributes=[
            _attr("connection_type", "string", description="Type of connection"),
            _attr("bandwidth", "string", description="Connection bandwidth"),
            _attr("port", "string", description="Connection port"),
        ],
    ),
    "runs_on": TypeSchema(
        name="runs_on",
        description="Source runs on target",
        attributes=[
            _attr("runtime_environment", "string", description="Runtime environment"),
            _attr("configuration", "object", description="Runtime configuration"),
        ],
    ),
}


def list_templates(catalog: Dict[str, TypeSchema]) -> List[TypeSchema]:
    return list(catalog.values())


def clone_template(catalog: Dict[str, TypeSchema], name: str) -> Optional[TypeSchema]:
    """A fresh, unsaved copy of the named template, or None if unknown"""
    template = catalog.get(name)
    if template is None:
        return None
    return template.model_copy(deep=True)
