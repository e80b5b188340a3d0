"""
Schema Management API Router

Administrators declare CI-type and relationship-type schemas here. Every
create and update runs the definition checks; a failing definition is
answered with the complete list of problems.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from cmdb.services import SchemaKind, SchemaService
from cmdb.services.templates import CI_TYPE_TEMPLATES, RELATIONSHIP_TYPE_TEMPLATES, list_templates
from cmdb.utils.config import ConfigDefaults
from cmdb.utils.pagination import PaginatedResponse, PaginationParams
from cmdb.validation import AttributeDefinition, SchemaValidator, TypeSchema, ValidationResult
from api.dependencies import get_current_user, get_schema_service, get_validator
from api.exceptions import ErrorResponse

router = APIRouter(prefix="/api/v1/schemas", tags=["schemas"])


# Pydantic Schemas

class SchemaCreate(BaseModel):
    """Schema for creating a type schema"""
    name: str = ""
    description: Optional[str] = None
    attributes: List[AttributeDefinition] = Field(default_factory=list)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "server",
            "description": "Physical or virtual server",
            "attributes": [
                {"name": "ip_address", "type": "string", "required": True, "validation": {"format": "ipv4"}},
                {"name": "cpu_cores", "type": "number", "required": True, "validation": {"min": 1}},
                {"name": "environment", "type": "string", "default": "production"}
            ]
        }
    })


class SchemaUpdate(BaseModel):
    """
    Schema for updating a type schema

    A non-empty ``attributes`` list replaces the stored list.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    attributes: Optional[List[AttributeDefinition]] = None


class TemplateClone(BaseModel):
    """Optional overrides when cloning a template"""
    name: Optional[str] = None
    description: Optional[str] = None


class ValidatePayloadRequest(BaseModel):
    """Dry-run request: a payload and the schema to judge it against"""
    model_config = ConfigDict(populate_by_name=True)

    schema_definition: TypeSchema = Field(..., alias="schema")
    attributes: Any = None


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Schema definition invalid"},
    404: {"model": ErrorResponse, "description": "Schema or template not found"},
    409: {"model": ErrorResponse, "description": "An active schema already has this name"},
}


def _dry_run(body: ValidatePayloadRequest, validator: SchemaValidator) -> ValidationResult:
    return validator.validate(body.attributes, body.schema_definition)


# ============================================================================
# Dry-run validation
# ============================================================================

@router.post("/validate/ci", response_model=ValidationResult)
def validate_ci_attributes(
    body: ValidatePayloadRequest,
    validator: SchemaValidator = Depends(get_validator)
):
    """
    Validate CI attributes against an inline schema without storing anything

    Always answers 200; the verdict is in ``is_valid``.
    """
    return _dry_run(body, validator)


@router.post("/validate/relationship", response_model=ValidationResult)
def validate_relationship_attributes(
    body: ValidatePayloadRequest,
    validator: SchemaValidator = Depends(get_validator)
):
    return _dry_run(body, validator)


# ============================================================================
# Templates
# ============================================================================

@router.get("/templates/ci", response_model=List[TypeSchema])
def list_ci_templates():
    """Built-in CI-type schema templates"""
    return list_templates(CI_TYPE_TEMPLATES)


@router.get("/templates/relationship", response_model=List[TypeSchema])
def list_relationship_templates():
    """Built-in relationship-type schema templates"""
    return list_templates(RELATIONSHIP_TYPE_TEMPLATES)


@router.post(
    "/templates/ci/{template_name}",
    response_model=TypeSchema,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES
)
def create_ci_schema_from_template(
    template_name: str,
    body: Optional[TemplateClone] = Body(None),
    service: SchemaService = Depends(get_schema_service),
    user: Optional[str] = Depends(get_current_user)
):
    overrides = body or TemplateClone()
    record = service.create_from_template(
        SchemaKind.CI_TYPE, template_name, name=overrides.name, description=overrides.description, user=user
    )
    return TypeSchema.model_validate(record)


@router.post(
    "/templates/relationship/{template_name}",
    response_model=TypeSchema,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES
)
def create_relationship_schema_from_template(
    template_name: str,
    body: Optional[TemplateClone] = Body(None),
    service: SchemaService = Depends(get_schema_service),
    user: Optional[str] = Depends(get_current_user)
):
    overrides = body or TemplateClone()
    record = service.create_from_template(
        SchemaKind.RELATIONSHIP_TYPE, template_name, name=overrides.name, description=overrides.description, user=user
    )
    return TypeSchema.model_validate(record)


# ============================================================================
# Stored schemas
# ============================================================================

@router.get("/{kind}", response_model=PaginatedResponse[TypeSchema])
def list_schemas(
    kind: SchemaKind,
    page: int = Query(1, ge=1),
    page_size: int = Query(ConfigDefaults.PAGE_SIZE_DEFAULT, ge=1, le=ConfigDefaults.PAGE_SIZE_MAX),
    include_inactive: bool = Query(False, description="Include retired schemas"),
    service: SchemaService = Depends(get_schema_service)
):
    """List schemas of one kind ordered by name"""
    records, total = service.list(
        kind, PaginationParams(page=page, page_size=page_size), include_inactive=include_inactive
    )
    return PaginatedResponse[TypeSchema].create(
        items=[TypeSchema.model_validate(record) for record in records],
        total_items=total,
        page=page,
        page_size=page_size
    )


@router.post("/{kind}", response_model=TypeSchema, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def create_schema(
    kind: SchemaKind,
    body: SchemaCreate,
    service: SchemaService = Depends(get_schema_service),
    user: Optional[str] = Depends(get_current_user)
):
    definition = TypeSchema(name=body.name, description=body.description, attributes=body.attributes)
    return TypeSchema.model_validate(service.create(kind, definition, user=user))


@router.get("/{kind}/{schema_id}", response_model=TypeSchema, responses={404: ERROR_RESPONSES[404]})
def get_schema(kind: SchemaKind, schema_id: str, service: SchemaService = Depends(get_schema_service)):
    return TypeSchema.model_validate(service.get(kind, schema_id))


@router.put("/{kind}/{schema_id}", response_model=TypeSchema, responses=ERROR_RESPONSES)
def update_schema(
    kind: SchemaKind,
    schema_id: str,
    body: SchemaUpdate,
    service: SchemaService = Depends(get_schema_service),
    user: Optional[str] = Depends(get_current_user)
):
    """Update a schema; the merged definition is checked before saving"""
    record = service.update(kind, schema_id, body.model_dump(exclude_unset=True), user=user)
    return TypeSchema.model_validate(record)


@router.delete("/{kind}/{schema_id}", response_model=TypeSchema, responses={404: ERROR_RESPONSES[404]})
def retire_schema(
    kind: SchemaKind,
    schema_id: str,
    service: SchemaService = Depends(get_schema_service),
    user: Optional[str] = Depends(get_current_user)
):
    """
    Retire a schema

    The row is kept with ``is_active`` false. Entities of this type stay in
    place, but new writes for the type are rejected until a schema with the
    same name is created again.
    """
    return TypeSchema.model_validate(service.retire(kind, schema_id, user=user))
