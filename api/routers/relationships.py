"""
Relationship API Router

Typed, directed edges between configuration items. Attribute payloads are
validated against the active relationship-type schema named by ``type``.
"""
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from cmdb.services import RelationshipService
from cmdb.validation import ValidationError
from api.dependencies import get_current_user, get_relationship_service
from api.exceptions import ErrorResponse

router = APIRouter(prefix="/api/v1/relationships", tags=["relationships"])


# Pydantic Schemas

class RelationshipCreate(BaseModel):
    """Schema for creating a relationship"""
    source_ci_id: str = Field(..., min_length=1)
    target_ci_id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, max_length=100, description="Name of an active relationship-type schema")
    description: Optional[str] = None
    attributes: Any = Field(None, description="Attribute payload, an object or JSON text")


class RelationshipUpdate(BaseModel):
    """Schema for updating a relationship; omitted fields keep their value"""
    type: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    attributes: Any = None
    is_active: Optional[bool] = None


class RelationshipResponse(BaseModel):
    """Schema for relationship response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    source_ci_id: str
    target_ci_id: str
    type: str
    description: Optional[str] = None
    attributes: dict
    is_active: bool
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


class RelationshipWriteResponse(RelationshipResponse):
    warnings: List[ValidationError] = Field(default_factory=list)


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed or integrity conflict"},
    404: {"model": ErrorResponse, "description": "CI, relationship or schema not found"},
}


def _write_response(relationship, result) -> RelationshipWriteResponse:
    return RelationshipWriteResponse(
        **RelationshipResponse.model_validate(relationship).model_dump(),
        warnings=result.warnings
    )


# ============================================================================
# API Endpoints
# ============================================================================

@router.post("", response_model=RelationshipWriteResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def create_relationship(
    body: RelationshipCreate,
    service: RelationshipService = Depends(get_relationship_service),
    user: Optional[str] = Depends(get_current_user)
):
    """
    Create a relationship

    Both CIs must exist and differ. A relationship whose exact reverse (same
    type, opposite direction) is already active is rejected.
    """
    relationship, result = service.create(body.model_dump(), user=user)
    return _write_response(relationship, result)


@router.get("/{relationship_id}", response_model=RelationshipResponse, responses={404: ERROR_RESPONSES[404]})
def get_relationship(relationship_id: str, service: RelationshipService = Depends(get_relationship_service)):
    return RelationshipResponse.model_validate(service.get(relationship_id))


@router.put("/{relationship_id}", response_model=RelationshipWriteResponse, responses=ERROR_RESPONSES)
def update_relationship(
    relationship_id: str,
    body: RelationshipUpdate,
    service: RelationshipService = Depends(get_relationship_service),
    user: Optional[str] = Depends(get_current_user)
):
    relationship, result = service.update(relationship_id, body.model_dump(exclude_unset=True), user=user)
    return _write_response(relationship, result)


@router.delete("/{relationship_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: ERROR_RESPONSES[404]})
def delete_relationship(
    relationship_id: str,
    service: RelationshipService = Depends(get_relationship_service),
    user: Optional[str] = Depends(get_current_user)
):
    service.delete(relationship_id, user=user)
