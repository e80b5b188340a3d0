"""
Configuration Item API Router

CRUD for configuration items. Attribute payloads are validated against the
active CI-type schema named by the item's ``type``.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from cmdb.services import CIService
from cmdb.utils.config import ConfigDefaults
from cmdb.utils.pagination import PaginatedResponse, PaginationParams
from cmdb.validation import ValidationError
from api.dependencies import get_ci_service, get_current_user
from api.exceptions import ErrorResponse
from api.routers.relationships import RelationshipResponse

router = APIRouter(prefix="/api/v1/cis", tags=["configuration-items"])

CIStatusValue = Literal["active", "inactive", "maintenance", "retired", "fix_required"]
CICriticalityValue = Literal["low", "medium", "high", "critical"]
SortField = Literal["name", "type", "status", "criticality", "owner", "location", "created_at", "updated_at"]


# Pydantic Schemas

class CICreate(BaseModel):
    """Schema for creating a configuration item"""
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100, description="Name of an active CI-type schema")
    description: Optional[str] = None
    status: CIStatusValue = "active"
    criticality: CICriticalityValue = "medium"
    owner: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    attributes: Any = Field(None, description="Attribute payload, an object or JSON text")
    tags: List[str] = Field(default_factory=list)
    install_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    last_scanned: Optional[datetime] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "web-01",
            "type": "server",
            "criticality": "high",
            "owner": "platform-team",
            "attributes": {"ip_address": "10.0.0.1", "cpu_cores": 4, "memory_gb": 16},
            "tags": ["web", "production"]
        }
    })


class CIUpdate(BaseModel):
    """Schema for updating a configuration item; omitted fields keep their value"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[CIStatusValue] = None
    criticality: Optional[CICriticalityValue] = None
    owner: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    attributes: Any = None
    tags: Optional[List[str]] = None
    install_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    last_scanned: Optional[datetime] = None


class CIResponse(BaseModel):
    """Schema for configuration item response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    description: Optional[str] = None
    status: str
    criticality: str
    owner: Optional[str] = None
    location: Optional[str] = None
    attributes: dict
    tags: List[str]
    install_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    last_scanned: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


class CIWriteResponse(CIResponse):
    """A written CI plus the non-blocking warnings its payload produced"""
    warnings: List[ValidationError] = Field(default_factory=list)


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Attribute validation failed"},
    404: {"model": ErrorResponse, "description": "CI or CI-type schema not found"},
}


def _write_response(ci, result) -> CIWriteResponse:
    return CIWriteResponse(**CIResponse.model_validate(ci).model_dump(), warnings=result.warnings)


# ============================================================================
# API Endpoints
# ============================================================================

@router.get("", response_model=PaginatedResponse[CIResponse])
def list_cis(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(ConfigDefaults.PAGE_SIZE_DEFAULT, ge=1, le=ConfigDefaults.PAGE_SIZE_MAX),
    search: Optional[str] = Query(None, description="Substring match over name, type, description, owner, location"),
    type: Optional[str] = None,
    status_filter: Optional[CIStatusValue] = Query(None, alias="status"),
    criticality: Optional[CICriticalityValue] = None,
    owner: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: Optional[SortField] = None,
    sort_order: Literal["asc", "desc"] = "desc",
    service: CIService = Depends(get_ci_service)
):
    """
    List configuration items

    Soft-deleted items are never returned. Without ``sort_by`` the newest
    items come first.
    """
    pagination = PaginationParams(page=page, page_size=page_size)
    items, total = service.list(
        pagination,
        search=search,
        filters={
            "type": type,
            "status": status_filter,
            "criticality": criticality,
            "owner": owner,
            "location": location,
        },
        sort_by=sort_by,
        sort_order=sort_order
    )
    return PaginatedResponse[CIResponse].create(
        items=[CIResponse.model_validate(ci) for ci in items],
        total_items=total,
        page=page,
        page_size=page_size
    )


@router.post("", response_model=CIWriteResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def create_ci(
    body: CICreate,
    service: CIService = Depends(get_ci_service),
    user: Optional[str] = Depends(get_current_user)
):
    """Create a configuration item"""
    ci, result = service.create(body.model_dump(), user=user)
    return _write_response(ci, result)


@router.get("/{ci_id}", response_model=CIResponse, responses={404: ERROR_RESPONSES[404]})
def get_ci(ci_id: str, service: CIService = Depends(get_ci_service)):
    return CIResponse.model_validate(service.get(ci_id))


@router.put("/{ci_id}", response_model=CIWriteResponse, responses=ERROR_RESPONSES)
def update_ci(
    ci_id: str,
    body: CIUpdate,
    service: CIService = Depends(get_ci_service),
    user: Optional[str] = Depends(get_current_user)
):
    """
    Update a configuration item

    Only fields present in the body change. The resulting attributes are
    validated again against the item's (possibly new) type.
    """
    ci, result = service.update(ci_id, body.model_dump(exclude_unset=True), user=user)
    return _write_response(ci, result)


@router.delete("/{ci_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: ERROR_RESPONSES[404]})
def delete_ci(
    ci_id: str,
    service: CIService = Depends(get_ci_service),
    user: Optional[str] = Depends(get_current_user)
):
    """Soft delete; the item disappears from reads and listings"""
    service.delete(ci_id, user=user)


@router.get("/{ci_id}/relationships", response_model=List[RelationshipResponse], responses={404: ERROR_RESPONSES[404]})
def list_ci_relationships(ci_id: str, service: CIService = Depends(get_ci_service)):
    """Active relationships where the item is source or target"""
    return [RelationshipResponse.model_validate(rel) for rel in service.relationships(ci_id)]
