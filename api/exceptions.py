"""
API Exceptions and Error Response Models
Maps CMDB domain errors onto a consistent JSON error envelope
"""
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from cmdb.services.exceptions import (
    AttributeValidationFailed,
    CMDBError,
    EntityNotFound,
    InvalidRelationship,
    RelationshipIntegrityConflict,
    SchemaDefinitionInvalid,
    SchemaNameConflict,
    SchemaNotFound,
)
from cmdb.utils.logger import setup_logger
from cmdb.validation import ValidationError, ValidationResult

logger = setup_logger(__name__)


# ============================================
# ERROR RESPONSE MODELS
# ============================================

class ErrorResponse(BaseModel):
    """Standardized error response"""
    success: bool = False
    error: str
    message: Optional[str] = None
    errors: Optional[List[ValidationError]] = None
    warnings: Optional[List[ValidationError]] = None
    request_id: Optional[str] = None


# ============================================
# EXCEPTION MAPPING
# ============================================

ERROR_STATUS = {
    SchemaNotFound: status.HTTP_404_NOT_FOUND,
    EntityNotFound: status.HTTP_404_NOT_FOUND,
    SchemaDefinitionInvalid: status.HTTP_400_BAD_REQUEST,
    AttributeValidationFailed: status.HTTP_400_BAD_REQUEST,
    RelationshipIntegrityConflict: status.HTTP_400_BAD_REQUEST,
    InvalidRelationship: status.HTTP_400_BAD_REQUEST,
    SchemaNameConflict: status.HTTP_409_CONFLICT,
}


def status_for(exc: CMDBError) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in ERROR_STATUS:
            return ERROR_STATUS[exc_type]
    return status.HTTP_400_BAD_REQUEST


def _dump_issues(issues: List[ValidationError]) -> List[Dict[str, Any]]:
    return [issue.model_dump(mode="json") for issue in issues]


def create_error_response(
    error_type: str,
    message: str,
    status_code: int = 400,
    result: Optional[ValidationResult] = None,
    request_id: Optional[str] = None
) -> JSONResponse:
    """
    Create a standardized error response

    Args:
        error_type: Error code/type
        message: Human-readable error message
        status_code: HTTP status code
        result: Validation result whose errors and warnings go in the body
        request_id: Request id for correlating with logs

    Returns:
        JSONResponse with standardized error format
    """
    response_data: Dict[str, Any] = {
        "success": False,
        "error": error_type,
        "message": message,
    }

    if result is not None:
        response_data["errors"] = _dump_issues(result.errors)
        response_data["warnings"] = _dump_issues(result.warnings)

    if request_id:
        response_data["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=response_data)


# ============================================
# EXCEPTION HANDLERS
# ============================================

async def cmdb_error_handler(request: Request, exc: CMDBError) -> JSONResponse:
    """Translate a domain error into its HTTP status and envelope"""
    status_code = status_for(exc)
    request_id = getattr(request.state, 'request_id', None)

    if status_code >= 500:
        logger.error(f"[{request_id}] {exc.error_code} in {request.url.path}: {exc.message}")
    else:
        logger.info(f"[{request_id}] {exc.error_code} in {request.url.path}: {exc.message}")

    return create_error_response(
        error_type=exc.error_code,
        message=exc.message,
        status_code=status_code,
        result=getattr(exc, 'result', None),
        request_id=request_id
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Format framework HTTP errors (unknown routes, bad methods) like everything else"""
    response = create_error_response(
        error_type="http_error",
        message=str(exc.detail),
        status_code=exc.status_code,
        request_id=getattr(request.state, 'request_id', None)
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query parameters"""
    result = ValidationResult()
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        result.add_error(ValidationError(
            field=".".join(location) or "request",
            value=error.get("input"),
            message=error.get("msg", "Invalid value"),
            rule=error.get("type"),
        ))

    return create_error_response(
        error_type="request_validation_error",
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        result=result,
        request_id=getattr(request.state, 'request_id', None)
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CMDBError, cmdb_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
