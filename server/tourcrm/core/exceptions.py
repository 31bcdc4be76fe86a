"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

from typing import Any, Dict, Optional
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import uuid
from datetime import date, datetime

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://tourcrm.example/problems"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Exception for request validation and business rule errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
        code: Optional[str] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors
        if code:
            extensions["code"] = code

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for authorization errors."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_permissions: Optional[list] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if required_permissions:
            extensions["required_permissions"] = required_permissions

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
        code: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource
        if code:
            extensions["code"] = code

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        extensions = {
            "error_id": error_id,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/internal-server-error",
            instance=instance,
            extensions=extensions,
        )


# Business rule exceptions

class RateOverlapError(ConflictError):
    """Exception when a seasonal rate intersects an existing active rate."""

    def __init__(
        self,
        existing_id: str,
        season_from: date,
        season_to: date,
        board_type: Optional[str] = None,
    ):
        detail = (
            f"Rate season overlaps with existing rate "
            f"(ID: {existing_id}, {season_from.isoformat()} - {season_to.isoformat()})"
        )
        if board_type:
            detail += f" for board type {board_type}"

        conflicting = {
            "id": existing_id,
            "season_from": season_from.isoformat(),
            "season_to": season_to.isoformat(),
        }
        if board_type:
            conflicting["board_type"] = board_type

        super().__init__(
            detail=detail,
            conflicting_resource=conflicting,
            code="RATE_OVERLAP",
        )


class InvalidStateTransitionError(ValidationError):
    """Exception when a workflow transition is not allowed from the current state."""

    def __init__(self, detail: str, current_status: str, action: str):
        super().__init__(
            detail=detail,
            errors={"current_status": current_status, "action": action},
            code="INVALID_STATE_TRANSITION",
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/query validation failures as Problem Details with violations."""
    violations = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ()))
        violations.append({"path": path, "message": error.get("msg", "Invalid value")})

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE_URI}/request-validation",
            "title": "Request Validation Failed",
            "status": 422,
            "detail": "One or more request fields are invalid",
            "instance": request.url.path,
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error = InternalServerError(instance=str(request.url))

    logger.error(
        "Unhandled exception",
        extra={"error_id": error.problem_details["error_id"], "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=error.problem_details,
        media_type="application/problem+json",
    )
