"""
Error Handler Middleware - Global exception handling for the API.

The exception classes in this module are raised by services and agents
as well as by routes; the handlers turn them into consistent JSON errors.
"""

import logging
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chimera.core.config import get_settings

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidRepositoryURLError(AppException):
    """Raised when a URL does not point at a GitHub repository."""

    def __init__(self, repo_url: str):
        super().__init__(
            message="Invalid GitHub repository URL. Please use the format https://github.com/owner/repo",
            error_code="INVALID_REPO_URL",
            status_code=400,
            details={"repo_url": repo_url}
        )


class RepositoryNotFoundError(AppException):
    """Raised when GitHub reports the repository as missing."""

    def __init__(self, full_name: str):
        super().__init__(
            message=f"Repository {full_name} not found.",
            error_code="REPO_NOT_FOUND",
            status_code=404,
            details={"repository": full_name}
        )


class GitHubAPIError(AppException):
    """Raised when the GitHub API returns an unexpected error."""

    def __init__(self, message: str, upstream_status: int = None):
        super().__init__(
            message=f"GitHub API error: {message}",
            error_code="GITHUB_API_ERROR",
            status_code=502,
            details={"upstream_status": upstream_status} if upstream_status else {}
        )


class FlowError(AppException):
    """Raised when an LLM flow cannot produce a usable result."""

    def __init__(self, message: str, flow: str = None):
        super().__init__(
            message=message,
            error_code="FLOW_ERROR",
            status_code=500,
            details={"flow": flow} if flow else {}
        )


class LLMNotConfiguredError(AppException):
    """Raised when an LLM call is attempted without credentials."""

    def __init__(self):
        super().__init__(
            message="LLM is not configured. Set GEMINI_API_KEY.",
            error_code="LLM_NOT_CONFIGURED",
            status_code=503
        )


class _NotFoundError(AppException):
    resource = "Resource"
    code = "NOT_FOUND"

    def __init__(self, resource_id: str):
        super().__init__(
            message=f"{self.resource} {resource_id} not found",
            error_code=self.code,
            status_code=404,
            details={"id": resource_id}
        )


class AgentNotFoundError(_NotFoundError):
    resource = "Agent"
    code = "AGENT_NOT_FOUND"


class TaskNotFoundError(_NotFoundError):
    resource = "Task"
    code = "TASK_NOT_FOUND"


class TemplateNotFoundError(_NotFoundError):
    resource = "Template"
    code = "TEMPLATE_NOT_FOUND"


class InstallationNotFoundError(_NotFoundError):
    resource = "Installation"
    code = "INSTALLATION_NOT_FOUND"


class AnalysisNotFoundError(_NotFoundError):
    resource = "Analysis"
    code = "ANALYSIS_NOT_FOUND"


class InvalidStateError(AppException):
    """Raised when an operation is not allowed in the current state."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="INVALID_STATE",
            status_code=409
        )


def create_error_response(
    message: str,
    error_code: str = "INTERNAL_ERROR",
    status_code: int = 500,
    details: dict = None
) -> JSONResponse:
    """Create a standardized error response."""
    settings = get_settings()

    content = {
        "success": False,
        "error": message,
        "error_code": error_code,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    # Include details in debug mode
    if details and settings.debug:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


async def app_exception_handler(
    request: Request,
    exc: AppException
) -> JSONResponse:
    """Handle application-specific exceptions."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return create_error_response(
        message=exc.message,
        error_code=exc.error_code,
        status_code=exc.status_code,
        details=exc.details
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions."""
    return create_error_response(
        message=str(exc.detail),
        error_code="HTTP_ERROR",
        status_code=exc.status_code
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        loc = " -> ".join(str(l) for l in error["loc"])
        errors.append(f"{loc}: {error['msg']}")

    return create_error_response(
        message="Validation error",
        error_code="VALIDATION_ERROR",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors}
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    settings = get_settings()

    logger.exception("Unexpected error on %s %s", request.method, request.url.path)

    details = None
    if settings.debug:
        details = {
            "exception_type": type(exc).__name__,
            "message": str(exc)
        }

    return create_error_response(
        message="An unexpected error occurred",
        error_code="INTERNAL_ERROR",
        status_code=500,
        details=details
    )
