"""
API Middleware - Request/response processing middleware.
"""

from chimera.api.middleware.error_handler import (
    AppException,
    InvalidRepositoryURLError,
    RepositoryNotFoundError,
    GitHubAPIError,
    FlowError,
    LLMNotConfiguredError,
    AgentNotFoundError,
    TaskNotFoundError,
    TemplateNotFoundError,
    InstallationNotFoundError,
    AnalysisNotFoundError,
    InvalidStateError,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

__all__ = [
    "AppException",
    "InvalidRepositoryURLError",
    "RepositoryNotFoundError",
    "GitHubAPIError",
    "FlowError",
    "LLMNotConfiguredError",
    "AgentNotFoundError",
    "TaskNotFoundError",
    "TemplateNotFoundError",
    "InstallationNotFoundError",
    "AnalysisNotFoundError",
    "InvalidStateError",
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
]
