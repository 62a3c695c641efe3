"""
API Request Models - Pydantic models for request validation.
"""

from typing import Optional, List, Dict, Any, Literal
from pydantic import BaseModel, Field, field_validator
import re


_GITHUB_REPO_RE = re.compile(r"^https?://(www\.)?github\.com/[\w\-\.]+/[\w\-\.]+")

Priority = Literal["low", "medium", "high", "critical"]
AgentStatus = Literal["idle", "running", "paused", "error", "stopped"]


class RepoRequest(BaseModel):
    """
    Base for requests scoped to a GitHub repository.

    Example:
        {
            "repo_url": "https://github.com/vercel/next.js"
        }
    """
    repo_url: str = Field(
        ...,
        description="GitHub repository URL",
        examples=["https://github.com/owner/repo"]
    )
    force_refresh: bool = Field(
        default=False,
        description="Bypass the fetched-repository cache"
    )

    @field_validator("repo_url")
    @classmethod
    def validate_github_url(cls, v: str) -> str:
        """Validate that URL is a GitHub repository URL."""
        v = v.strip()
        if not _GITHUB_REPO_RE.match(v):
            raise ValueError("Invalid GitHub repository URL")
        return v


class AnalyzeRepoRequest(RepoRequest):
    pass


class EnhanceReadmeRequest(RepoRequest):
    pass


class ReadmeQuestionRequest(RepoRequest):
    """
    Ask a question answered from the repository README.

    Example:
        {
            "repo_url": "https://github.com/owner/repo",
            "question": "How do I install this?"
        }
    """
    question: str = Field(..., min_length=2, max_length=1000)


class AppIdeasRequest(RepoRequest):
    num_ideas: int = Field(default=3, ge=1, le=5)


class FrameworkDesignRequest(BaseModel):
    goal: str = Field(..., min_length=5, max_length=4000)


class ConversationRequest(BaseModel):
    topic: str = Field(..., min_length=5, max_length=1000)
    num_turns: int = Field(default=2, ge=1, le=5)


class VideoRequest(BaseModel):
    prompt: str = Field(..., min_length=3, max_length=2000)


class WebTaskRequest(BaseModel):
    url: str = Field(..., description="Webpage to analyze")
    task: str = Field(..., min_length=3, max_length=2000)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not re.match(r"^https?://", v):
            raise ValueError("URL must start with http:// or https://")
        return v


class GoalRequest(BaseModel):
    """
    Free-form goal handed to the master agent.

    Example:
        {
            "goal": "Design a framework for code review bots and discuss it",
            "max_steps": 8
        }
    """
    goal: str = Field(..., min_length=5, max_length=4000)
    max_steps: Optional[int] = Field(default=None, ge=1, le=20)


# =============================================================================
# ORCHESTRATOR
# =============================================================================


class RegisterAgentRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field(..., min_length=1, max_length=50)
    capabilities: List[str] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)
    description: str = ""


class AgentStatusRequest(BaseModel):
    status: AgentStatus


class AgentMemoryRequest(BaseModel):
    memory: Dict[str, Any]


class QueueTaskRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=50)
    description: str = ""
    priority: Priority = "medium"
    dependencies: List[str] = Field(default_factory=list)
    input_data: Dict[str, Any] = Field(default_factory=dict)


class AssignTaskRequest(BaseModel):
    agent_id: str


class CompleteTaskRequest(BaseModel):
    output_data: Optional[Dict[str, Any]] = None


class FailTaskRequest(BaseModel):
    error_message: str = Field(..., min_length=1)


# =============================================================================
# MARKETPLACE
# =============================================================================


class CreateTemplateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    version: str = "1.0.0"
    author: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    capabilities: List[str] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)
    is_verified: bool = False
    is_featured: bool = False
    license: str = "MIT"
    repository_url: Optional[str] = None


class UpdateTemplateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    version: Optional[str] = None
    tags: Optional[List[str]] = None
    capabilities: Optional[List[str]] = None
    configuration: Optional[Dict[str, Any]] = None
    is_verified: Optional[bool] = None
    is_featured: Optional[bool] = None
    license: Optional[str] = None
    repository_url: Optional[str] = None


class InstallTemplateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    agent_id: str = Field(..., min_length=1)
    configuration_overrides: Optional[Dict[str, Any]] = None


class RateTemplateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = None
