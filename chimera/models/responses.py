"""
API Response Models - Pydantic models for API responses.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone

from chimera.models.schemas import GitHubFile, GitHubRepo, TreeNode


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    environment: str
    timestamp: datetime = Field(default_factory=_now)


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Example:
        {
            "success": false,
            "error": "Repository owner/repo not found.",
            "error_code": "REPO_NOT_FOUND"
        }
    """
    success: bool = False
    error: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_now)


class RepoResponse(BaseModel):
    """Repository metadata, nested tree, raw listing, README and manifest."""
    repo: GitHubRepo
    tree: List[TreeNode]
    raw_tree: List[GitHubFile]
    readme: str
    package_json: Optional[Dict[str, Any]] = None


class TreeResponse(BaseModel):
    full_name: str
    tree: List[TreeNode] = Field(default_factory=list)
    paths: Optional[List[str]] = None


class FlowResponse(BaseModel):
    """
    Result of a persisted repository flow.

    Example:
        {
            "success": true,
            "analysis_id": "4f7c...",
            "flow": "repo_analysis",
            "result": {...}
        }
    """
    success: bool = True
    analysis_id: str
    flow: str
    result: Dict[str, Any]


class AnalysisRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    flow: str
    status: str
    input: Optional[Dict[str, Any]] = None
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None


class AnalysisHistoryResponse(BaseModel):
    full_name: str
    analyses: List[AnalysisRecord] = Field(default_factory=list)


class GoalResponse(BaseModel):
    success: bool
    result: str
    steps_taken: int
    memory: List[str] = Field(default_factory=list)


class AgentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    status: str
    capabilities: List[str] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)
    memory: Dict[str, Any] = Field(default_factory=dict)
    description: Optional[str] = None
    performance_metrics: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_activity: Optional[datetime] = None


class TaskRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    type: str
    status: str
    priority: str
    assigned_agent_id: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)
    input_data: Dict[str, Any] = Field(default_factory=dict)
    output_data: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    actual_duration_ms: Optional[int] = None


class TemplateRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    category: str
    version: str
    author: str
    tags: List[str] = Field(default_factory=list)
    capabilities: List[str] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)
    rating: float = 0.0
    rating_count: int = 0
    download_count: int = 0
    is_verified: bool = False
    is_featured: bool = False
    license: Optional[str] = None
    repository_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TemplateListResponse(BaseModel):
    templates: List[TemplateRecord]
    total: int


class InstallationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_id: str
    user_id: str
    agent_id: str
    configuration_overrides: Optional[Dict[str, Any]] = None
    status: str
    installed_at: Optional[datetime] = None


class RatingRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_id: str
    user_id: str
    rating: int
    review: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryCount(BaseModel):
    name: str
    count: int


class MarketplaceStatsResponse(BaseModel):
    total_templates: int
    total_downloads: int
    featured_templates: int
    verified_templates: int
    categories: List[CategoryCount] = Field(default_factory=list)
    top_rated: List[TemplateRecord] = Field(default_factory=list)
    most_downloaded: List[TemplateRecord] = Field(default_factory=list)
    recent_templates: List[TemplateRecord] = Field(default_factory=list)


class AnalyticsOverviewResponse(BaseModel):
    agents_by_status: Dict[str, int] = Field(default_factory=dict)
    tasks_by_status: Dict[str, int] = Field(default_factory=dict)
    task_success_rate: float = 0.0
    average_task_duration_ms: Optional[float] = None
    analyses_by_flow: Dict[str, int] = Field(default_factory=dict)
    repository_count: int = 0
