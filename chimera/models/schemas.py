"""
Core Domain Schemas - Shared data models used across the application.

GitHub payloads, the repository tree, and the input/output contracts
of every agent flow.
"""

from typing import Optional, List, Dict, Any, Literal
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


# =============================================================================
# GITHUB
# =============================================================================


class GitHubOwner(BaseModel):
    login: str
    avatar_url: Optional[str] = None


class GitHubRepo(BaseModel):
    """Subset of the GitHub repository payload the service relies on."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    html_url: str
    stargazers_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    language: Optional[str] = None
    updated_at: Optional[str] = None
    default_branch: str = "main"
    owner: GitHubOwner


class GitHubFile(BaseModel):
    """One entry of a recursive git tree listing."""
    model_config = ConfigDict(extra="ignore")

    path: str
    type: Literal["tree", "blob", "commit"] = "blob"
    mode: Optional[str] = None
    sha: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None


class TreeNode(BaseModel):
    """A node of the nested repository tree."""
    name: str
    path: str
    type: Literal["tree", "blob", "commit"]
    children: List["TreeNode"] = Field(default_factory=list)


class RepoBundle(BaseModel):
    """Everything fetched for one repository."""
    repo: GitHubRepo
    tree: List[TreeNode]
    raw_tree: List[GitHubFile]
    readme: str
    package_json: Optional[Dict[str, Any]] = None

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.raw_tree if f.path]

    @property
    def description(self) -> str:
        return self.repo.description or "No description provided."


# =============================================================================
# FLOWS
# =============================================================================


class FlowName(str, Enum):
    """Repository-scoped flows whose runs are persisted."""
    REPO_ANALYSIS = "repo_analysis"
    README_ENHANCEMENT = "readme_enhancement"
    README_QNA = "readme_qna"
    APP_IDEATION = "app_ideation"


class RepoAnalysisInput(BaseModel):
    file_paths: List[str] = Field(..., description="All file paths in the repository")
    repo_description: str = Field(..., description="The repository description")


class FrameworkSuggestion(BaseModel):
    name: str = Field(..., description="Name of the suggested AI agent framework")
    reason: str = Field(..., description="Why the framework fits this repository")


class RepoAnalysisOutput(BaseModel):
    technologies: List[str] = Field(default_factory=list)
    summary: str
    potential_bugs: List[str] = Field(default_factory=list)
    security_vulnerabilities: List[str] = Field(default_factory=list)
    architectural_limitations: List[str] = Field(default_factory=list)
    framework_suggestions: List[FrameworkSuggestion] = Field(default_factory=list)


class EnhanceReadmeInput(BaseModel):
    repo_description: str
    readme_content: str
    repo_url: str


class EnhanceReadmeOutput(BaseModel):
    enhanced_readme: str


class ReadmeQnaInput(BaseModel):
    readme_content: str
    question: str


class ReadmeQnaOutput(BaseModel):
    answer: str


class DesignFrameworkInput(BaseModel):
    goal: str = Field(..., min_length=1)


class DesignFrameworkOutput(BaseModel):
    architecture: str


class ConversationInput(BaseModel):
    topic: str = Field(..., min_length=5, description="Topic for the agents to discuss")
    num_turns: int = Field(..., ge=1, le=5, description="Turns per agent")


class ConversationTurn(BaseModel):
    agent: Literal["Pragmatist", "Creative"]
    text: str


class ConversationOutput(BaseModel):
    conversation: List[ConversationTurn]


class GenerateVideoInput(BaseModel):
    prompt: str = Field(..., min_length=1)


class GenerateVideoOutput(BaseModel):
    video_url: str = Field(..., description="data: URI of the generated video")


class WebTaskInput(BaseModel):
    url: str
    task: str


class WebTaskOutput(BaseModel):
    result: str


class AppIdeationInput(BaseModel):
    repo_name: str
    repo_description: str
    file_paths: List[str] = Field(default_factory=list)
    num_ideas: int = Field(3, ge=1, le=5)


class IdeaAgent(BaseModel):
    name: str
    description: str


class AppIdea(BaseModel):
    name: str
    description: str
    tech_stack: List[str] = Field(default_factory=list)
    agents: List[IdeaAgent] = Field(default_factory=list)
    todo_list: List[str] = Field(default_factory=list)


class AppIdeationOutput(BaseModel):
    ideas: List[AppIdea]
