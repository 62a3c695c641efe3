"""
Dependencies - Dependency injection for services and components.

Provides lazily created singleton instances of services. Routes depend
on these functions, so tests can replace any of them through
`app.dependency_overrides`.
"""

from typing import Dict

from fastapi import Depends
from sqlalchemy.orm import Session

from chimera.agents.base import BaseAgent
from chimera.agents.app_ideation import AppIdeationAgent
from chimera.agents.conversation import ConversationAgent
from chimera.agents.framework_design import FrameworkDesignAgent
from chimera.agents.readme import ReadmeEnhancementAgent, ReadmeQnaAgent
from chimera.agents.repo_analysis import RepoAnalysisAgent
from chimera.agents.video_generation import VideoGenerationAgent
from chimera.agents.web_task import WebTaskAgent
from chimera.core.config import get_settings
from chimera.core.database import get_db, get_session_factory
from chimera.models.schemas import FlowName
from chimera.services.analysis_service import AnalysisService
from chimera.services.github_client import GitHubClient
from chimera.services.llm import GeminiClient
from chimera.services.marketplace import MarketplaceService
from chimera.services.orchestrator import AgentOrchestrator
from chimera.services.repo_service import RepoService, RepoServiceConfig


# Singleton instances
_github_client = None
_repo_service = None
_llm_client = None
_flow_agents = None
_analysis_service = None
_orchestrator = None


def get_github_client() -> GitHubClient:
    """Get GitHub REST client instance."""
    global _github_client
    if _github_client is None:
        settings = get_settings()
        _github_client = GitHubClient(
            token=settings.github_token,
            base_url=settings.github_api_url,
            timeout=settings.github_timeout_seconds,
        )
    return _github_client


def get_repo_service() -> RepoService:
    """Get repository service instance."""
    global _repo_service
    if _repo_service is None:
        settings = get_settings()
        config = RepoServiceConfig(cache_ttl_hours=settings.repo_cache_ttl_hours)
        _repo_service = RepoService(github=get_github_client(), config=config)
    return _repo_service


def get_llm_client() -> GeminiClient:
    """Get LLM client instance (the SDK client itself is created on first use)."""
    global _llm_client
    if _llm_client is None:
        settings = get_settings()
        _llm_client = GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.llm_model,
            video_model=settings.video_model,
            video_poll_interval=settings.video_poll_interval_seconds,
            video_max_polls=settings.video_max_polls,
        )
    return _llm_client


def get_flow_agents() -> Dict[str, BaseAgent]:
    """Get every flow agent keyed by flow name."""
    global _flow_agents
    if _flow_agents is None:
        llm = get_llm_client()
        settings = get_settings()
        _flow_agents = {
            FlowName.REPO_ANALYSIS.value: RepoAnalysisAgent(llm),
            FlowName.README_ENHANCEMENT.value: ReadmeEnhancementAgent(llm),
            FlowName.README_QNA.value: ReadmeQnaAgent(llm),
            FlowName.APP_IDEATION.value: AppIdeationAgent(llm),
            "framework_design": FrameworkDesignAgent(llm),
            "conversation": ConversationAgent(llm),
            "video_generation": VideoGenerationAgent(llm),
            "web_task": WebTaskAgent(llm, max_chars=settings.web_fetch_max_chars),
        }
    return _flow_agents


def get_analysis_service() -> AnalysisService:
    """Get analysis service instance."""
    global _analysis_service
    if _analysis_service is None:
        agents = get_flow_agents()
        flows = {flow: agents[flow.value] for flow in FlowName}
        _analysis_service = AnalysisService(repo_service=get_repo_service(), flows=flows)
    return _analysis_service


def get_orchestrator() -> AgentOrchestrator:
    """Get agent orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AgentOrchestrator(get_session_factory())
    return _orchestrator


def get_marketplace_service(db: Session = Depends(get_db)) -> MarketplaceService:
    """Marketplace service bound to the request's session."""
    return MarketplaceService(db)


async def close_clients() -> None:
    """Release network clients on shutdown."""
    global _github_client, _repo_service, _analysis_service
    if _github_client is not None:
        await _github_client.aclose()
    _github_client = None
    _repo_service = None
    _analysis_service = None
