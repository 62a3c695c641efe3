"""
Analysis Service - Runs repository-scoped flows and records every run.

Each run stores a repository_analyses row with a compact copy of its
input, the flow output (or the error) and a status. Failures are
recorded first and then re-raised to the caller.
"""

import logging
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import Session

from chimera.agents.base import BaseAgent
from chimera.api.middleware.error_handler import AnalysisNotFoundError
from chimera.models.db import Repository, RepositoryAnalysis
from chimera.models.schemas import (
    AppIdeationInput,
    EnhanceReadmeInput,
    FlowName,
    ReadmeQnaInput,
    RepoAnalysisInput,
    RepoBundle,
)
from chimera.services.github_client import parse_github_url
from chimera.services.repo_service import RepoService, upsert_repository

logger = logging.getLogger(__name__)

# Bulky inputs are summarised rather than stored verbatim
_BULKY_FIELDS = ("file_paths", "readme_content")


class AnalysisService:
    """
    Runs flows against fetched repositories.

    Usage:
        service = AnalysisService(repo_service, flows)
        record, output = await service.run(session, FlowName.REPO_ANALYSIS, url)
    """

    def __init__(self, repo_service: RepoService, flows: Dict[FlowName, BaseAgent]):
        self.repo_service = repo_service
        self.flows = flows

    async def run(
        self,
        session: Session,
        flow: FlowName,
        repo_url: str,
        force_refresh: bool = False,
        **params: Any,
    ) -> Tuple[RepositoryAnalysis, BaseModel]:
        """
        Fetch the repository, run the flow and persist the run.

        Args:
            session: Database session
            flow: Which flow to run
            repo_url: GitHub repository URL
            force_refresh: Bypass the repository cache
            **params: Flow-specific parameters (question, num_ideas)

        Returns:
            (stored analysis row, flow output)
        """
        bundle = await self.repo_service.fetch(repo_url, force=force_refresh)
        repository = upsert_repository(session, bundle)
        flow_input = build_flow_input(flow, bundle, params)

        record = RepositoryAnalysis(
            repository_id=repository.id,
            flow=flow.value,
            input=_summarise_input(flow_input),
            status="running",
        )
        session.add(record)
        session.commit()

        logger.info("Running %s for %s", flow.value, bundle.repo.full_name)
        try:
            output = await self.flows[flow].run(flow_input)
        except Exception as e:
            record.status = "failed"
            record.error = getattr(e, "message", None) or str(e)
            session.commit()
            logger.warning("%s failed for %s: %s", flow.value, bundle.repo.full_name, record.error)
            raise

        record.status = "completed"
        record.output = output.model_dump(mode="json")
        session.commit()
        return record, output

    def history(self, session: Session, repo_url: str) -> Tuple[str, List[RepositoryAnalysis]]:
        """Stored analyses for a repository, newest first."""
        info = parse_github_url(repo_url)
        repository = (
            session.query(Repository)
            .filter(Repository.github_url == info.url)
            .first()
        )
        if repository is None:
            return info.full_name, []
        analyses = (
            session.query(RepositoryAnalysis)
            .filter(RepositoryAnalysis.repository_id == repository.id)
            .order_by(RepositoryAnalysis.created_at.desc())
            .all()
        )
        return repository.full_name, analyses

    def get(self, session: Session, analysis_id: str) -> RepositoryAnalysis:
        record = session.get(RepositoryAnalysis, analysis_id)
        if record is None:
            raise AnalysisNotFoundError(analysis_id)
        return record


def build_flow_input(flow: FlowName, bundle: RepoBundle, params: Dict[str, Any]) -> BaseModel:
    """Build the typed flow input from a repository bundle."""
    if flow == FlowName.REPO_ANALYSIS:
        return RepoAnalysisInput(file_paths=bundle.file_paths, repo_description=bundle.description)
    if flow == FlowName.README_ENHANCEMENT:
        return EnhanceReadmeInput(
            repo_description=bundle.description,
            readme_content=bundle.readme,
            repo_url=bundle.repo.html_url,
        )
    if flow == FlowName.README_QNA:
        return ReadmeQnaInput(readme_content=bundle.readme, question=params["question"])
    if flow == FlowName.APP_IDEATION:
        return AppIdeationInput(
            repo_name=bundle.repo.full_name,
            repo_description=bundle.description,
            file_paths=bundle.file_paths,
            num_ideas=params.get("num_ideas", 3),
        )
    raise ValueError(f"Unknown flow: {flow}")


def _summarise_input(flow_input: BaseModel) -> Dict[str, Any]:
    data = flow_input.model_dump()
    for field in _BULKY_FIELDS:
        if field in data:
            value = data.pop(field)
            data[f"{field}_size"] = len(value)
    return data
