"""
Repository Endpoints - Fetch GitHub repositories and run repository flows.

Every flow run is recorded, so its result can be fetched again from
/repo/analyses.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from chimera.api.middleware.error_handler import AppException
from chimera.core.database import get_db
from chimera.core.dependencies import get_analysis_service, get_repo_service
from chimera.models.requests import (
    AnalyzeRepoRequest,
    AppIdeasRequest,
    EnhanceReadmeRequest,
    ReadmeQuestionRequest,
)
from chimera.models.responses import (
    AnalysisHistoryResponse,
    AnalysisRecord,
    ErrorResponse,
    FlowResponse,
    RepoResponse,
    TreeResponse,
)
from chimera.models.schemas import FlowName
from chimera.services.analysis_service import AnalysisService
from chimera.services.repo_service import RepoService, upsert_repository
from chimera.services.tree import flatten_tree


router = APIRouter(prefix="/repo", tags=["Repository"])


def _require_url(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise AppException(
            message="Repository URL is required",
            error_code="MISSING_URL",
            status_code=400,
        )
    return url.strip()


@router.get(
    "",
    response_model=RepoResponse,
    summary="Fetch Repository",
    description="Fetch metadata, file tree, README and package.json for a GitHub repository",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid URL"},
        404: {"model": ErrorResponse, "description": "Repository not found"},
        502: {"model": ErrorResponse, "description": "GitHub API error"},
    }
)
async def get_repo(
    url: Optional[str] = Query(None, description="GitHub repository URL"),
    refresh: bool = Query(False, description="Bypass the repository cache"),
    repo_service: RepoService = Depends(get_repo_service),
    db: Session = Depends(get_db),
) -> RepoResponse:
    bundle = await repo_service.fetch(_require_url(url), force=refresh)
    upsert_repository(db, bundle)
    return RepoResponse(
        repo=bundle.repo,
        tree=bundle.tree,
        raw_tree=bundle.raw_tree,
        readme=bundle.readme,
        package_json=bundle.package_json,
    )


@router.get(
    "/tree",
    response_model=TreeResponse,
    summary="Repository Tree",
    description="Nested file tree, or the flat list of paths with flat=true"
)
async def get_repo_tree(
    url: Optional[str] = Query(None, description="GitHub repository URL"),
    flat: bool = Query(False, description="Return a flat list of paths"),
    repo_service: RepoService = Depends(get_repo_service),
) -> TreeResponse:
    bundle = await repo_service.fetch(_require_url(url))
    if flat:
        return TreeResponse(full_name=bundle.repo.full_name, paths=flatten_tree(bundle.tree))
    return TreeResponse(full_name=bundle.repo.full_name, tree=bundle.tree)


@router.delete(
    "/cache",
    summary="Drop Cached Repository",
    description="Forget the cached fetch so the next request goes to GitHub"
)
async def invalidate_repo(
    url: Optional[str] = Query(None, description="GitHub repository URL"),
    repo_service: RepoService = Depends(get_repo_service),
) -> dict:
    return {"invalidated": repo_service.invalidate(_require_url(url))}


async def _run_flow(
    service: AnalysisService,
    db: Session,
    flow: FlowName,
    request,
    **params,
) -> FlowResponse:
    record, output = await service.run(
        db, flow, request.repo_url, force_refresh=request.force_refresh, **params
    )
    return FlowResponse(
        analysis_id=record.id,
        flow=flow.value,
        result=output.model_dump(mode="json"),
    )


@router.post(
    "/analyze",
    response_model=FlowResponse,
    summary="Analyze Repository",
    description="Audit a repository for bugs, security risks and architectural limits",
    responses={
        404: {"model": ErrorResponse, "description": "Repository not found"},
        500: {"model": ErrorResponse, "description": "Analysis failed"},
    }
)
async def analyze_repo(
    request: AnalyzeRepoRequest,
    service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db),
) -> FlowResponse:
    return await _run_flow(service, db, FlowName.REPO_ANALYSIS, request)


@router.post(
    "/enhance-readme",
    response_model=FlowResponse,
    summary="Enhance README",
    description="Prepend a short introduction to the repository README"
)
async def enhance_readme(
    request: EnhanceReadmeRequest,
    service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db),
) -> FlowResponse:
    return await _run_flow(service, db, FlowName.README_ENHANCEMENT, request)


@router.post(
    "/qna",
    response_model=FlowResponse,
    summary="README Q&A",
    description="Answer a question using only the repository README"
)
async def readme_qna(
    request: ReadmeQuestionRequest,
    service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db),
) -> FlowResponse:
    return await _run_flow(service, db, FlowName.README_QNA, request, question=request.question)


@router.post(
    "/app-ideas",
    response_model=FlowResponse,
    summary="App Ideation",
    description="Brainstorm and plan new applications inspired by the repository"
)
async def app_ideas(
    request: AppIdeasRequest,
    service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db),
) -> FlowResponse:
    return await _run_flow(service, db, FlowName.APP_IDEATION, request, num_ideas=request.num_ideas)


@router.get(
    "/analyses",
    response_model=AnalysisHistoryResponse,
    summary="Analysis History",
    description="Stored flow runs for a repository, newest first"
)
async def list_analyses(
    url: Optional[str] = Query(None, description="GitHub repository URL"),
    service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db),
) -> AnalysisHistoryResponse:
    full_name, analyses = service.history(db, _require_url(url))
    return AnalysisHistoryResponse(
        full_name=full_name,
        analyses=[AnalysisRecord.model_validate(a) for a in analyses],
    )


@router.get(
    "/analyses/{analysis_id}",
    response_model=AnalysisRecord,
    summary="Get Analysis",
    responses={404: {"model": ErrorResponse, "description": "Analysis not found"}}
)
async def get_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db),
) -> AnalysisRecord:
    return AnalysisRecord.model_validate(service.get(db, analysis_id))
