"""Tests for chimera.services.analysis_service and chimera.services.analytics."""

from unittest.mock import AsyncMock

import pytest

from chimera.agents.app_ideation import AppIdeationAgent
from chimera.agents.readme import ReadmeQnaAgent
from chimera.agents.repo_analysis import RepoAnalysisAgent
from chimera.api.middleware.error_handler import AnalysisNotFoundError, FlowError
from chimera.models.schemas import FlowName, GitHubRepo, RepoBundle
from chimera.services.analysis_service import AnalysisService, build_flow_input
from chimera.services.analytics import get_overview
from chimera.services.orchestrator import AgentOrchestrator
from chimera.services.tree import build_tree
from tests.conftest import FakeLLM

REPO_URL = "https://github.com/owner/repo"


@pytest.fixture
def bundle(repo_payload, sample_files):
    return RepoBundle(
        repo=GitHubRepo.model_validate(repo_payload),
        tree=build_tree(sample_files),
        raw_tree=sample_files,
        readme="# repo\n\nRun `npm start`.",
    )


@pytest.fixture
def repo_service(bundle):
    service = AsyncMock()
    service.fetch.return_value = bundle
    return service


def make_service(repo_service, llm):
    return AnalysisService(
        repo_service,
        {
            FlowName.REPO_ANALYSIS: RepoAnalysisAgent(llm),
            FlowName.README_QNA: ReadmeQnaAgent(llm),
            FlowName.APP_IDEATION: AppIdeationAgent(llm),
        },
    )


# ── build_flow_input ─────────────────────────────────────────────────────────


class TestBuildFlowInput:
    def test_repo_analysis(self, bundle):
        flow_input = build_flow_input(FlowName.REPO_ANALYSIS, bundle, {})
        assert flow_input.repo_description == "A sample repository"
        assert "src/app.ts" in flow_input.file_paths

    def test_readme_enhancement_carries_url(self, bundle):
        flow_input = build_flow_input(FlowName.README_ENHANCEMENT, bundle, {})
        assert flow_input.repo_url == "https://github.com/owner/repo"

    def test_app_ideation_default_count(self, bundle):
        flow_input = build_flow_input(FlowName.APP_IDEATION, bundle, {})
        assert flow_input.repo_name == "owner/repo"
        assert flow_input.num_ideas == 3

    def test_missing_description_placeholder(self, bundle):
        bundle.repo.description = None
        flow_input = build_flow_input(FlowName.REPO_ANALYSIS, bundle, {})
        assert flow_input.repo_description == "No description provided."


# ── run / history ────────────────────────────────────────────────────────────


class TestAnalysisService:
    @pytest.mark.asyncio
    async def test_run_persists_output(self, db_session, repo_service):
        llm = FakeLLM(json_responses=[{"summary": "A web app", "technologies": ["TypeScript"]}])
        service = make_service(repo_service, llm)

        record, output = await service.run(db_session, FlowName.REPO_ANALYSIS, REPO_URL)

        assert output.summary == "A web app"
        assert record.status == "completed"
        assert record.flow == "repo_analysis"
        assert record.output["technologies"] == ["TypeScript"]
        assert record.input["file_paths_size"] == 10
        assert "file_paths" not in record.input
        repo_service.fetch.assert_awaited_once_with(REPO_URL, force=False)

    @pytest.mark.asyncio
    async def test_qna_question_passed(self, db_session, repo_service):
        llm = FakeLLM(json_responses=[{"answer": "npm start"}])
        service = make_service(repo_service, llm)

        record, output = await service.run(
            db_session, FlowName.README_QNA, REPO_URL, question="How do I run it?"
        )
        assert output.answer == "npm start"
        assert record.input["question"] == "How do I run it?"
        assert "readme_content_size" in record.input

    @pytest.mark.asyncio
    async def test_failure_recorded_and_raised(self, db_session, repo_service):
        llm = FakeLLM(responses=[" "])
        service = make_service(repo_service, llm)

        with pytest.raises(FlowError):
            await service.run(db_session, FlowName.APP_IDEATION, REPO_URL)

        _, analyses = service.history(db_session, REPO_URL)
        assert len(analyses) == 1
        assert analyses[0].status == "failed"
        assert "Analyst" in analyses[0].error
        assert analyses[0].output is None

    @pytest.mark.asyncio
    async def test_history_newest_first(self, db_session, repo_service):
        llm = FakeLLM(json_responses=[{"summary": "first"}, {"summary": "second"}])
        service = make_service(repo_service, llm)

        await service.run(db_session, FlowName.REPO_ANALYSIS, REPO_URL)
        await service.run(db_session, FlowName.REPO_ANALYSIS, REPO_URL, force_refresh=True)

        full_name, analyses = service.history(db_session, "https://github.com/owner/repo.git")
        assert full_name == "owner/repo"
        assert [a.output["summary"] for a in analyses] == ["second", "first"]

    def test_history_unknown_repository(self, db_session, repo_service):
        service = make_service(repo_service, FakeLLM())
        full_name, analyses = service.history(db_session, "https://github.com/someone/else")
        assert full_name == "someone/else"
        assert analyses == []

    def test_get_unknown(self, db_session, repo_service):
        with pytest.raises(AnalysisNotFoundError):
            make_service(repo_service, FakeLLM()).get(db_session, "missing")


# ── analytics ────────────────────────────────────────────────────────────────


class TestAnalyticsOverview:
    def test_empty(self, db_session):
        overview = get_overview(db_session)
        assert overview["task_success_rate"] == 0.0
        assert overview["average_task_duration_ms"] is None
        assert overview["repository_count"] == 0

    @pytest.mark.asyncio
    async def test_counts(self, session_factory, db_session, repo_service):
        orchestrator = AgentOrchestrator(session_factory)
        orchestrator.register_agent("A", "x")
        done = orchestrator.queue_task("ok", "x")
        orchestrator.complete_task(done.id)
        failed = orchestrator.queue_task("bad", "x")
        orchestrator.fail_task(failed.id, "boom")
        orchestrator.queue_task("waiting", "x")

        llm = FakeLLM(json_responses=[{"summary": "s"}])
        await make_service(repo_service, llm).run(db_session, FlowName.REPO_ANALYSIS, REPO_URL)

        overview = get_overview(db_session)
        assert overview["agents_by_status"] == {"error": 1}
        assert overview["tasks_by_status"] == {"completed": 1, "failed": 1, "pending": 1}
        assert overview["task_success_rate"] == 0.5
        assert overview["average_task_duration_ms"] >= 0
        assert overview["analyses_by_flow"] == {"repo_analysis": 1}
        assert overview["repository_count"] == 1
