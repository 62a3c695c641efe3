"""Shared test fixtures for the ChimeraGPT test suite."""

from typing import Any, List, Optional

import pytest
from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chimera.api.middleware.error_handler import FlowError
from chimera.core.database import Base
from chimera.models import db as db_models  # noqa: F401  (registers tables)
from chimera.models.schemas import GitHubFile


class FakeLLM:
    """
    Scripted stand-in for GeminiClient.

    `responses` feeds generate() in order; `json_responses` feeds
    generate_json() (dicts are validated against the requested schema).
    An Exception in either list is raised instead of returned.
    """

    def __init__(self, responses=None, json_responses=None, video=(b"\x00\x01", "video/mp4")):
        self.responses: List[Any] = list(responses or [])
        self.json_responses: List[Any] = list(json_responses or [])
        self.video = video
        self.prompts: List[str] = []
        self.system_prompts: List[Optional[str]] = []
        self.json_schemas: List[type] = []
        self.video_calls: List[dict] = []
        self.is_configured = True

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        self.system_prompts.append(system_prompt)
        if not self.responses:
            raise FlowError("FakeLLM ran out of responses")
        value = self.responses.pop(0)
        if isinstance(value, Exception):
            raise value
        return value

    async def generate_json(self, prompt: str, schema, system_prompt: Optional[str] = None):
        self.prompts.append(prompt)
        self.system_prompts.append(system_prompt)
        self.json_schemas.append(schema)
        if not self.json_responses:
            raise FlowError("FakeLLM ran out of structured responses")
        value = self.json_responses.pop(0)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, BaseModel):
            return value
        return schema.model_validate(value)

    async def generate_video(self, prompt: str, duration_seconds: int = 5, aspect_ratio: str = "16:9"):
        self.video_calls.append(
            {"prompt": prompt, "duration_seconds": duration_seconds, "aspect_ratio": aspect_ratio}
        )
        return self.video


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads (TestClient runs sync code in a pool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sample_files():
    """A small recursive git tree listing, deliberately unsorted."""
    entries = [
        ("src/utils.ts", "blob"),
        ("README.md", "blob"),
        ("src", "tree"),
        ("package.json", "blob"),
        ("src/components", "tree"),
        ("src/components/Button.tsx", "blob"),
        ("docs", "tree"),
        ("docs/guide.md", "blob"),
        ("src/app.ts", "blob"),
        ("Dockerfile", "blob"),
    ]
    return [GitHubFile(path=path, type=kind) for path, kind in entries]


@pytest.fixture
def repo_payload():
    """GitHub /repos/{owner}/{repo} payload (trimmed)."""
    return {
        "id": 42,
        "name": "repo",
        "full_name": "owner/repo",
        "description": "A sample repository",
        "html_url": "https://github.com/owner/repo",
        "stargazers_count": 10,
        "forks_count": 2,
        "watchers_count": 10,
        "language": "TypeScript",
        "updated_at": "2024-01-01T00:00:00Z",
        "default_branch": "main",
        "owner": {"login": "owner", "avatar_url": "https://avatars.example/owner.png"},
        "private": False,
    }


@pytest.fixture
def tree_payload(sample_files):
    """GitHub /git/trees/{branch}?recursive=1 payload."""
    return {
        "sha": "abc",
        "truncated": False,
        "tree": [{"path": f.path, "type": f.type, "mode": "100644", "sha": "x"} for f in sample_files],
    }
