"""
GitHub Client - Thin async wrapper over the GitHub REST API.

Handles:
- Parsing GitHub URLs into owner/name
- Repository metadata, recursive trees, README and file contents
- Decoding base64 content payloads
"""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from chimera.api.middleware.error_handler import (
    GitHubAPIError,
    InvalidRepositoryURLError,
    RepositoryNotFoundError,
)
from chimera.models.schemas import GitHubFile, GitHubRepo

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

_GITHUB_PATTERN = re.compile(r"^(?:https?://)?(?:www\.)?github\.com/([^/\s]+)/([^/\s?#]+)")


@dataclass
class RepoInfo:
    """Parsed repository coordinates."""
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"


def parse_github_url(url: str) -> RepoInfo:
    """Parse a GitHub URL into owner and repository name."""
    match = _GITHUB_PATTERN.match((url or "").strip())
    if not match:
        raise InvalidRepositoryURLError(url)
    owner, name = match.groups()
    if name.endswith(".git"):
        name = name[:-4]
    if not name:
        raise InvalidRepositoryURLError(url)
    return RepoInfo(owner=owner, name=name)


def decode_content(payload: Dict[str, Any]) -> Optional[str]:
    """Decode a contents API payload, or None if it is not base64 text."""
    if payload.get("encoding") != "base64" or "content" not in payload:
        return None
    try:
        return base64.b64decode(payload["content"]).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        logger.warning("Undecodable content payload for %s", payload.get("path"))
        return None


class GitHubClient:
    """
    Minimal GitHub REST client.

    404 responses surface as None from `_get` so callers decide whether a
    missing resource is an error; every other failure raises GitHubAPIError.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        try:
            response = await self._client.get(endpoint, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"request to {endpoint} failed: {e}") from e

        if response.status_code == 404:
            return None

        if response.is_error:
            try:
                message = response.json().get("message") or response.reason_phrase
            except (ValueError, AttributeError):
                message = response.reason_phrase
            raise GitHubAPIError(message, upstream_status=response.status_code)

        return response.json()

    async def get_repo(self, owner: str, repo: str) -> GitHubRepo:
        data = await self._get(f"/repos/{owner}/{repo}")
        if not data:
            raise RepositoryNotFoundError(f"{owner}/{repo}")
        return GitHubRepo.model_validate(data)

    async def get_tree(self, owner: str, repo: str, tree_sha: str) -> List[GitHubFile]:
        data = await self._get(
            f"/repos/{owner}/{repo}/git/trees/{tree_sha}",
            params={"recursive": "1"},
        )
        if not data:
            raise GitHubAPIError("Could not fetch repository tree.")
        if data.get("truncated"):
            logger.warning("GitHub tree data for %s/%s was truncated. Some files may be missing.", owner, repo)
        return [GitHubFile.model_validate(entry) for entry in data.get("tree", [])]

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[str]:
        data = await self._get(f"/repos/{owner}/{repo}/contents/{path}", params={"ref": ref})
        if not isinstance(data, dict):
            # Directories come back as lists
            return None
        return decode_content(data)

    async def get_readme(self, owner: str, repo: str) -> str:
        data = await self._get(f"/repos/{owner}/{repo}/readme")
        content = decode_content(data) if data else None
        if content is None:
            return f"# {repo}\n\nNo README found for this repository."
        return content

    async def get_package_json(self, owner: str, repo: str, ref: str) -> Optional[Dict[str, Any]]:
        content = await self.get_file_content(owner, repo, "package.json", ref)
        if not content:
            return None
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse package.json for %s/%s: %s", owner, repo, e)
            return None
        return parsed if isinstance(parsed, dict) else None
