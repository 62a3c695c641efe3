"""
Repository Service - Fetches and caches everything known about a repo.

Handles:
- Resolving a GitHub URL to owner/name
- Fetching metadata, tree, README and package.json (cached with a TTL)
- Recording the repository in the relational store
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from chimera.models.db import Repository, utcnow
from chimera.models.schemas import RepoBundle
from chimera.services.github_client import GitHubClient, RepoInfo, parse_github_url
from chimera.services.tree import build_tree

logger = logging.getLogger(__name__)


@dataclass
class RepoServiceConfig:
    """Configuration for repository service."""
    cache_ttl_hours: int = 1


@dataclass
class _CacheEntry:
    bundle: RepoBundle
    fetched_at: datetime


class RepoService:
    """
    Fetches repository bundles from GitHub.

    Bundles are cached in memory per owner/name; `force=True` refetches.
    """

    def __init__(self, github: GitHubClient, config: Optional[RepoServiceConfig] = None):
        self.github = github
        self.config = config or RepoServiceConfig()
        self._cache: Dict[str, _CacheEntry] = {}

    async def fetch(self, url: str, force: bool = False) -> RepoBundle:
        """Fetch repo metadata, tree, README and package.json for a URL."""
        info = parse_github_url(url)
        cache_key = info.full_name.lower()

        cached = self._cache.get(cache_key)
        if not force and cached and self._is_cache_valid(cached):
            return cached.bundle

        logger.info("Fetching repository %s", info.full_name)
        repo = await self.github.get_repo(info.owner, info.name)
        raw_tree = await self.github.get_tree(info.owner, info.name, repo.default_branch)
        readme = await self.github.get_readme(info.owner, info.name)
        package_json = await self.github.get_package_json(info.owner, info.name, repo.default_branch)

        bundle = RepoBundle(
            repo=repo,
            tree=build_tree(raw_tree),
            raw_tree=raw_tree,
            readme=readme,
            package_json=package_json,
        )
        self._cache[cache_key] = _CacheEntry(bundle=bundle, fetched_at=datetime.now())
        return bundle

    def _is_cache_valid(self, entry: _CacheEntry) -> bool:
        ttl = timedelta(hours=self.config.cache_ttl_hours)
        return datetime.now() - entry.fetched_at < ttl

    def invalidate(self, url: str) -> bool:
        """Drop a cached bundle."""
        info = parse_github_url(url)
        return self._cache.pop(info.full_name.lower(), None) is not None


def upsert_repository(session: Session, bundle: RepoBundle) -> Repository:
    """Insert or refresh the repositories row for a fetched bundle."""
    repo = bundle.repo
    info = RepoInfo(owner=repo.owner.login, name=repo.name)

    record = session.query(Repository).filter(Repository.github_url == info.url).first()
    if record is None:
        record = Repository(github_url=info.url, owner=info.owner, name=info.name)
        session.add(record)

    record.full_name = repo.full_name
    record.description = repo.description
    record.default_branch = repo.default_branch
    record.metadata_ = {
        "stargazers_count": repo.stargazers_count,
        "forks_count": repo.forks_count,
        "watchers_count": repo.watchers_count,
        "language": repo.language,
        "html_url": repo.html_url,
        "file_count": len(bundle.file_paths),
        "has_package_json": bundle.package_json is not None,
    }
    record.last_fetched = utcnow()
    session.commit()
    return record
