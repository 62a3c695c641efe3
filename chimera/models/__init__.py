"""
Data Models for ChimeraGPT
==========================

Organized into four categories:
- schemas: Core domain models and flow input/output contracts
- requests: API request validation models
- responses: API response models
- db: SQLAlchemy tables (imported by init_db)
"""

from chimera.models.schemas import (
    FlowName,
    GitHubFile,
    GitHubRepo,
    RepoBundle,
    TreeNode,
)

__all__ = [
    "FlowName",
    "GitHubFile",
    "GitHubRepo",
    "RepoBundle",
    "TreeNode",
]
