"""
Repo Analysis Agent - Audits a repository from its file listing.

RESPONSIBILITY:
Acts as a senior reviewer who has only seen the file paths and the
description of a repository. It identifies technologies, summarises the
architecture and calls out likely bugs, security risks and architectural
limitations, then suggests agent frameworks that could fit.

FLOW:
1. Receive file paths and repository description
2. Render the auditor prompt (file list is capped)
3. Ask the LLM for structured RepoAnalysisOutput
"""

from typing import Any

from chimera.agents.base import BaseAgent, AgentRole
from chimera.models.schemas import RepoAnalysisInput, RepoAnalysisOutput


MAX_PROMPT_PATHS = 1000

REPO_ANALYSIS_SYSTEM_PROMPT = """You are an expert Code Auditor AI. Your task is to analyze
a GitHub repository based on its file paths, dependencies, and description to
identify potential issues. Be critical and thorough, as a senior software
architect conducting a code review would be."""


class RepoAnalysisAgent(BaseAgent):
    """Produces a structured audit of a repository."""

    role = AgentRole.REPO_ANALYST

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: RepoAnalysisInput) -> RepoAnalysisOutput:
        prompt = self._build_prompt(input)
        return await self._call_llm_json(prompt, RepoAnalysisOutput, REPO_ANALYSIS_SYSTEM_PROMPT)

    def _build_prompt(self, input: RepoAnalysisInput) -> str:
        paths = input.file_paths[:MAX_PROMPT_PATHS]
        listing = "\n".join(f"- {p}" for p in paths)
        if len(input.file_paths) > MAX_PROMPT_PATHS:
            listing += f"\n- ... ({len(input.file_paths) - MAX_PROMPT_PATHS} more files omitted)"

        return f"""Repository Description: {input.repo_description}

File Paths:
{listing}

Based on the file paths and description, provide the following analysis:

1. potential_bugs: Identify potential bugs, e.g. missing error handling, race
   conditions in client/server interactions, or state management that invites bugs.
2. security_vulnerabilities: Exposure of environment variables, missing input
   validation, unsanitized markdown rendering, outdated or insecure dependencies.
3. architectural_limitations: Scalability bottlenecks, lack of modularity, or
   tight coupling that would make future maintenance difficult.
4. technologies: Programming languages, frameworks, and significant libraries.
5. summary: Briefly summarize the project's purpose and architecture.
6. framework_suggestions: AI agent frameworks that could be relevant, each with
   a short reason.

For each issue, provide a brief explanation of the potential risk.
"""
