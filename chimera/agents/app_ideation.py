"""
App Ideation Agent - Brainstorms and plans new applications from a repository.

RESPONSIBILITY:
Three cooperating prompts turn an existing repository into a set of
concrete application proposals.

FLOW:
1. Analyst: one-paragraph summary of the repository's concept and stack
2. Brainstormer: "Idea Name: Idea Description" lines
3. Planner: one structured AppIdea per line, planned concurrently
"""

import asyncio
import logging
import re
from typing import Any, List, Tuple

from chimera.agents.base import BaseAgent, AgentRole
from chimera.api.middleware.error_handler import FlowError
from chimera.models.schemas import AppIdea, AppIdeationInput, AppIdeationOutput

logger = logging.getLogger(__name__)

MAX_PROMPT_PATHS = 500

IDEA_LINE_RE = re.compile(r"^(?:-|\*|\d+\.)?\s*([^:]+):\s*(.*)")

ANALYST_SYSTEM_PROMPT = """You are a Senior Software Architect. Your job is to analyze a
source repository to understand its core purpose, technology, and structure."""

BRAINSTORMER_SYSTEM_PROMPT = """You are a creative Product Manager who brainstorms new,
innovative application ideas inspired by existing projects."""

PLANNER_SYSTEM_PROMPT = """You are a Lead AI Engineer and Project Planner. Your task is to
take a single application idea and create a detailed, practical project plan."""


def parse_idea_lines(text: str) -> List[Tuple[str, str]]:
    """
    Parse brainstormer output into (name, description) pairs.

    Lines may carry a "-", "*" or "1." bullet; lines without a colon are skipped.
    """
    ideas = []
    for line in text.splitlines():
        if not line.strip() or ":" not in line:
            continue
        match = IDEA_LINE_RE.match(line.strip())
        if not match:
            continue
        name = match.group(1).strip().strip("*").strip()
        description = match.group(2).strip()
        if name:
            ideas.append((name, description))
    return ideas


class AppIdeationAgent(BaseAgent):
    """Analyst -> Brainstormer -> Planner pipeline."""

    role = AgentRole.APP_IDEATION

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: AppIdeationInput) -> AppIdeationOutput:
        summary = await self._analyse(input)
        ideas = await self._brainstorm(summary, input.num_ideas)
        ideas = ideas[: input.num_ideas]

        logger.info("Planning %d ideas for %s", len(ideas), input.repo_name)
        plans = await asyncio.gather(
            *(self._plan(name, description, input.repo_description) for name, description in ideas)
        )
        return AppIdeationOutput(ideas=list(plans))

    async def _analyse(self, input: AppIdeationInput) -> str:
        listing = "\n".join(f"- {p}" for p in input.file_paths[:MAX_PROMPT_PATHS])
        prompt = f"""Source Repository: {input.repo_name}
Description: {input.repo_description}
File Structure:
{listing}

Based on this, provide a concise, one-paragraph summary of the repository's core
concept and key technologies. This summary will be used by other agents to
brainstorm new ideas."""
        summary = await self._call_llm(prompt, ANALYST_SYSTEM_PROMPT)
        if not summary or not summary.strip():
            raise FlowError("Analyst agent failed to summarize the repository.", flow="app_ideation")
        return summary.strip()

    async def _brainstorm(self, summary: str, num_ideas: int) -> List[Tuple[str, str]]:
        prompt = f"""Based on the following summary of an existing project, brainstorm a list
of {num_ideas} new, innovative application ideas that expand upon or are inspired
by the original concept.

For each idea, provide only a creative name and a one-sentence description.

Source Project Summary:
---
{summary}
---

Your output should be a simple list of names and descriptions, each on a new line,
formatted like: "Idea Name: Idea Description"."""
        text = await self._call_llm(prompt, BRAINSTORMER_SYSTEM_PROMPT)
        if not text or not text.strip():
            raise FlowError("Brainstormer agent failed to generate ideas.", flow="app_ideation")
        return parse_idea_lines(text)

    async def _plan(self, name: str, description: str, repo_description: str) -> AppIdea:
        prompt = f"""Application Idea: {name} - {description}
Source Repository Context: The original project was about '{repo_description}' and
used technologies suggested by its file paths.

Create a practical and detailed project proposal. It MUST include:
1. name: The application name provided.
2. description: A one-paragraph expansion of the provided description.
3. tech_stack: A list of recommended technologies. Be specific.
4. agents: At least two AI agents required to build this application, each with
   a name and a description of its role.
5. todo_list: A high-level list of 5-7 actionable TODO items."""
        return await self._call_llm_json(prompt, AppIdea, PLANNER_SYSTEM_PROMPT)
