"""
README Agents - Enhancement and question answering over README content.
"""

from typing import Any

from chimera.agents.base import BaseAgent, AgentRole
from chimera.models.schemas import (
    EnhanceReadmeInput,
    EnhanceReadmeOutput,
    ReadmeQnaInput,
    ReadmeQnaOutput,
)


README_ENHANCEMENT_SYSTEM_PROMPT = """You are an AI assistant that enhances README files
for GitHub repositories. You write short, professional and friendly introductions."""

README_QNA_SYSTEM_PROMPT = """You are an AI assistant that answers questions about a GitHub
repository based on its README file. Answer based *only* on the information
provided in the README. If the answer is not in the README, state that clearly.
Format the answer in markdown."""


class ReadmeEnhancementAgent(BaseAgent):
    """
    Prepends a short introduction derived from the repository metadata.

    If the README already opens with a good introduction the model is told
    to return it unchanged.
    """

    role = AgentRole.README_EDITOR

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: EnhanceReadmeInput) -> EnhanceReadmeOutput:
        prompt = f"""You will receive the repository description and the README content.
Analyze the README and generate a short, friendly introduction based on the
repository's metadata (description) to provide context before the README content.
If the README already has a good introduction, return the README content as is.

Repository URL: {input.repo_url}
Repository Description: {input.repo_description}
README Content:
{input.readme_content}

Return the full enhanced README content as `enhanced_readme`."""
        return await self._call_llm_json(prompt, EnhanceReadmeOutput, README_ENHANCEMENT_SYSTEM_PROMPT)


class ReadmeQnaAgent(BaseAgent):
    """Answers a question from README content alone."""

    role = AgentRole.README_QNA

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: ReadmeQnaInput) -> ReadmeQnaOutput:
        prompt = f"""**README Content:**
---
{input.readme_content}
---

**User's Question:**
{input.question}

Based on the README, what is the answer?"""
        return await self._call_llm_json(prompt, ReadmeQnaOutput, README_QNA_SYSTEM_PROMPT)
