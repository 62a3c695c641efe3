"""
Web Task Agent - Performs a user-defined task against a single web page.

FLOW:
1. Fetch the page (fetch errors come back as "Error: ..." strings)
2. Reduce the HTML to text and cap its length, and list its image URLs
3. Ask the LLM to perform the task on that text
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from chimera.agents.base import BaseAgent, AgentRole
from chimera.api.middleware.error_handler import FlowError
from chimera.models.schemas import WebTaskInput, WebTaskOutput
from chimera.services.web_fetcher import extract_image_urls, fetch_url_content, sanitize_html

logger = logging.getLogger(__name__)

WEB_TASK_SYSTEM_PROMPT = """You are a multimodal web agent. Your task is to analyze the
content of a webpage and perform a user-defined task. Provide the result in a clear,
well-structured markdown format."""

Fetcher = Callable[[str], Awaitable[str]]

MAX_IMAGE_URLS = 10


class WebTaskAgent(BaseAgent):
    role = AgentRole.WEB_AGENT

    def __init__(
        self,
        llm_client: Any,
        fetcher: Optional[Fetcher] = None,
        max_chars: int = 20000,
    ):
        super().__init__(llm_client)
        self.fetcher = fetcher or fetch_url_content
        self.max_chars = max_chars

    async def run(self, input: WebTaskInput) -> WebTaskOutput:
        page = await self.fetcher(input.url)
        if not page:
            raise FlowError("Failed to fetch content from the provided URL.", flow="web_task")
        if page.startswith("Error:"):
            logger.warning("Web task skipped for %s: %s", input.url, page)
            return WebTaskOutput(result=page)

        content = sanitize_html(page, self.max_chars)
        images = extract_image_urls(page, input.url)[:MAX_IMAGE_URLS]
        image_section = "\n".join(f"- {url}" for url in images) or "(none)"
        prompt = f"""User's Task:
{input.task}

Webpage Content (sanitized text):
---
{content}
---

Images on the page:
{image_section}

Based on the content, perform the task."""
        return await self._call_llm_json(prompt, WebTaskOutput, WEB_TASK_SYSTEM_PROMPT)
