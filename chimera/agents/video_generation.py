"""
Video Generation Agent - Text-to-video through Veo.

The generated file is returned inline as a data: URI so clients never
need the API key to download it.
"""

import base64
import logging
from typing import Any

from chimera.agents.base import BaseAgent, AgentRole
from chimera.models.schemas import GenerateVideoInput, GenerateVideoOutput

logger = logging.getLogger(__name__)

VIDEO_DURATION_SECONDS = 5
VIDEO_ASPECT_RATIO = "16:9"


class VideoGenerationAgent(BaseAgent):
    role = AgentRole.VIDEO_GENERATOR

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: GenerateVideoInput) -> GenerateVideoOutput:
        logger.info("Generating video for prompt: %s", input.prompt[:80])
        data, mime_type = await self.llm.generate_video(
            input.prompt,
            duration_seconds=VIDEO_DURATION_SECONDS,
            aspect_ratio=VIDEO_ASPECT_RATIO,
        )
        encoded = base64.b64encode(data).decode("ascii")
        return GenerateVideoOutput(video_url=f"data:{mime_type};base64,{encoded}")
