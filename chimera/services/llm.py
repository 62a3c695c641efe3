"""
LLM Client - Google GenAI (Gemini / Veo) wrapper used by every agent.

Agents only depend on three coroutines: `generate`, `generate_json`
and `generate_video`.
"""

import asyncio
import logging
from typing import Optional, Tuple, Type, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from chimera.api.middleware.error_handler import FlowError, LLMNotConfiguredError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GeminiClient:
    """
    Gemini text + Veo video client.

    The underlying SDK client is created lazily so the service can start
    without credentials; the first call then raises LLMNotConfiguredError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash",
        video_model: str = "veo-2.0-generate-001",
        video_poll_interval: float = 5.0,
        video_max_polls: int = 60,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.video_model = video_model
        self.video_poll_interval = video_poll_interval
        self.video_max_polls = video_max_polls
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise LLMNotConfiguredError()
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate free text. Raises FlowError on an empty response."""
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(system_instruction=system_prompt),
        )
        text = response.text
        if not text:
            raise FlowError("The model returned an empty response.")
        return text

    async def generate_json(
        self,
        prompt: str,
        schema: Type[ModelT],
        system_prompt: Optional[str] = None,
    ) -> ModelT:
        """Generate structured output validated against a pydantic model."""
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        text = response.text
        if not text:
            raise FlowError("The model returned an empty response.")
        try:
            return schema.model_validate_json(text)
        except ValidationError as e:
            logger.warning("Structured output did not match %s: %s", schema.__name__, e)
            raise FlowError(f"The model returned invalid {schema.__name__} output.") from e

    async def generate_video(
        self,
        prompt: str,
        duration_seconds: int = 5,
        aspect_ratio: str = "16:9",
    ) -> Tuple[bytes, str]:
        """Start a video generation operation and poll until it finishes."""
        operation = await self.client.aio.models.generate_videos(
            model=self.video_model,
            prompt=prompt,
            config=types.GenerateVideosConfig(
                duration_seconds=duration_seconds,
                aspect_ratio=aspect_ratio,
                number_of_videos=1,
            ),
        )
        if operation is None:
            raise FlowError("Expected the model to return an operation")

        polls = 0
        while not operation.done:
            if polls >= self.video_max_polls:
                raise FlowError(f"Video generation did not finish after {polls} polls")
            await asyncio.sleep(self.video_poll_interval)
            operation = await self.client.aio.operations.get(operation)
            polls += 1

        if operation.error:
            message = operation.error.get("message", str(operation.error))
            raise FlowError(f"Failed to generate video: {message}")

        generated = operation.response.generated_videos if operation.response else None
        if not generated or generated[0].video is None:
            raise FlowError("Failed to find the generated video in the operation output")

        video = generated[0].video
        data = video.video_bytes
        if not data:
            data = await self.client.aio.files.download(file=video)
        return data, video.mime_type or "video/mp4"
