"""
Base classes for the agent architecture.

Two kinds of components live here:
- BaseAgent: a single-purpose LLM flow (one prompt contract, typed I/O)
- BaseAction: a tool an autonomous agent can call with a string input
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Type, TypeVar
from enum import Enum

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class AgentRole(Enum):
    """Defines the role of each flow agent in the system."""
    REPO_ANALYST = "repo_analyst"
    README_EDITOR = "readme_editor"
    README_QNA = "readme_qna"
    FRAMEWORK_ARCHITECT = "framework_architect"
    CONVERSATION = "conversation"
    VIDEO_GENERATOR = "video_generator"
    APP_IDEATION = "app_ideation"
    WEB_AGENT = "web_agent"


class BaseAction(ABC):
    """
    Base class for all actions.

    Actions are what an AutonomousAgent may choose between on each step.
    They receive the raw input string the model wrote after the colon.
    """

    name: str = "base_action"
    description: str = "Base action description"
    input_description: str = "string"

    @abstractmethod
    async def execute(self, input: str) -> Any:
        """
        Perform the action.

        Args:
            input: Free-form input produced by the model

        Returns:
            Any JSON-serialisable observation
        """
        pass


class BaseAgent(ABC):
    """
    Base class for all flow agents.

    Each flow wraps one prompt contract around the shared LLM client:
    - RepoAnalysisAgent: audits a repository from its file listing
    - ReadmeEnhancementAgent / ReadmeQnaAgent: work on README content
    - FrameworkDesignAgent, ConversationAgent, VideoGenerationAgent, ...
    """

    role: AgentRole

    def __init__(self, llm_client: Any):
        """
        Initialize agent with LLM client.

        Args:
            llm_client: Client exposing generate / generate_json / generate_video
        """
        self.llm = llm_client

    @abstractmethod
    async def run(self, input: BaseModel) -> BaseModel:
        """
        Execute the flow.

        Args:
            input: Validated flow input

        Returns:
            Validated flow output
        """
        pass

    async def _call_llm(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Make a free-text call to the LLM."""
        return await self.llm.generate(prompt, system_prompt)

    async def _call_llm_json(
        self,
        prompt: str,
        schema: Type[ModelT],
        system_prompt: Optional[str] = None,
    ) -> ModelT:
        """Make a structured-output call to the LLM."""
        return await self.llm.generate_json(prompt, schema, system_prompt)
