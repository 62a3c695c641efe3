"""
Studio Endpoints - Flows that are not tied to a repository.

Framework design, persona conversations, video generation, web tasks
and free-form goals run by the master agent.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends

from chimera.agents.autonomous import build_master_agent
from chimera.agents.base import BaseAgent
from chimera.core.config import get_settings, Settings
from chimera.core.dependencies import get_flow_agents, get_llm_client
from chimera.models.requests import (
    ConversationRequest,
    FrameworkDesignRequest,
    GoalRequest,
    VideoRequest,
    WebTaskRequest,
)
from chimera.models.responses import ErrorResponse, GoalResponse
from chimera.models.schemas import (
    ConversationInput,
    ConversationOutput,
    DesignFrameworkInput,
    DesignFrameworkOutput,
    GenerateVideoInput,
    GenerateVideoOutput,
    WebTaskInput,
    WebTaskOutput,
)
from chimera.services.llm import GeminiClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/studio", tags=["Studio"])


@router.post(
    "/framework-design",
    response_model=DesignFrameworkOutput,
    summary="Design Framework",
    description="Propose a multi-agent framework architecture for a goal",
    responses={503: {"model": ErrorResponse, "description": "LLM not configured"}}
)
async def design_framework(
    request: FrameworkDesignRequest,
    agents: Dict[str, BaseAgent] = Depends(get_flow_agents),
) -> DesignFrameworkOutput:
    return await agents["framework_design"].run(DesignFrameworkInput(goal=request.goal))


@router.post(
    "/conversation",
    response_model=ConversationOutput,
    summary="Persona Conversation",
    description="Let a Creative and a Pragmatist AI discuss a topic"
)
async def conversation(
    request: ConversationRequest,
    agents: Dict[str, BaseAgent] = Depends(get_flow_agents),
) -> ConversationOutput:
    return await agents["conversation"].run(
        ConversationInput(topic=request.topic, num_turns=request.num_turns)
    )


@router.post(
    "/video",
    response_model=GenerateVideoOutput,
    summary="Generate Video",
    description="Generate a short video and return it as a data URI (may take minutes)"
)
async def generate_video(
    request: VideoRequest,
    agents: Dict[str, BaseAgent] = Depends(get_flow_agents),
) -> GenerateVideoOutput:
    return await agents["video_generation"].run(GenerateVideoInput(prompt=request.prompt))


@router.post(
    "/web-task",
    response_model=WebTaskOutput,
    summary="Web Task",
    description="Perform a task on the content of a web page"
)
async def web_task(
    request: WebTaskRequest,
    agents: Dict[str, BaseAgent] = Depends(get_flow_agents),
) -> WebTaskOutput:
    return await agents["web_task"].run(WebTaskInput(url=request.url, task=request.task))


@router.post(
    "/goal",
    response_model=GoalResponse,
    summary="Run Goal",
    description="Let the master agent chain flows until it can answer a free-form goal"
)
async def run_goal(
    request: GoalRequest,
    llm: GeminiClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> GoalResponse:
    """
    Run a fresh master agent for the goal.

    `success` is false when the agent gave up (no response, or step limit).
    """
    agent = build_master_agent(
        llm,
        max_steps=request.max_steps or settings.agent_max_steps,
        web_max_chars=settings.web_fetch_max_chars,
    )
    result = await agent.run(request.goal)
    logger.info("Goal finished in %d steps (success=%s)", agent.steps_taken, agent.finished)
    return GoalResponse(
        success=agent.finished,
        result=result,
        steps_taken=agent.steps_taken,
        memory=list(agent.memory.entries),
    )
