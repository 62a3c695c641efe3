"""
Agent Architecture for ChimeraGPT
=================================

FLOW OVERVIEW:
--------------
Two families of agents share one LLM client:

1. Flow agents (BaseAgent): one prompt contract each, typed input/output
   - RepoAnalysisAgent, ReadmeEnhancementAgent, ReadmeQnaAgent
   - FrameworkDesignAgent, ConversationAgent, VideoGenerationAgent
   - AppIdeationAgent, WebTaskAgent
2. Autonomous agents: think / act / observe loops over actions
   - AutonomousAgent picks an action per step until it chooses Finish
   - ManagerAgent delegates sub-tasks to a team of agents
   - FlowAction adapters let a master agent call the flow agents

ARCHITECTURE:
-------------
                    +-----------------+
                    |   User Goal     |
                    +--------+--------+
                             |
                    +--------v--------+
                    | AutonomousAgent |  <- "ActionName: input" per step
                    +--------+--------+
                             |
         +-------------------+-------------------+
         |                   |                   |
  +------v------+     +------v------+     +------v------+
  | FlowAction  |     | FlowAction  |     |  Delegate   |  <- Actions
  | (README Q&A)|     | (Web task)  |     |   Action    |
  +------+------+     +------+------+     +------+------+
         |                   |                   |
         +-------------------+-------------------+
                             |
                    +--------v--------+
                    |  Final Answer   |
                    +-----------------+

USAGE:
------
    from chimera.agents import build_master_agent

    agent = build_master_agent(llm_client, max_steps=10)
    answer = await agent.run("Design a framework for automated code review")
"""

from chimera.agents.base import AgentRole, BaseAction, BaseAgent
from chimera.agents.repo_analysis import RepoAnalysisAgent
from chimera.agents.readme import ReadmeEnhancementAgent, ReadmeQnaAgent
from chimera.agents.framework_design import FrameworkDesignAgent
from chimera.agents.conversation import ConversationAgent
from chimera.agents.video_generation import VideoGenerationAgent
from chimera.agents.app_ideation import AppIdeationAgent
from chimera.agents.web_task import WebTaskAgent
from chimera.agents.autonomous import (
    AIAgent,
    AutonomousAgent,
    DelegateAction,
    FlowAction,
    ManagerAgent,
    Memory,
    build_master_agent,
    parse_action,
)

__all__ = [
    # Base classes
    "AgentRole",
    "BaseAction",
    "BaseAgent",
    # Flow agents
    "RepoAnalysisAgent",
    "ReadmeEnhancementAgent",
    "ReadmeQnaAgent",
    "FrameworkDesignAgent",
    "ConversationAgent",
    "VideoGenerationAgent",
    "AppIdeationAgent",
    "WebTaskAgent",
    # Autonomous agents
    "AIAgent",
    "AutonomousAgent",
    "DelegateAction",
    "FlowAction",
    "ManagerAgent",
    "Memory",
    "build_master_agent",
    "parse_action",
]
