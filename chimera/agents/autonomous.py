"""
Autonomous Agents - A lightweight think / act / observe agent system.

RESPONSIBILITY:
- AIAgent holds a role, a set of actions (tools) and a memory
- AutonomousAgent loops: ask the LLM for "ActionName: input", run the
  action, record the observation, until it chooses Finish
- ManagerAgent treats each member of its team as an action it can
  delegate sub-tasks to
- FlowAction adapters expose the single-purpose flows as actions so a
  master agent can chain them for a free-form goal

The LLM reply is parsed leniently: everything before the first colon is
the action name, everything after it is the input.
"""

import json
import logging
from typing import Any, Callable, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from chimera.agents.base import BaseAction, BaseAgent
from chimera.agents.app_ideation import AppIdeationAgent
from chimera.agents.conversation import ConversationAgent
from chimera.agents.framework_design import FrameworkDesignAgent
from chimera.agents.readme import ReadmeQnaAgent
from chimera.agents.web_task import WebTaskAgent
from chimera.api.middleware.error_handler import FlowError
from chimera.models.schemas import (
    AppIdeationInput,
    ConversationInput,
    DesignFrameworkInput,
    ReadmeQnaInput,
    WebTaskInput,
)

logger = logging.getLogger(__name__)

FINISH_ACTION = "Finish"
EMPTY_RESPONSE_MESSAGE = "Agent failed to generate a response."
DEFAULT_MAX_STEPS = 10
DELEGATE_MAX_STEPS = 5


class Memory:
    """Append-only action / observation history."""

    def __init__(self):
        self.entries: List[str] = []

    def add(self, entry: str) -> None:
        self.entries.append(entry)

    def history(self) -> str:
        return "\n".join(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def parse_action(text: str) -> Tuple[str, str]:
    """
    Split an LLM reply into (action_name, input).

    Examples:
        'Search: python: asyncio'  -> ('Search', 'python: asyncio')
        '"Finish": done'           -> ('Finish', 'done')
        'Finish'                   -> ('Finish', '')
    """
    name, sep, rest = text.strip().partition(":")
    name = name.strip().strip("`'\"").strip()
    if not sep:
        return name, ""
    return name, rest.strip()


class AIAgent:
    """An agent with a role, tools and memory. Subclasses implement run()."""

    def __init__(
        self,
        name: str,
        role: str,
        actions: Optional[List[BaseAction]] = None,
        llm_client: Any = None,
    ):
        self.name = name
        self.role = role
        self.actions: List[BaseAction] = list(actions or [])
        self.llm = llm_client
        self.memory = Memory()

    def build_prompt(self, task: str) -> str:
        action_lines = "\n".join(
            f"- {a.name}: {a.description} (Input: {a.input_description or 'string'})"
            for a in self.actions
        )
        return f"""You are {self.name}, a specialized AI agent with the role: "{self.role}".
Your overall task is: "{task}".

You have access to the following tools:
{action_lines}
- {FINISH_ACTION}: Use this action when you have completed the task and have a final answer. Input should be your final answer.

Conversation History & Observations:
---
{self.memory.history()}
---

Based on the task and history, decide which action to take next to make progress.
Respond with only the name of the action and the input for it in a single line, like this: "ActionName: input value".
If you have completed the task, use the "{FINISH_ACTION}" action."""

    def get_action(self, name: str) -> Optional[BaseAction]:
        for action in self.actions:
            if action.name == name:
                return action
        return None

    async def run(self, task: str) -> str:
        raise NotImplementedError(
            "The 'run' method must be implemented by a subclass. "
            "Use AutonomousAgent for multi-step tasks."
        )


class AutonomousAgent(AIAgent):
    """
    Multi-step agent.

    Each step rebuilds the prompt from the current memory and makes exactly
    one LLM call, so a run never makes more than max_steps calls.
    """

    def __init__(
        self,
        name: str,
        role: str,
        actions: Optional[List[BaseAction]] = None,
        llm_client: Any = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        super().__init__(name, role, actions, llm_client)
        self.max_steps = max_steps
        self.steps_taken = 0
        self.finished = False

    async def run(self, task: str) -> str:
        self.memory.add(f"Task started: {task}")
        self.steps_taken = 0
        self.finished = False

        for _ in range(self.max_steps):
            self.steps_taken += 1
            try:
                text = await self.llm.generate(self.build_prompt(task))
            except FlowError as e:
                # The LLM client reports an empty reply as FlowError
                logger.warning("%s: no usable LLM response: %s", self.name, e.message)
                text = ""
            if not text or not text.strip():
                self.memory.add(f"Observation: {EMPTY_RESPONSE_MESSAGE}")
                return EMPTY_RESPONSE_MESSAGE

            action_name, action_input = parse_action(text)
            self.memory.add(f'Thought: I will use the {action_name} tool. Input: "{action_input}"')

            if action_name.lower() == FINISH_ACTION.lower():
                self.memory.add(f"Observation: Task finished. Final Answer: {action_input}")
                self.finished = True
                logger.info("%s finished after %d steps", self.name, self.steps_taken)
                return action_input

            action = self.get_action(action_name)
            if action is None:
                available = ", ".join([a.name for a in self.actions] + [FINISH_ACTION])
                self.memory.add(
                    f'Observation: Error: Action "{action_name}" not found. '
                    f"Available actions: {available}."
                )
                continue

            try:
                output = await action.execute(action_input)
            except Exception as e:
                logger.warning("%s: action %s failed: %s", self.name, action_name, e)
                self.memory.add(f"Observation: Error executing action {action_name}: {e}")
                continue
            self.memory.add(f"Observation: {_render_observation(output)}")

        final_message = f"Task failed to complete within {self.max_steps} steps."
        self.memory.add(final_message)
        return final_message


def _render_observation(output: Any) -> str:
    if isinstance(output, BaseModel):
        return output.model_dump_json()
    try:
        return json.dumps(output)
    except (TypeError, ValueError):
        return str(output)


class DelegateAction(BaseAction):
    """Delegates a sub-task to a team member."""

    input_description = "The specific and actionable sub-task for the agent."

    def __init__(self, agent: AIAgent, max_steps: int = DELEGATE_MAX_STEPS):
        self.agent = agent
        self.max_steps = max_steps
        self.name = agent.name
        self.description = f"Delegate a sub-task to this agent. Role: {agent.role}"

    async def execute(self, input: str) -> str:
        if isinstance(self.agent, AutonomousAgent):
            return await self.agent.run(input)
        worker = AutonomousAgent(
            self.agent.name,
            self.agent.role,
            self.agent.actions,
            llm_client=self.agent.llm,
            max_steps=self.max_steps,
        )
        return await worker.run(input)


class ManagerAgent(AutonomousAgent):
    """An autonomous agent whose tools are the members of its team."""

    def __init__(
        self,
        name: str,
        role: str,
        team: List[AIAgent],
        llm_client: Any = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        delegate_max_steps: int = DELEGATE_MAX_STEPS,
    ):
        actions = [DelegateAction(member, delegate_max_steps) for member in team]
        super().__init__(name, role, actions, llm_client, max_steps)
        self.team = team


# =============================================================================
# FLOW ACTIONS
# =============================================================================


class FlowAction(BaseAction):
    """
    Exposes a flow agent as an action.

    The input may be a JSON object matching the flow's input model, or plain
    text, which fills `plain_field`.
    """

    input_model: Type[BaseModel]
    plain_field: str

    def __init__(self, flow: BaseAgent):
        self.flow = flow

    def parse_input(self, input: str) -> BaseModel:
        try:
            data = json.loads(input)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {self.plain_field: input}
        try:
            return self.input_model.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid input for {self.name}: {e.errors()[0]['msg']}") from e

    def render(self, output: BaseModel) -> Any:
        return output.model_dump()

    async def execute(self, input: str) -> Any:
        output = await self.flow.run(self.parse_input(input))
        return self.render(output)


class ReadmeQnaAction(FlowAction):
    name = "readmeQnaTool"
    description = "Answers a specific question based on the content of a README file."
    input_description = 'JSON {"readme_content": "...", "question": "..."}'
    input_model = ReadmeQnaInput
    plain_field = "question"

    def render(self, output):
        return output.answer


class FrameworkDesignAction(FlowAction):
    name = "designFrameworkTool"
    description = (
        "Designs a conceptual architecture for a new multi-agent framework "
        "based on a high-level goal."
    )
    input_description = "The goal, as plain text"
    input_model = DesignFrameworkInput
    plain_field = "goal"

    def render(self, output):
        return output.architecture


class ConversationAction(FlowAction):
    name = "conversationTool"
    description = (
        "Starts a conversation between a Pragmatist and a Creative AI on a given topic. "
        "Use this for brainstorming or exploring a subject from multiple viewpoints."
    )
    input_description = 'The topic as plain text, or JSON {"topic": "...", "num_turns": 2}'
    input_model = ConversationInput
    plain_field = "topic"

    def parse_input(self, input: str) -> BaseModel:
        try:
            data = json.loads(input)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {"topic": input}
        data.setdefault("num_turns", 2)
        try:
            return ConversationInput.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid input for {self.name}: {e.errors()[0]['msg']}") from e

    def render(self, output):
        return "\n\n".join(f"{turn.agent}: {turn.text}" for turn in output.conversation)


class AppIdeationAction(FlowAction):
    name = "appIdeationTool"
    description = (
        "Brainstorms and plans new applications inspired by a repository. "
        "Use this when the user wants ideas for building on a codebase."
    )
    input_description = 'JSON {"repo_name": "...", "repo_description": "...", "file_paths": [], "num_ideas": 1}'
    input_model = AppIdeationInput
    plain_field = "repo_description"

    def parse_input(self, input: str) -> BaseModel:
        parsed = super().parse_input(input) if input.lstrip().startswith("{") else None
        if parsed is None:
            parsed = AppIdeationInput(repo_name="project", repo_description=input, num_ideas=1)
        return parsed

    def render(self, output):
        if not output.ideas:
            return "No ideas were generated."
        return output.ideas[0].model_dump()


class WebTaskAction(FlowAction):
    name = "webAgentTool"
    description = "Performs a task on a given webpage and returns the result."
    input_description = 'JSON {"url": "...", "task": "..."} or "<url> <task>"'
    input_model = WebTaskInput
    plain_field = "url"

    def parse_input(self, input: str) -> BaseModel:
        if input.lstrip().startswith("{"):
            return super().parse_input(input)
        url, _, task = input.strip().partition(" ")
        return WebTaskInput(url=url, task=task.strip() or "Summarize this page.")

    def render(self, output):
        return output.result


MASTER_ROLE = (
    "An orchestrator that accomplishes user goals by chaining specialized tools: "
    "README question answering, framework design, conversations, app ideation "
    "and web tasks."
)


def build_master_agent(
    llm_client: Any,
    max_steps: int = DEFAULT_MAX_STEPS,
    fetcher: Optional[Callable] = None,
    web_max_chars: int = 20000,
) -> AutonomousAgent:
    """Build a fresh master agent wired to every flow action."""
    actions: List[BaseAction] = [
        ReadmeQnaAction(ReadmeQnaAgent(llm_client)),
        FrameworkDesignAction(FrameworkDesignAgent(llm_client)),
        ConversationAction(ConversationAgent(llm_client)),
        AppIdeationAction(AppIdeationAgent(llm_client)),
        WebTaskAction(WebTaskAgent(llm_client, fetcher=fetcher, max_chars=web_max_chars)),
    ]
    return AutonomousAgent("Chimera", MASTER_ROLE, actions, llm_client, max_steps)
