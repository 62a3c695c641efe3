"""
Framework Design Agent - Proposes a conceptual multi-agent architecture.

RESPONSIBILITY:
Given a user's goal, produce a markdown architecture for a new unified
multi-agent framework, drawing on a catalogue of existing frameworks and
protocols and following the structure of a worked example.
"""

from typing import Any, List, Tuple

from chimera.agents.base import BaseAgent, AgentRole
from chimera.models.schemas import DesignFrameworkInput, DesignFrameworkOutput


KNOWN_FRAMEWORKS: List[Tuple[str, str]] = [
    ("nanobot", "An open-source MCP host for building dedicated chatbots with configurable models."),
    ("CAMEL", "A multi-agent framework for studying communicative agents and their evolution."),
    ("Eigent", "A multi-agent AI workforce for automating complex workflows through parallel execution."),
    ("LiteLLM", "A unified API to call over 100+ LLM APIs in a consistent format."),
    ("Dolt", "A version-controlled SQL database, like Git for data."),
    ("Mem0", "A universal memory layer for AI agents to provide personalized interactions."),
    ("A2A Protocol", "An open standard for enabling seamless communication and collaboration between AI agents."),
    ("AP2 Protocol", "An extension to A2A for enabling secure, reliable, and interoperable agent commerce."),
    ("CrewAI", "A framework for orchestrating autonomous AI agents to work collaboratively."),
    ("LangGraph", "A framework for building stateful, multi-agent applications with cycles, built on LangChain."),
    ("LangFlow", "A visual low-code tool for building and deploying AI-powered agents and workflows."),
]

FRAMEWORK_DESIGN_SYSTEM_PROMPT = """You are a world-class AI architect specializing in
multi-agent systems. You design high-level conceptual architectures for new, unified
frameworks that handle multi-agent deployment, communication protocols, and collaboration."""

EXAMPLE_DESIGN = """## Conceptual Overview
**Framework Name:** "Voyager"
**Core Principles:** Voyager is designed around modularity, asynchronous communication, and dynamic composition. It allows a decentralized network of specialized travel agents to be composed on-the-fly to handle complex user requests.

## Core Components
*   **Agent Core:** A lightweight, containerized execution environment for individual agents (e.g., FlightSearchAgent, HotelBookingAgent).
*   **Orchestration Layer (inspired by CrewAI):** A central service that receives user goals, decomposes them into tasks, and assigns them to the appropriate agents.
*   **Communication Bus (inspired by A2A Protocol):** A message broker (e.g., RabbitMQ or NATS) for asynchronous, standardized communication between agents using a defined message schema.
*   **Shared Memory & State (inspired by Mem0):** A distributed cache (e.g., Redis) that stores ongoing travel plans, user preferences, and shared context.
*   **Tool & Service Integration (inspired by LiteLLM):** A unified interface for agents to access external APIs (airline systems, hotel APIs, payment gateways like AP2).

## Communication Protocol
*   **Message Structure:** `{ "sender": "agent_id", "receiver": "agent_id", "task_id": "uuid", "payload": { ... } }`.
*   **Security:** Communication is secured using JWTs, with each agent holding its own credentials. AP2 principles apply to payment-related messages.

## Example Workflow (for "book a trip to Paris")
1.  User submits goal: "Book a round-trip flight to Paris and a 3-night hotel for next month."
2.  **Orchestrator** creates a `trip_id` and dispatches `find_flights` to `FlightSearchAgent` and `find_hotels` to `HotelBookingAgent`.
3.  **FlightSearchAgent** queries airline APIs and publishes flight options to the `trip_id` topic on the **Communication Bus**.
4.  **HotelBookingAgent** similarly publishes hotel options.
5.  **Orchestrator** combines the options and presents them to the user for approval.
6.  On approval, the Orchestrator dispatches `book_flight` and `book_hotel` tasks through the **Tool & Service Integration** layer."""


class FrameworkDesignAgent(BaseAgent):
    """Designs a framework architecture tailored to a goal."""

    role = AgentRole.FRAMEWORK_ARCHITECT

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: DesignFrameworkInput) -> DesignFrameworkOutput:
        catalogue = "\n".join(f"- **{name}:** {desc}" for name, desc in KNOWN_FRAMEWORKS)
        prompt = f"""**User's Goal:**
{input.goal}

**Available Technologies (Your Knowledge Base):**
Consider how the following frameworks and protocols could be integrated or drawn
upon as inspiration. Do not simply list them; explain how their concepts can be
woven into a cohesive new architecture.
{catalogue}

---
**EXAMPLE (for the goal "an automated system for booking travel"):**

{EXAMPLE_DESIGN}
---

**YOUR TASK:** Generate a similarly detailed architectural proposal for the user's goal.
Your output must be a markdown document with the same sections as the example."""
        architecture = await self._call_llm(prompt, FRAMEWORK_DESIGN_SYSTEM_PROMPT)
        return DesignFrameworkOutput(architecture=architecture.strip())
