"""
Conversation Agent - Two personas discuss a topic in alternating turns.

FLOW:
1. Creative speaks first, given a fixed kickoff line
2. Each speaker sees the topic, the full history and the other's last message
3. Speakers alternate until 2 * num_turns messages exist
"""

import logging
from typing import Any, Dict, List

from chimera.agents.base import BaseAgent, AgentRole
from chimera.api.middleware.error_handler import FlowError
from chimera.models.schemas import ConversationInput, ConversationOutput, ConversationTurn

logger = logging.getLogger(__name__)

KICKOFF_MESSAGE = "The discussion is just beginning. Start the conversation with your perspective."

PERSONA_PROMPTS: Dict[str, str] = {
    "Pragmatist": (
        "You are a pragmatic, logical AI. Your goal is to provide clear, concise, and "
        "fact-based responses. You avoid speculation and stick to what is known."
    ),
    "Creative": (
        "You are a creative, imaginative AI. You enjoy exploring possibilities, using "
        "metaphors, and thinking outside the box. Your responses are expressive and open-ended."
    ),
}

_CLOSINGS = {
    "Pragmatist": "Keep your response focused and to the point.",
    "Creative": "Feel free to be expressive and introduce new angles.",
}


class ConversationAgent(BaseAgent):
    """Runs a Creative/Pragmatist dialogue."""

    role = AgentRole.CONVERSATION

    def __init__(self, llm_client: Any):
        super().__init__(llm_client)

    async def run(self, input: ConversationInput) -> ConversationOutput:
        conversation: List[ConversationTurn] = []
        history = ""
        last_message = KICKOFF_MESSAGE
        speaker = "Creative"

        for _ in range(input.num_turns * 2):
            prompt = self._build_prompt(speaker, input.topic, history, last_message)
            try:
                text = await self._call_llm(prompt, PERSONA_PROMPTS[speaker])
            except FlowError as e:
                raise FlowError(f"{speaker} agent failed to respond.", flow="conversation") from e
            if not text or not text.strip():
                raise FlowError(f"{speaker} agent failed to respond.", flow="conversation")

            text = text.strip()
            conversation.append(ConversationTurn(agent=speaker, text=text))
            history += f"{speaker}: {text}\n"
            last_message = text
            speaker = "Pragmatist" if speaker == "Creative" else "Creative"

        logger.debug("Conversation on %r finished with %d turns", input.topic, len(conversation))
        return ConversationOutput(conversation=conversation)

    @staticmethod
    def _build_prompt(speaker: str, topic: str, history: str, last_message: str) -> str:
        return f"""You are discussing the following topic with another AI: {topic}

The full conversation history so far is:
---
{history}
---

The other AI has just said: "{last_message}"

Provide your response to continue the conversation. {_CLOSINGS[speaker]}"""
