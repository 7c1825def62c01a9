"""
Assistant Agent - AINARA, the chat helper for teachers.
Keeps its own conversation history and oracle handle per session.
"""

from typing import List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from .oracle import OracleAuthError, OracleClient, OracleError
from ..parsers.chat_parser import AssistantTurn, api_error_turn, parse_assistant_reply
from ..prompts.templates import ASSISTANT_PERSONA


class AssistantAgent:
    """Chat agent with a fixed persona and a structured JSON reply format."""

    def __init__(self, oracle: Optional[OracleClient] = None):
        self.oracle = oracle or OracleClient(tier="light", temperature=0.8)
        self.model = self.oracle.model
        self.history: List[BaseMessage] = []

    def send(self, message: str) -> AssistantTurn:
        """
        Send one user message and return the assistant turn.

        Malformed replies and generic oracle failures come back as error
        turns. Authorization failures are re-raised so the caller can ask
        for a new key.
        """
        if not (message or "").strip():
            raise ValueError("Message is empty.")

        try:
            raw_text = self.oracle.ask(ASSISTANT_PERSONA, message, history=list(self.history))
        except OracleAuthError:
            raise
        except OracleError as e:
            print(f"⚠️ Chat request failed: {e}")
            return api_error_turn(str(e))

        self.history.append(HumanMessage(content=message))
        self.history.append(AIMessage(content=raw_text))
        return parse_assistant_reply(raw_text)

    def clear(self) -> None:
        self.history = []
