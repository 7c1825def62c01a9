"""
Generator Agent - Turns a teacher's game idea into a descriptor and a game script.
Uses the primary (strongest) oracle tier.
"""

from typing import Optional

from .oracle import OracleClient
from ..parsers.game_parser import GameResponseParser, ParseResult
from ..prompts.templates import GAME_SYSTEM_INSTRUCTION, build_game_request

MISSING_INPUT_ERROR = "Please fill out all fields to generate a game."


class GeneratorAgent:
    """Game Generation Agent - one oracle call, one parse."""

    def __init__(self, oracle: Optional[OracleClient] = None):
        self.oracle = oracle or OracleClient(tier="primary", temperature=0.7)
        self.model = self.oracle.model
        self.parser = GameResponseParser()

    def generate(self, game_idea: str, target_lang: str, comf_lang: str) -> ParseResult:
        """
        Ask the oracle for a new game and parse the reply.

        Raises:
            ValueError: when any of the three inputs is blank
            OracleError: when the oracle call itself fails
        """
        if not (game_idea or "").strip() or not (target_lang or "").strip() or not (comf_lang or "").strip():
            raise ValueError(MISSING_INPUT_ERROR)

        payload = build_game_request(game_idea, target_lang, comf_lang)
        raw_output = self.oracle.ask(GAME_SYSTEM_INSTRUCTION, payload)
        print(f"✅ Generator received {len(raw_output)} chars from {self.model}")
        return self.parser.parse(raw_output)
