"""
Analyst Agent - Reads a finished game script and proposes teacher-friendly edits.
Two best-effort passes: configurable parameters, then feature suggestions.
"""

from typing import List, Optional

from .oracle import OracleClient, OracleFormatError, OutputShape
from ..parsers.parameters import ConfigurableParameter, coerce_parameters
from ..prompts.templates import (
    ANALYSIS_SYSTEM_INSTRUCTION,
    SUGGESTION_SYSTEM_INSTRUCTION,
    build_analysis_request,
    build_suggestion_request,
)

MAX_SUGGESTIONS = 3


class AnalystAgent:
    """
    Script Analysis Agent.

    Both passes raise on oracle failure; the studio graph turns those
    failures into empty results so they never block a generated game.
    """

    def __init__(self, oracle: Optional[OracleClient] = None):
        self.oracle = oracle or OracleClient(tier="light", temperature=0.2)
        self.model = self.oracle.model

    def extract_parameters(self, script: str) -> List[ConfigurableParameter]:
        """Ask which variables a teacher could tweak and coerce their values."""
        if not script:
            return []
        records = self.oracle.ask(
            ANALYSIS_SYSTEM_INSTRUCTION,
            build_analysis_request(script),
            shape=OutputShape.JSON_ARRAY,
        )
        if not isinstance(records, list):
            raise OracleFormatError("The AI analysis was not a JSON array.", raw=str(records))
        params = coerce_parameters(records)
        print(f"🔎 Analyst found {len(params)} configurable parameters")
        return params

    def suggest_features(self, script: str) -> List[str]:
        """Ask for up to three new feature ideas."""
        if not script:
            return []
        data = self.oracle.ask(
            SUGGESTION_SYSTEM_INSTRUCTION,
            build_suggestion_request(script),
            shape=OutputShape.JSON_OBJECT,
        )
        suggestions = data.get("suggestions") if isinstance(data, dict) else None
        if not isinstance(suggestions, list):
            return []
        return [str(s).strip() for s in suggestions if str(s).strip()][:MAX_SUGGESTIONS]
