"""
Editor Agent - Applies teacher-requested changes and fixes to a game script.
"""

import re
from typing import Dict, Iterable, Optional

from .oracle import OracleClient
from ..prompts.templates import EDIT_SYSTEM_INSTRUCTION, build_edit_request, format_changes

NO_CHANGES_ERROR = "No changes were requested."


class EditorAgent:
    """Script Editing Agent - sends the whole script back with a change list."""

    def __init__(self, oracle: Optional[OracleClient] = None):
        self.oracle = oracle or OracleClient(tier="light", temperature=0.3)
        self.model = self.oracle.model

    def edit(
        self,
        script: str,
        parameter_changes: Optional[Dict[str, float]] = None,
        features: Optional[Iterable[str]] = None,
        general_request: str = "",
        fix: bool = False,
        fix_context: str = "",
        fix_symptoms: Optional[Iterable[str]] = None,
    ) -> str:
        """
        Return the updated script.

        Raises:
            ValueError: when there is no script or nothing was requested
            OracleError: when the oracle call fails
        """
        if not script:
            raise ValueError("There is no game script to edit.")

        changes = format_changes(
            parameter_changes=parameter_changes,
            features=features,
            general_request=general_request,
            fix=fix,
            fix_context=fix_context,
            fix_symptoms=fix_symptoms,
        )
        if not changes:
            raise ValueError(NO_CHANGES_ERROR)

        raw_script = self.oracle.ask(EDIT_SYSTEM_INSTRUCTION, build_edit_request(script, changes))
        new_script = self._strip_code_fence(raw_script)
        print(f"✏️ Editor returned {len(new_script)} chars (was {len(script)})")
        return new_script

    def _strip_code_fence(self, text: str) -> str:
        """Drop a ```javascript wrapper the model was told not to add."""
        text = re.sub(r"^```(?:javascript|js)?[ \t]*\n?", "", text.strip(), count=1, flags=re.IGNORECASE)
        text = re.sub(r"\n?```\s*$", "", text)
        return text.strip()
