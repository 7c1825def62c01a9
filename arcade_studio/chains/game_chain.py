"""
Game Studio Chain - Orchestrates studio actions against a session.
Runs the studio graph, applies its outcome to the session and reports progress.
No retries: every failure is reported once and waits for the user.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from dotenv import load_dotenv

from ..agents.analyst import AnalystAgent
from ..agents.editor import EditorAgent
from ..agents.generator import GeneratorAgent
from ..agents.oracle import OracleAuthError
from ..graphs.studio_graph import StudioGraph, StudioState
from ..parsers.chat_parser import AssistantTurn, UserTurn, api_error_turn
from ..session import StudioSession

load_dotenv()


@dataclass
class PipelineStep:
    """Represents a single step in a studio action."""
    name: str
    status: str  # 'pending', 'running', 'completed', 'failed'
    message: str = ""
    duration: float = 0.0


@dataclass
class StudioResult:
    """Outcome of one studio action."""
    success: bool
    status: str  # 'ready', 'rejected', 'failed'
    error: Optional[str] = None
    auth_required: bool = False
    generation_time: float = 0.0
    steps_completed: List[str] = field(default_factory=list)


class GameStudioChain:
    """
    Studio pipeline: generate / edit / import, then best-effort analysis.

    The chain never holds game state itself; everything lives on the
    StudioSession passed to each call.
    """

    def __init__(
        self,
        generator: Optional[GeneratorAgent] = None,
        editor: Optional[EditorAgent] = None,
        analyst: Optional[AnalystAgent] = None,
        on_progress: Optional[Callable[[PipelineStep], None]] = None,
    ):
        self.on_progress = on_progress
        self.verbose_logs = os.getenv("VERBOSE_LOGS", "0") == "1"
        self.graph = StudioGraph(
            generator=generator,
            editor=editor,
            analyst=analyst,
            on_progress=lambda msg: print(msg),
        )

    def _notify_progress(self, steps: List[PipelineStep], step: PipelineStep):
        steps.append(step)
        if self.on_progress:
            self.on_progress(step)

    # ============ STUDIO ACTIONS ============

    def generate(self, session: StudioSession, game_idea: str, target_lang: str, comf_lang: str) -> StudioResult:
        """Create a new game from an idea. Replaces the session's game."""
        with session.begin("generate"):
            session.error = None
            session.rejection = None
            session.descriptor = None
            session.script = None
            session.parameters = []
            session.suggestions = []
            return self._run(session, "Generation", {
                "mode": "generate",
                "game_idea": game_idea,
                "target_lang": target_lang,
                "comf_lang": comf_lang,
            })

    def edit(
        self,
        session: StudioSession,
        parameter_changes: Optional[Dict[str, float]] = None,
        features: Optional[Iterable[str]] = None,
        general_request: str = "",
        fix: bool = False,
        fix_context: str = "",
        fix_symptoms: Optional[Iterable[str]] = None,
    ) -> StudioResult:
        """Apply teacher changes to the current script. The descriptor stays."""
        with session.begin("edit"):
            session.error = None
            return self._run(session, "Editing", {
                "mode": "edit",
                "descriptor": session.descriptor,
                "script": session.script,
                "edit_request": {
                    "parameter_changes": dict(parameter_changes or {}),
                    "features": list(features or []),
                    "general_request": general_request or "",
                    "fix": fix,
                    "fix_context": fix_context or "",
                    "fix_symptoms": list(fix_symptoms or []),
                },
            })

    def import_file(self, session: StudioSession, content: str) -> StudioResult:
        """Load an exported game file. A bad file leaves the current game alone."""
        session.error = None
        return self._run(session, "Import", {"mode": "import", "content": content})

    def chat(self, session: StudioSession, message: str) -> AssistantTurn:
        """Send one chat message to the session's assistant."""
        with session.begin("chat"):
            assistant = session.get_assistant()
            session.messages.append(UserTurn(content=message))
            session.auth_required = False
            try:
                turn = assistant.send(message)
            except OracleAuthError as e:
                session.auth_required = True
                session.error = str(e)
                turn = api_error_turn(str(e))
            session.messages.append(turn)
            return turn

    def clear_chat(self, session: StudioSession) -> None:
        session.clear_chat()

    # ============ INTERNALS ============

    def _run(self, session: StudioSession, step_name: str, initial_state: StudioState) -> StudioResult:
        start_time = datetime.now()
        steps: List[PipelineStep] = []
        print(f"\n{'='*50}")
        print(f"🕹️ {step_name.upper()} - session {session.session_id}")
        print(f"{'='*50}")
        self._notify_progress(steps, PipelineStep(name=step_name, status="running", message=f"{step_name} started"))
        session.auth_required = False

        final_state = self.graph.run(initial_state, analysis_guard=lambda: session.begin("analyze"))
        self._apply(session, initial_state["mode"], final_state)

        elapsed = (datetime.now() - start_time).total_seconds()
        status = final_state.get("status", "failed")
        success = status == "ready"
        self._notify_progress(steps, PipelineStep(
            name=step_name,
            status="completed" if success else "failed",
            message=final_state.get("error") or status,
            duration=elapsed,
        ))
        if success:
            print(f"✅ {step_name} finished in {elapsed:.1f}s "
                  f"({len(session.parameters)} parameters, {len(session.suggestions)} suggestions)")
        else:
            print(f"❌ {step_name} ended with status '{status}' after {elapsed:.1f}s")

        return StudioResult(
            success=success,
            status=status,
            error=final_state.get("error"),
            auth_required=bool(final_state.get("auth_required")),
            generation_time=elapsed,
            steps_completed=[s.name for s in steps if s.status == "completed"],
        )

    def _apply(self, session: StudioSession, mode: str, state: StudioState) -> None:
        """Copy the graph's outcome onto the session."""
        status = state.get("status")
        if state.get("auth_required"):
            session.auth_required = True

        if status == "ready":
            if mode != "edit":
                session.descriptor = state.get("descriptor")
                session.rejection = None
            session.script = state.get("script")
            session.parameters = list(state.get("parameters") or [])
            session.suggestions = list(state.get("suggestions") or [])
            session.error = None
        elif status == "rejected":
            session.rejection = state.get("rejection")
        else:
            session.error = state.get("error")
