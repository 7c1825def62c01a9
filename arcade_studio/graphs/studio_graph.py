"""
Studio Graph - LangGraph flow for one studio action.
A primary step (generate, edit or import) produces a game; a successful game
is then analyzed for configurable parameters and, if that worked, feature
suggestions. Analysis never fails the action.
"""

import os
from contextlib import nullcontext
from operator import add
from typing import Annotated, Any, Callable, Dict, List, Optional, TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from ..agents.analyst import AnalystAgent
from ..agents.editor import EditorAgent
from ..agents.generator import GeneratorAgent
from ..agents.oracle import OracleAuthError, OracleError
from ..parsers.game_parser import GameDescriptor, ParseResult, ParseStatus, RejectionNotice
from ..utils.export import import_game


# ============ STATE DEFINITION ============

class StudioState(TypedDict, total=False):
    """State that flows through the studio graph."""
    # Input
    mode: str  # 'generate', 'edit', 'import'
    game_idea: str
    target_lang: str
    comf_lang: str
    content: str
    edit_request: Dict[str, Any]

    # Game state
    descriptor: Optional[GameDescriptor]
    script: Optional[str]
    rejection: Optional[RejectionNotice]

    # Analysis
    parameters: List[Any]
    parameters_ok: bool
    suggestions: List[str]

    # Outcome
    status: str  # 'ready', 'rejected', 'failed'
    error: Optional[str]
    auth_required: bool

    # Progress log
    messages: Annotated[List[str], add]


# ============ GRAPH ============

class StudioGraph:
    """
    Flow:
        START → [mode] → generate | edit | import
                            └── game ready? → analyze → parameters ok? → suggest → END
    """

    ERROR_CONTEXTS = {
        "generate": "API Error",
        "edit": "Error editing game",
        "import": "Error importing game",
    }

    def __init__(
        self,
        generator: Optional[GeneratorAgent] = None,
        editor: Optional[EditorAgent] = None,
        analyst: Optional[AnalystAgent] = None,
        on_progress: Optional[Callable[[str], None]] = None,
    ):
        self.generator = generator or GeneratorAgent()
        self.editor = editor or EditorAgent()
        self.analyst = analyst or AnalystAgent()
        self.on_progress = on_progress
        self.verbose_logs = os.getenv("VERBOSE_LOGS", "0") == "1"

        self.graph = self._build_graph()
        self.compiled_graph = self.graph.compile()

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(StudioState)

        graph.add_node("generate", self._generate_node)
        graph.add_node("edit", self._edit_node)
        graph.add_node("import", self._import_node)
        graph.add_node("analyze", self._analyze_node)
        graph.add_node("suggest", self._suggest_node)

        graph.add_conditional_edges(
            START,
            self._route_mode,
            {"generate": "generate", "edit": "edit", "import": "import"},
        )
        for node in ("generate", "edit", "import"):
            graph.add_conditional_edges(
                node,
                self._should_analyze,
                {"analyze": "analyze", "done": END},
            )
        graph.add_conditional_edges(
            "analyze",
            self._should_suggest,
            {"suggest": "suggest", "done": END},
        )
        graph.add_edge("suggest", END)
        return graph

    def _notify(self, message: str):
        if self.on_progress:
            self.on_progress(message)
        else:
            print(message)

    # ============ ROUTING ============

    def _route_mode(self, state: StudioState) -> str:
        mode = state.get("mode", "generate")
        if mode not in self.ERROR_CONTEXTS:
            raise ValueError(f"Unknown studio mode: {mode}")
        return mode

    def _should_analyze(self, state: StudioState) -> str:
        if state.get("status") == "ready" and state.get("script"):
            return "analyze"
        return "done"

    def _should_suggest(self, state: StudioState) -> str:
        return "suggest" if state.get("parameters_ok") else "done"

    # ============ PRIMARY NODES ============

    def _generate_node(self, state: StudioState) -> Dict[str, Any]:
        self._notify("🎮 Generating game...")
        try:
            result = self.generator.generate(
                state.get("game_idea", ""),
                state.get("target_lang", ""),
                state.get("comf_lang", ""),
            )
        except ValueError as e:
            return self._failed(str(e))
        except OracleError as e:
            return self._oracle_failed("generate", e)
        return self._from_parse_result(result)

    def _edit_node(self, state: StudioState) -> Dict[str, Any]:
        self._notify("✏️ Applying edits...")
        request = state.get("edit_request") or {}
        try:
            new_script = self.editor.edit(state.get("script") or "", **request)
        except ValueError as e:
            return self._failed(str(e))
        except OracleError as e:
            return self._oracle_failed("edit", e)
        return {
            "script": new_script,
            "status": "ready",
            "error": None,
            "messages": ["edit: script updated"],
        }

    def _import_node(self, state: StudioState) -> Dict[str, Any]:
        self._notify("📂 Importing game file...")
        return self._from_parse_result(import_game(state.get("content", "")))

    def _from_parse_result(self, result: ParseResult) -> Dict[str, Any]:
        if result.status == ParseStatus.PARSED:
            return {
                "descriptor": result.descriptor,
                "script": result.script,
                "rejection": None,
                "status": "ready",
                "error": None,
                "messages": [f"parsed: {result.descriptor.title}"],
            }
        if result.status == ParseStatus.REJECTED:
            self._notify(f"🚫 Request rejected: {result.rejection.reason}")
            return {
                "descriptor": None,
                "script": None,
                "rejection": result.rejection,
                "status": "rejected",
                "error": None,
                "messages": ["rejected"],
            }
        if result.status == ParseStatus.IDLE:
            return self._failed("Nothing to parse: the response was empty.")
        self._notify(f"❌ {result.error}")
        return self._failed(result.error_report())

    def _failed(self, error: str) -> Dict[str, Any]:
        return {"status": "failed", "error": error, "messages": [f"failed: {error.splitlines()[0] if error else ''}"]}

    def _oracle_failed(self, mode: str, error: OracleError) -> Dict[str, Any]:
        if isinstance(error, OracleAuthError):
            self._notify("🔑 Oracle rejected the API key")
            update = self._failed(str(error))
            update["auth_required"] = True
            return update
        self._notify(f"❌ {self.ERROR_CONTEXTS[mode]}: {error}")
        return self._failed(f"{self.ERROR_CONTEXTS[mode]}: {error}")

    # ============ ANALYSIS NODES ============

    def _guard(self, config: Optional[RunnableConfig]):
        guard = ((config or {}).get("configurable") or {}).get("analysis_guard")
        return guard() if guard else nullcontext()

    def _analyze_node(self, state: StudioState, config: RunnableConfig) -> Dict[str, Any]:
        self._notify("🔎 Analyzing game parameters...")
        try:
            with self._guard(config):
                parameters = self.analyst.extract_parameters(state["script"])
        except OracleAuthError:
            print("⚠️ Parameter analysis skipped: API key rejected")
            return {"parameters": [], "parameters_ok": False, "auth_required": True,
                    "messages": ["analyze: auth error"]}
        except (OracleError, RuntimeError) as e:
            print(f"⚠️ Error analyzing game script: {e}")
            return {"parameters": [], "parameters_ok": False, "messages": ["analyze: degraded"]}
        return {"parameters": parameters, "parameters_ok": True,
                "messages": [f"analyze: {len(parameters)} parameters"]}

    def _suggest_node(self, state: StudioState, config: RunnableConfig) -> Dict[str, Any]:
        self._notify("💡 Asking for feature suggestions...")
        try:
            with self._guard(config):
                suggestions = self.analyst.suggest_features(state["script"])
        except OracleAuthError:
            print("⚠️ Feature suggestions skipped: API key rejected")
            return {"suggestions": [], "auth_required": True, "messages": ["suggest: auth error"]}
        except (OracleError, RuntimeError) as e:
            print(f"⚠️ Error getting edit suggestions: {e}")
            return {"suggestions": [], "messages": ["suggest: degraded"]}
        return {"suggestions": suggestions, "messages": [f"suggest: {len(suggestions)} ideas"]}

    # ============ ENTRY POINT ============

    def run(self, initial_state: StudioState, analysis_guard: Optional[Callable] = None) -> StudioState:
        """Run one studio action and return the final state."""
        state: StudioState = {
            "parameters": [],
            "parameters_ok": False,
            "suggestions": [],
            "auth_required": False,
            "error": None,
            "messages": [],
        }
        state.update(initial_state)
        config: RunnableConfig = {"configurable": {"analysis_guard": analysis_guard}}
        final_state = self.compiled_graph.invoke(state, config=config)
        if self.verbose_logs:
            for line in final_state.get("messages", []):
                print(f"   · {line}")
        return final_state
