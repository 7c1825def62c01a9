"""
Studio Session - In-memory state for one teacher's workspace.
Holds the current game, its analysis, the chat history and the in-flight flags.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterator, List, Optional, Set, Union

from .agents.assistant import AssistantAgent
from .parsers.chat_parser import AssistantTurn, UserTurn
from .parsers.game_parser import GameDescriptor, RejectionNotice
from .parsers.parameters import ConfigurableParameter, dump_parameters

PURPOSES = ("generate", "edit", "analyze", "chat")

ChatMessage = Union[UserTurn, AssistantTurn]


class OperationInProgress(RuntimeError):
    """A request for the same purpose is still outstanding."""

    def __init__(self, purpose: str):
        super().__init__(f"A '{purpose}' request is already in progress for this session.")
        self.purpose = purpose


@dataclass
class StudioSession:
    """Everything the studio knows about one session. Nothing is persisted."""
    session_id: str
    descriptor: Optional[GameDescriptor] = None
    script: Optional[str] = None
    parameters: List[ConfigurableParameter] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    rejection: Optional[RejectionNotice] = None
    error: Optional[str] = None
    auth_required: bool = False
    messages: List[ChatMessage] = field(default_factory=list)
    assistant: Optional[AssistantAgent] = None
    in_flight: Set[str] = field(default_factory=set)
    _flag_lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    @property
    def has_game(self) -> bool:
        return self.descriptor is not None and bool(self.script)

    def is_busy(self, purpose: str) -> bool:
        with self._flag_lock:
            return purpose in self.in_flight

    @contextmanager
    def begin(self, purpose: str) -> Iterator["StudioSession"]:
        """Hold the in-flight flag for a purpose; refuse a second holder."""
        if purpose not in PURPOSES:
            raise ValueError(f"Unknown purpose: {purpose}")
        with self._flag_lock:
            if purpose in self.in_flight:
                raise OperationInProgress(purpose)
            self.in_flight.add(purpose)
        try:
            yield self
        finally:
            with self._flag_lock:
                self.in_flight.discard(purpose)

    def get_assistant(self) -> AssistantAgent:
        """Lazily create the per-session chat agent."""
        if self.assistant is None:
            self.assistant = AssistantAgent()
        return self.assistant

    def clear_chat(self) -> None:
        self.messages = []
        if self.assistant is not None:
            self.assistant.clear()

    def snapshot(self) -> dict:
        """Serializable view of the session for API responses."""
        return {
            "session_id": self.session_id,
            "game_data": self.descriptor.model_dump() if self.descriptor else None,
            "game_script": self.script,
            "parameters": dump_parameters(self.parameters),
            "suggestions": list(self.suggestions),
            "rejection": self.rejection.model_dump() if self.rejection else None,
            "error": self.error,
            "auth_required": self.auth_required,
            "messages": [m.model_dump() for m in self.messages],
            "in_flight": sorted(self.in_flight),
        }


class SessionStore:
    """Process-wide registry of studio sessions."""

    def __init__(self):
        self._sessions: Dict[str, StudioSession] = {}
        self._lock = Lock()

    def get(self, session_id: str) -> Optional[StudioSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> StudioSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = StudioSession(session_id=session_id)
                self._sessions[session_id] = session
                print(f"🆕 New studio session: {session_id}")
            return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
