"""Shared fixtures for the Arcade Studio test suite.

Provides canned oracle replies, mock oracles for every agent and a
FastAPI test client wired to a chain that never leaves the process.
"""

import json
from itertools import cycle
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from arcade_studio.agents.analyst import AnalystAgent
from arcade_studio.agents.assistant import AssistantAgent
from arcade_studio.agents.editor import EditorAgent
from arcade_studio.agents.generator import GeneratorAgent
from arcade_studio.agents.oracle import OracleClient
from arcade_studio.chains.game_chain import GameStudioChain
from arcade_studio.session import SessionStore, StudioSession


SAMPLE_LABELS = (
    "Language/Idioma, Play/Jugar, How to Play/Cómo Jugar, Settings/Configuración, "
    "October 28, 2025/28 octubre 2025, by %user%/de %user%, Made with AINARA/Hecho con AINARA"
)

SAMPLE_DESCRIPTOR = {
    "title": "Match Game",
    "description": "Match each Spanish word with its picture.",
    "target_lang": "es",
    "comf_language": "en",
    "labels": "Language/Idioma, Play/Jugar, How to Play/Cómo Jugar, Settings/Configuración, "
              "Date/Fecha, by %user%/de %user%, Made with AINARA/Hecho con AINARA",
    "how_to_play": ["Click a card", "Find its pair"],
}

SAMPLE_SCRIPT = "const timeLimit = 60;\nwindow.addEventListener('gameStart', () => start(timeLimit));"

SAMPLE_PARAMETER_RECORDS = [
    {"name": "timeLimit", "description": "Seconds per round", "type": "number", "value": "60"},
    {"name": "words", "description": "The words to match", "type": "array_string", "value": '["gato", "perro"]'},
]

SAMPLE_SUGGESTIONS = {"suggestions": ["Add a timer bar.", "Add sound effects.", "Add levels.", "Add a fourth idea."]}


def make_raw_response(descriptor=None, script=SAMPLE_SCRIPT) -> str:
    header = json.dumps(descriptor or SAMPLE_DESCRIPTOR, ensure_ascii=False)
    return f"{header}\n%%BEGINCODE%%\n<script>\n{script}\n</script>\n%%ENDCODE%%"


def make_mock_oracle(*replies, error=None):
    """MagicMock oracle whose ask() cycles through the replies, or raises."""
    oracle = MagicMock(spec=OracleClient)
    oracle.model = "fake-model"
    if error is not None:
        oracle.ask.side_effect = error
    elif len(replies) == 1:
        oracle.ask.return_value = replies[0]
    else:
        oracle.ask.side_effect = cycle(replies)
    return oracle


@pytest.fixture
def raw_response():
    return make_raw_response()


@pytest.fixture
def fake_llm_factory():
    """Build an oracle on top of LangChain's fake chat model."""
    def _factory(*responses):
        return OracleClient(llm=FakeListChatModel(responses=list(responses)))
    return _factory


@pytest.fixture
def session():
    return StudioSession(session_id="test-session")


@pytest.fixture
def generator_oracle(raw_response):
    return make_mock_oracle(raw_response)


@pytest.fixture
def editor_oracle():
    return make_mock_oracle("```javascript\nconst timeLimit = 30;\n```")


@pytest.fixture
def analyst_oracle():
    return make_mock_oracle(SAMPLE_PARAMETER_RECORDS, SAMPLE_SUGGESTIONS)


@pytest.fixture
def studio_chain(generator_oracle, editor_oracle, analyst_oracle):
    return GameStudioChain(
        generator=GeneratorAgent(oracle=generator_oracle),
        editor=EditorAgent(oracle=editor_oracle),
        analyst=AnalystAgent(oracle=analyst_oracle),
    )


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def api_client(studio_chain, store):
    from arcade_studio import main

    main.app.dependency_overrides[main.get_chain] = lambda: studio_chain
    main.app.dependency_overrides[main.get_store] = lambda: store
    with TestClient(main.app) as client:
        yield client
    main.app.dependency_overrides.clear()


@pytest.fixture
def chat_session(store):
    """Session whose assistant answers from a canned reply."""
    reply = json.dumps({
        "header": "¡Hola!",
        "body": "1. A bingo game with animals &&IDEA&&\nWant more?",
        "footer": "AINARA",
        "language": "es",
    }, ensure_ascii=False)
    session = store.get_or_create("chat-session")
    session.assistant = AssistantAgent(oracle=make_mock_oracle(reply))
    return session
