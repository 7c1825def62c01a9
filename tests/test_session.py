"""Tests for studio sessions and in-flight flags."""

import pytest

from arcade_studio.parsers.chat_parser import UserTurn
from arcade_studio.session import OperationInProgress, SessionStore, StudioSession


class TestInFlightFlags:
    def test_flag_held_and_released(self, session):
        with session.begin("generate"):
            assert session.is_busy("generate")
        assert not session.is_busy("generate")

    def test_second_holder_refused(self, session):
        with session.begin("edit"):
            with pytest.raises(OperationInProgress) as exc:
                with session.begin("edit"):
                    pass
            assert exc.value.purpose == "edit"

    def test_purposes_are_independent(self, session):
        with session.begin("generate"):
            with session.begin("chat"):
                assert session.is_busy("chat")

    def test_released_after_exception(self, session):
        with pytest.raises(RuntimeError):
            with session.begin("analyze"):
                raise RuntimeError("boom")
        assert not session.is_busy("analyze")

    def test_unknown_purpose(self, session):
        with pytest.raises(ValueError):
            with session.begin("dance"):
                pass


class TestSnapshot:
    def test_empty_session(self, session):
        snap = session.snapshot()
        assert snap["session_id"] == "test-session"
        assert snap["game_data"] is None
        assert snap["parameters"] == []
        assert snap["auth_required"] is False

    def test_messages_serialized(self, session):
        session.messages.append(UserTurn(content="hola"))
        assert session.snapshot()["messages"] == [{"content": "hola", "role": "user"}]

    def test_clear_chat(self, session):
        session.messages.append(UserTurn(content="hola"))
        session.clear_chat()
        assert session.messages == []


class TestSessionStore:
    def test_get_or_create_is_stable(self):
        store = SessionStore()
        first = store.get_or_create("abc")
        assert store.get_or_create("abc") is first
        assert store.get("abc") is first
        assert len(store) == 1

    def test_unknown_session(self):
        assert SessionStore().get("missing") is None

    def test_new_session_is_empty(self):
        session = StudioSession(session_id="x")
        assert not session.has_game
