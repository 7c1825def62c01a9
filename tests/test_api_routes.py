"""Tests for the FastAPI routes."""

from itertools import cycle

from conftest import SAMPLE_SUGGESTIONS, make_raw_response


def _generate(client, session_id="s1"):
    return client.post("/api/generate", json={
        "session_id": session_id,
        "idea": "memory game with fruit",
        "target_lang": "Spanish",
        "comf_lang": "English",
    })


class TestPages:
    def test_index(self, api_client):
        resp = api_client.get("/")
        assert resp.status_code == 200
        assert "Arcade Studio" in resp.text
        assert "and the buttons don" in resp.text

    def test_health(self, api_client):
        resp = api_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestGenerateRoute:
    def test_generate_success(self, api_client):
        resp = _generate(api_client)
        data = resp.json()
        assert resp.status_code == 200
        assert data["success"] is True
        assert data["session_id"] == "s1"
        assert data["state"]["game_data"]["title"] == "Match Game"
        assert data["state"]["parameters"][0] == {
            "name": "timeLimit", "description": "Seconds per round", "kind": "number", "value": 60,
        }
        assert len(data["state"]["suggestions"]) == 3

    def test_generate_assigns_session_id(self, api_client):
        data = _generate(api_client, session_id="").json()
        assert data["session_id"]

    def test_generate_missing_fields(self, api_client):
        resp = api_client.post("/api/generate", json={"session_id": "s1", "idea": "x"})
        data = resp.json()
        assert data["success"] is False
        assert data["error"] == "Please fill out all fields to generate a game."

    def test_generate_in_flight_conflict(self, api_client, store):
        session = store.get_or_create("busy")
        with session.begin("generate"):
            resp = _generate(api_client, session_id="busy")
        assert resp.status_code == 409


class TestEditRoute:
    def test_edit_unknown_session(self, api_client):
        resp = api_client.post("/api/edit", json={"session_id": "nope", "general_request": "faster"})
        assert resp.status_code == 404

    def test_edit_without_game(self, api_client, store):
        store.get_or_create("empty")
        resp = api_client.post("/api/edit", json={"session_id": "empty", "general_request": "faster"})
        assert resp.status_code == 400

    def test_edit_success(self, api_client):
        _generate(api_client)
        resp = api_client.post("/api/edit", json={"session_id": "s1", "parameter_changes": {"timeLimit": 30}})
        data = resp.json()
        assert data["success"] is True
        assert data["state"]["game_script"] == "const timeLimit = 30;"

    def test_edit_nothing_requested(self, api_client):
        _generate(api_client)
        data = api_client.post("/api/edit", json={"session_id": "s1"}).json()
        assert data["success"] is False
        assert data["error"] == "No changes were requested."


class TestImportExportPreview:
    def test_export(self, api_client):
        _generate(api_client)
        resp = api_client.get("/api/export/s1")
        assert resp.status_code == 200
        assert 'filename="match-game.txt"' in resp.headers["content-disposition"]
        assert "\n%%BEGINCODE%%\n" in resp.text
        assert resp.text.endswith("%%ENDCODE%%\n")

    def test_export_without_game(self, api_client, store):
        store.get_or_create("empty")
        assert api_client.get("/api/export/empty").status_code == 404

    def test_export_then_import(self, api_client):
        _generate(api_client)
        exported = api_client.get("/api/export/s1").text
        data = api_client.post("/api/import", json={"session_id": "s2", "content": exported}).json()
        assert data["success"] is True
        assert data["state"]["game_data"]["title"] == "Match Game"

    def test_import_bad_file(self, api_client):
        data = api_client.post("/api/import", json={"session_id": "s3", "content": "hello"}).json()
        assert data["success"] is False
        assert "Raw AI Output:\nhello" in data["error"]

    def test_import_rejection_file(self, api_client):
        data = api_client.post("/api/import", json={
            "session_id": "s4", "content": '{"rejected": true, "reason": "No audio"}',
        }).json()
        assert data["status"] == "rejected"
        assert data["state"]["rejection"]["reason"] == "No audio"

    def test_preview(self, api_client):
        _generate(api_client)
        resp = api_client.get("/api/preview/s1")
        assert resp.status_code == 200
        assert "<h1>Match Game</h1>" in resp.text

    def test_preview_placeholder(self, api_client):
        resp = api_client.get("/api/preview/unknown")
        assert "Generate a game to see the preview." in resp.text

    def test_session_state(self, api_client):
        api_client.post("/api/import", json={"session_id": "s5", "content": make_raw_response()})
        data = api_client.get("/api/session/s5").json()
        assert data["game_data"]["title"] == "Match Game"
        assert data["in_flight"] == []

    def test_unknown_session_state(self, api_client):
        assert api_client.get("/api/session/missing").status_code == 404

    def test_session_state_with_infinite_parameter(self, api_client, analyst_oracle):
        lives = {"name": "lives", "description": "Lives left", "type": "number", "value": "Infinity"}
        analyst_oracle.ask.side_effect = cycle([[lives], SAMPLE_SUGGESTIONS])
        generated = _generate(api_client).json()
        assert generated["state"]["parameters"] == [
            {"name": "lives", "description": "Lives left", "kind": "string", "value": "Infinity"},
        ]
        resp = api_client.get("/api/session/s1")
        assert resp.status_code == 200
        assert resp.json()["parameters"][0]["value"] == "Infinity"


class TestChatRoute:
    def test_chat_with_idea_offer(self, api_client, chat_session):
        resp = api_client.post("/api/chat", json={"session_id": "chat-session", "message": "Ideas?"})
        data = resp.json()
        assert data["success"] is True
        assert data["header"] == "¡Hola!"
        assert data["language"] == "es"
        assert data["segments"][0]["idea"] == "A bingo game with animals"
        assert data["segments"][1]["idea"] is None
        assert "&&IDEA&&" not in data["copy_text"]
        assert data["copy_text"].startswith("1. A bingo game with animals \nWant more?")

    def test_chat_history_in_session(self, api_client, chat_session):
        api_client.post("/api/chat", json={"session_id": "chat-session", "message": "Ideas?"})
        messages = api_client.get("/api/session/chat-session").json()["messages"]
        assert [m["role"] for m in messages] == ["user", "model"]

    def test_clear_chat(self, api_client, chat_session):
        api_client.post("/api/chat", json={"session_id": "chat-session", "message": "Ideas?"})
        resp = api_client.delete("/api/chat/chat-session")
        assert resp.json()["success"] is True
        assert chat_session.messages == []

    def test_blank_message(self, api_client, chat_session):
        resp = api_client.post("/api/chat", json={"session_id": "chat-session", "message": "   "})
        assert resp.status_code == 400
