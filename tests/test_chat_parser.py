"""Tests for assistant reply parsing and idea offers."""

from arcade_studio.parsers.chat_parser import (
    IDEA_MARKER,
    api_error_turn,
    clean_idea_text,
    parse_assistant_reply,
    split_idea_offers,
    strip_idea_markers,
)


class TestSplitIdeaOffers:
    def test_single_offer_with_trailing_text(self):
        segments = split_idea_offers("Try this: &&IDEA&&\nMore text.")
        assert len(segments) == 2
        assert segments[0].text == "Try this: "
        assert segments[0].idea == "Try this:"
        assert segments[1].text == "\nMore text."
        assert segments[1].idea is None

    def test_trailing_marker_drops_empty_segment(self):
        segments = split_idea_offers("1. Bingo &&IDEA&&\n2. Memory &&IDEA&&")
        assert [s.idea for s in segments] == ["Bingo", "Memory"]

    def test_no_marker(self):
        segments = split_idea_offers("Just chatting.")
        assert len(segments) == 1
        assert segments[0].idea is None

    def test_blank_segment_before_marker_is_not_offered(self):
        segments = split_idea_offers("&&IDEA&&Rest")
        assert segments[0].idea is None
        assert segments[1].text == "Rest"

    def test_empty_body(self):
        assert split_idea_offers("") == []

    def test_strip_markers(self):
        assert strip_idea_markers(f"One {IDEA_MARKER}two") == "One two"


class TestCleanIdeaText:
    def test_list_decorations(self):
        assert clean_idea_text("  * Bingo ") == "Bingo"
        assert clean_idea_text("- Bingo") == "Bingo"
        assert clean_idea_text("12. Bingo") == "Bingo"

    def test_only_leading_marker_removed(self):
        assert clean_idea_text("1. Count 2. things") == "Count 2. things"


class TestParseAssistantReply:
    def test_valid_reply(self):
        turn = parse_assistant_reply('{"header": "Hi", "body": "Text", "footer": "Bye", "language": "es"}')
        assert turn.header == "Hi"
        assert turn.language == "es"
        assert turn.role == "model"

    def test_reply_cannot_change_role(self):
        turn = parse_assistant_reply('{"header": "H", "body": "B", "footer": "F", "language": "en", "role": "user"}')
        assert turn.role == "model"

    def test_json_inside_prose(self):
        turn = parse_assistant_reply('Here you go:\n```json\n{"header": "H", "body": "B", "footer": "F", "language": "fr"}\n```')
        assert turn.body == "B"
        assert turn.language == "fr"

    def test_missing_language_defaults_to_english(self):
        turn = parse_assistant_reply('{"header": "H", "body": "B", "footer": "F", "language": null}')
        assert turn.language == "en"

    def test_language_normalized(self):
        assert parse_assistant_reply('{"body": "B", "language": "DE"}').language == "de"
        assert parse_assistant_reply('{"body": "B", "language": "Spanish"}').language == "en"

    def test_not_json_becomes_response_error(self):
        turn = parse_assistant_reply("I am not JSON at all")
        assert turn.header == "Response Error"
        assert turn.body.endswith("Raw response:\nI am not JSON at all")
        assert turn.footer == "Please try rephrasing your message."
        assert turn.language == "en"

    def test_broken_json_becomes_response_error(self):
        assert parse_assistant_reply('{"header": "H", ').header == "Response Error"

    def test_api_error_turn(self):
        turn = api_error_turn("quota exceeded")
        assert turn.header == "API Error"
        assert turn.body == "Sorry, I couldn't process your request right now."
        assert turn.footer == "quota exceeded"
