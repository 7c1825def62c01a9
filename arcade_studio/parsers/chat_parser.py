"""Chat Turn Parser - Reads assistant replies and splits out idea offers."""

import json
import re
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, field_validator

IDEA_MARKER = "&&IDEA&&"
REPLY_FIELDS = ("header", "body", "footer", "language")

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_LIST_DECORATION = re.compile(r"^\s*([*\-]\s*|\d+\.\s*)")
_LANGUAGE_CODE = re.compile(r"^[a-z]{2}$")


class AssistantTurn(BaseModel):
    """One assistant reply in the chat wire format."""
    header: str = ""
    body: str = ""
    footer: str = ""
    language: str = "en"
    role: str = "model"

    @field_validator("header", "body", "footer", mode="before")
    @classmethod
    def _text_or_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("language", mode="before")
    @classmethod
    def _two_letter_code(cls, value):
        code = str(value or "").strip().lower()
        return code if _LANGUAGE_CODE.match(code) else "en"


class UserTurn(BaseModel):
    content: str
    role: str = "user"


@dataclass
class BodySegment:
    """A rendered chunk of an assistant body, optionally offering an idea."""
    text: str
    idea: Optional[str] = None


def parse_assistant_reply(raw_text: str) -> AssistantTurn:
    """Read the first JSON object in a reply; anything else becomes a 'Response Error' turn."""
    raw_text = (raw_text or "").strip()
    match = _JSON_OBJECT.search(raw_text)
    if match:
        try:
            data = json.loads(match.group(0))
            if isinstance(data, dict):
                return AssistantTurn.model_validate({k: data[k] for k in REPLY_FIELDS if k in data})
        except (json.JSONDecodeError, ValueError):
            pass
    return response_error_turn(raw_text)


def response_error_turn(raw_text: str) -> AssistantTurn:
    return AssistantTurn(
        header="Response Error",
        body=f"The AI returned a response that was not in the expected JSON format.\n\nRaw response:\n{raw_text}",
        footer="Please try rephrasing your message.",
        language="en",
    )


def api_error_turn(message: str) -> AssistantTurn:
    return AssistantTurn(
        header="API Error",
        body="Sorry, I couldn't process your request right now.",
        footer=message,
        language="en",
    )


def clean_idea_text(part: str) -> str:
    """Trim an offer and drop a leading `*`, `-` or `1.` list marker."""
    return _LIST_DECORATION.sub("", part.strip(), count=1)


def split_idea_offers(body: str) -> List[BodySegment]:
    """
    Split a body on the idea sentinel.

    Every segment before a sentinel is rendered and, when it has text,
    offered as an idea. An empty trailing segment is dropped.
    """
    parts = (body or "").split(IDEA_MARKER)
    segments: List[BodySegment] = []
    for index, part in enumerate(parts):
        is_last = index == len(parts) - 1
        if is_last and not part.strip():
            continue
        idea = None if is_last else (clean_idea_text(part) or None)
        segments.append(BodySegment(text=part, idea=idea))
    return segments


def strip_idea_markers(body: str) -> str:
    """Body text as copied to the clipboard, without sentinels."""
    return (body or "").replace(IDEA_MARKER, "")
