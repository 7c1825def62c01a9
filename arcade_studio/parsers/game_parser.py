"""Game Response Parser - Splits oracle output into a descriptor and a game script."""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

BEGIN_MARKER = "%%BEGINCODE%%"
END_MARKER = "%%ENDCODE%%"

DEFAULT_REJECTION_REASON = "The AI declined to create this game."

MISSING_MARKER_ERROR = f"Parsing Error: '{BEGIN_MARKER}' separator not found."
MISSING_FIELDS_ERROR = (
    "Parsing Error: The AI response is missing one or more required fields: "
    "title, description, how_to_play (must be an array)."
)


class GameDescriptor(BaseModel):
    """Metadata header of a generated game."""
    title: str = Field(..., description="Game title")
    description: str = Field(..., description="One-sentence objective")
    target_lang: str = Field(default="", description="Two-letter target language code")
    comf_language: str = Field(default="0", description="Two-letter comfortable language code or '0'")
    labels: str = Field(default="", description="Seven comfortable/target label pairs")
    how_to_play: List[str] = Field(..., description="Ordered instructions")

    @field_validator("title", "description", "target_lang", "comf_language", "labels", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("how_to_play", mode="before")
    @classmethod
    def _steps_as_text(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item if isinstance(item, str) else json.dumps(item, ensure_ascii=False) for item in value]
        return value


class RejectionNotice(BaseModel):
    """The oracle refused to build the requested game."""
    rejected: bool = True
    reason: str = DEFAULT_REJECTION_REASON


class ParseStatus(str, Enum):
    IDLE = "idle"
    PARSED = "parsed"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class ParseResult:
    """Outcome of parsing one oracle response. Exactly one payload is set per status."""
    status: ParseStatus
    descriptor: Optional[GameDescriptor] = None
    script: Optional[str] = None
    rejection: Optional[RejectionNotice] = None
    error: Optional[str] = None
    raw: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ParseStatus.PARSED

    def error_report(self) -> str:
        """Error message followed by the untouched oracle output."""
        if not self.error:
            return ""
        return f"{self.error}\n\nRaw AI Output:\n{self.raw}"


class GameResponseParser:
    """
    Parser for the `%%BEGINCODE%%` response protocol.

    Checks, in order:
    1) empty input -> idle
    2) whole input is a rejection object -> rejected
    3) JSON preamble before the begin marker -> descriptor
    4) text after the marker (up to the end marker) -> script
    """

    _JSON_FENCE_OPEN = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
    _FENCE_CLOSE = re.compile(r"\n?```[ \t]*$")
    _SCRIPT_OPEN = re.compile(r"<script.*?>", re.IGNORECASE | re.DOTALL)
    _SCRIPT_CLOSE = re.compile(r"</script>", re.IGNORECASE | re.DOTALL)

    def parse(self, raw_output) -> ParseResult:
        if isinstance(raw_output, list):
            raw_output = "\n".join(str(part) for part in raw_output)
        raw = "" if raw_output is None else str(raw_output)

        if not raw.strip():
            return ParseResult(status=ParseStatus.IDLE, raw=raw)

        rejection = self._probe_rejection(raw)
        if rejection is not None:
            return ParseResult(status=ParseStatus.REJECTED, rejection=rejection, raw=raw)

        marker_index = raw.find(BEGIN_MARKER)
        if marker_index == -1:
            return self._failure(MISSING_MARKER_ERROR, raw)

        preamble = self._strip_json_fence(raw[:marker_index])
        try:
            data = json.loads(preamble)
        except json.JSONDecodeError as e:
            return self._failure(f"JSON Parsing Error: {e}", raw)

        descriptor = self._validate_descriptor(data)
        if descriptor is None:
            return self._failure(MISSING_FIELDS_ERROR, raw)

        script = raw[marker_index + len(BEGIN_MARKER):]
        end_index = script.find(END_MARKER)
        if end_index != -1:
            script = script[:end_index]
        script = self._strip_script_wrapper(script)

        return ParseResult(status=ParseStatus.PARSED, descriptor=descriptor, script=script, raw=raw)

    def _probe_rejection(self, raw: str) -> Optional[RejectionNotice]:
        try:
            data = json.loads(raw.strip())
        except (json.JSONDecodeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        if data.get("rejected") is True or data.get("rejection") is True:
            reason = data.get("reason")
            if not isinstance(reason, str) or not reason.strip():
                reason = DEFAULT_REJECTION_REASON
            return RejectionNotice(reason=reason)
        return None

    def _strip_json_fence(self, text: str) -> str:
        text = text.strip()
        text = self._JSON_FENCE_OPEN.sub("", text, count=1)
        text = self._FENCE_CLOSE.sub("", text, count=1)
        return text.strip()

    def _validate_descriptor(self, data: Any) -> Optional[GameDescriptor]:
        if not isinstance(data, dict):
            return None
        steps = data.get("how_to_play")
        if not data.get("title") or not data.get("description") or not isinstance(steps, list) or not steps:
            return None
        try:
            return GameDescriptor.model_validate(data)
        except ValidationError:
            return None

    def _strip_script_wrapper(self, script: str) -> str:
        script = self._SCRIPT_OPEN.sub("", script, count=1)
        script = self._SCRIPT_CLOSE.sub("", script, count=1)
        return script.strip()

    def _failure(self, message: str, raw: str) -> ParseResult:
        return ParseResult(status=ParseStatus.FAILED, error=message, raw=raw)


def parse_ai_output(raw_output: str) -> ParseResult:
    """Parse one oracle response with a fresh parser."""
    return GameResponseParser().parse(raw_output)
