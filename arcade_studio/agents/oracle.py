"""
Oracle Client - The one place that talks to the hosted language model.
Primary: Google Gemini. Alternatives: Groq, NVIDIA NIM (OpenAI-compatible).
Every call is (system instruction, user payload, expected output shape).
"""

import json
import os
import re
from enum import Enum
from typing import Any, List, Optional, Sequence

from dotenv import load_dotenv
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_groq import ChatGroq
from langchain_openai import ChatOpenAI

load_dotenv()

# Substrings the providers use for a bad or unauthorized key
AUTH_ERROR_MARKERS = (
    "Requested entity was not found",
    "API_KEY_INVALID",
    "API key not valid",
)

AUTH_ERROR_MESSAGE = (
    "Your API key appears to be invalid or missing necessary permissions. "
    "Please select a valid API key and ensure billing is enabled for your project."
)

MODEL_TIERS = {
    "gemini": {"primary": "gemini-2.5-pro", "light": "gemini-flash-lite-latest"},
    "groq": {"primary": "llama-3.3-70b-versatile", "light": "llama-3.1-8b-instant"},
    "nvidia": {"primary": "mistralai/devstral-2-123b-instruct-2512", "light": "meta/llama-3.1-8b-instruct"},
}


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


class OutputShape(str, Enum):
    TEXT = "text"
    JSON_OBJECT = "json_object"
    JSON_ARRAY = "json_array"


class OracleError(Exception):
    """The oracle call failed."""


class OracleAuthError(OracleError):
    """The oracle rejected the credentials."""

    def __init__(self, detail: str = ""):
        super().__init__(AUTH_ERROR_MESSAGE)
        self.detail = detail


class OracleFormatError(OracleError):
    """The reply did not have the expected shape."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


def is_auth_error(error: BaseException) -> bool:
    message = str(error)
    return any(marker in message for marker in AUTH_ERROR_MARKERS)


class OracleClient:
    """
    Thin wrapper over a LangChain chat model.

    One instance per purpose and session; there are no retries, a failed
    call raises once and the caller decides what to do with it.
    """

    _JSON_SPANS = {
        OutputShape.JSON_OBJECT: re.compile(r"\{[\s\S]*\}"),
        OutputShape.JSON_ARRAY: re.compile(r"\[[\s\S]*\]"),
    }

    def __init__(
        self,
        tier: str = "light",
        model: Optional[str] = None,
        provider: Optional[str] = None,
        temperature: float = 0.7,
        llm: Optional[Any] = None,
    ):
        """
        Initialize the oracle client.

        Args:
            tier: 'primary' for game generation, 'light' for everything else
            model: Explicit model name (overrides the tier default)
            provider: 'gemini', 'groq' or 'nvidia' (defaults to ORACLE_PROVIDER)
            temperature: Sampling temperature
            llm: Pre-built chat model (used as-is, mainly for tests)
        """
        self.verbose_logs = os.getenv("VERBOSE_LOGS", "0") == "1"
        self.provider = (provider or os.getenv("ORACLE_PROVIDER", "gemini")).lower()
        if self.provider not in MODEL_TIERS:
            print(f"⚠️ Unknown ORACLE_PROVIDER '{self.provider}', falling back to gemini")
            self.provider = "gemini"
        self.tier = tier

        if llm is not None:
            self.llm = llm
            self.model = model or getattr(llm, "model", None) or type(llm).__name__
            return

        self.model = model or self._default_model(self.provider, tier)
        if self.provider == "groq":
            self.llm = ChatGroq(
                model=self.model,
                api_key=os.getenv("GROQ_API_KEY"),
                temperature=temperature,
                max_tokens=8192,
            )
        elif self.provider == "nvidia":
            self.llm = ChatOpenAI(
                model=self.model,
                base_url=os.getenv("NVIDIA_BASE_URL", "https://integrate.api.nvidia.com/v1"),
                api_key=os.getenv("NVIDIA_API_KEY"),
                temperature=temperature,
                max_tokens=8192,
            )
        else:
            self.llm = ChatGoogleGenerativeAI(
                model=self.model,
                google_api_key=os.getenv("GOOGLE_API_KEY"),
                temperature=temperature,
                max_output_tokens=32768 if tier == "primary" else 8192,
            )
        if self.verbose_logs:
            print(f"🔮 OracleClient [{tier}] using {self.provider}: {self.model}")

    @staticmethod
    def _default_model(provider: str, tier: str) -> str:
        env_names = {
            "gemini": ("GEMINI_MODEL", "GEMINI_LIGHT_MODEL"),
            "groq": ("GROQ_MODEL", "GROQ_LIGHT_MODEL"),
            "nvidia": ("NVIDIA_MODEL", "NVIDIA_LIGHT_MODEL"),
        }[provider]
        env_name = env_names[0] if tier == "primary" else env_names[1]
        return os.getenv(env_name, MODEL_TIERS[provider][tier])

    def ask(
        self,
        system_instruction: str,
        user_payload: str,
        shape: OutputShape = OutputShape.TEXT,
        history: Optional[Sequence[BaseMessage]] = None,
    ) -> Any:
        """Send one request and return text, or the decoded JSON for JSON shapes."""
        messages: List[BaseMessage] = [SystemMessage(content=system_instruction)]
        messages.extend(history or [])
        messages.append(HumanMessage(content=user_payload))

        if self.verbose_logs:
            print(f"Invoking oracle ({self.model}) with {len(user_payload)} chars...")
        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            if is_auth_error(e):
                raise OracleAuthError(str(e)) from e
            raise OracleError(str(e)) from e

        text = self._extract_content(response)
        if shape == OutputShape.TEXT:
            return text
        return self._decode_json(text, shape)

    def _extract_content(self, response) -> str:
        """Safely extract model output and strip thinking tokens."""
        content = getattr(response, "content", response)
        if isinstance(content, list):
            content = "\n".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        content = re.sub(
            r"<(?:think|thinking)>.*?</(?:think|thinking)>", "", str(content), flags=re.DOTALL | re.IGNORECASE
        )
        return content.strip()

    def _decode_json(self, text: str, shape: OutputShape) -> Any:
        match = self._JSON_SPANS[shape].search(text)
        if not match:
            kind = "object" if shape == OutputShape.JSON_OBJECT else "array"
            raise OracleFormatError(f"No JSON {kind} found in the AI response.", raw=text)
        try:
            return json.loads(match.group(0), parse_constant=_reject_constant)
        except ValueError as e:
            raise OracleFormatError(f"Could not decode JSON from the AI response: {e}", raw=text) from e
