# Agents package
from .oracle import OracleClient, OracleError, OracleAuthError, OracleFormatError
from .generator import GeneratorAgent
from .editor import EditorAgent
from .analyst import AnalystAgent
from .assistant import AssistantAgent

__all__ = [
    "OracleClient",
    "OracleError",
    "OracleAuthError",
    "OracleFormatError",
    "GeneratorAgent",
    "EditorAgent",
    "AnalystAgent",
    "AssistantAgent",
]
