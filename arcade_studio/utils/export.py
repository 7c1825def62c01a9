"""
Game file export/import in the same plain-text format the oracle answers with.
"""

import json
import re

from ..parsers.game_parser import BEGIN_MARKER, END_MARKER, GameDescriptor, ParseResult, parse_ai_output

MAX_SLUG_LENGTH = 30


def slugify_title(title: str) -> str:
    """Lowercase, alphanumeric-and-hyphen-only slug, at most 30 characters."""
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].strip("-")


def export_filename(descriptor: GameDescriptor) -> str:
    return f"{slugify_title(descriptor.title) or 'game'}.txt"


def export_game(descriptor: GameDescriptor, script: str) -> str:
    """Serialize a descriptor and script back into the wire format."""
    header = json.dumps(descriptor.model_dump(), indent=2, ensure_ascii=False)
    return f"{header}\n{BEGIN_MARKER}\n{script}\n{END_MARKER}\n"


def import_game(content: str) -> ParseResult:
    """Read an exported file. Same rules as an oracle response."""
    return parse_ai_output(content)
