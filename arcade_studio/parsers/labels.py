"""Label Table Decoder - Reads the bilingual `labels` string of a game descriptor."""

from dataclasses import dataclass, field
from typing import Dict, Optional

LABEL_ROLES = ("language", "play", "how_to_play", "settings", "date", "attribution", "footer")

DEFAULT_COMFORTABLE_LABELS = {
    "language": "Language",
    "play": "Play",
    "how_to_play": "How to Play",
    "settings": "Settings",
    "date": "October 28, 2025",
    "attribution": "by %user%",
    "footer": "Made with AINARA",
}

DEFAULT_TARGET_LABELS = {
    "language": "Idioma",
    "play": "Jugar",
    "how_to_play": "Cómo Jugar",
    "settings": "Configuración",
    "date": "28 octubre 2025",
    "attribution": "de %user%",
    "footer": "Hecho con AINARA",
}


@dataclass
class LabelTable:
    """Comfortable-language and target-language label lookups keyed by role."""
    comfortable: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COMFORTABLE_LABELS))
    target: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TARGET_LABELS))
    is_default: bool = True


def default_label_table() -> LabelTable:
    return LabelTable()


def decode_labels(labels: Optional[str]) -> LabelTable:
    """
    Decode `"A/B, C/D, ..."` into two role-keyed tables.

    Any shortfall (fewer than seven entries, or an entry without a `/`)
    returns the built-in default table instead of a partial one.
    """
    if not labels or not isinstance(labels, str):
        return default_label_table()

    entries = [entry.strip() for entry in labels.split(",")]
    if len(entries) < len(LABEL_ROLES):
        print(f"⚠️ Labels have {len(entries)} entries, expected {len(LABEL_ROLES)}. Using defaults.")
        return default_label_table()

    comfortable: Dict[str, str] = {}
    target: Dict[str, str] = {}
    for role, entry in zip(LABEL_ROLES, entries):
        if "/" not in entry:
            print(f"⚠️ Label entry '{entry}' has no comfortable/target pair. Using defaults.")
            return default_label_table()
        comf_text, target_text = entry.split("/", 1)
        comfortable[role] = comf_text.strip()
        target[role] = target_text.strip()

    return LabelTable(comfortable=comfortable, target=target, is_default=False)
