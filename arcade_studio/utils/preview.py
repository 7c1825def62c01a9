"""
Preview harness - builds the sandbox page a generated game runs in.
"""

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..parsers.game_parser import GameDescriptor
from ..parsers.labels import decode_labels

BASE_DIR = Path(__file__).parent.parent.parent
TEMPLATES_DIR = BASE_DIR / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_preview(descriptor: Optional[GameDescriptor], script: Optional[str]) -> str:
    """Render the harness page with the title screen, label tables and game script."""
    template = _env.get_template("preview.html")
    labels = decode_labels(descriptor.labels if descriptor else None)
    # A closing script tag inside the game code would end the harness block early
    safe_script = (script or "").replace("</script", "<\\/script")
    return template.render(
        has_game=descriptor is not None,
        title=descriptor.title if descriptor else "Untitled Game",
        description=descriptor.description if descriptor else "",
        target_lang=descriptor.target_lang if descriptor else "en",
        how_to_play=descriptor.how_to_play if descriptor else [],
        labels=labels,
        script=safe_script,
    )
