"""
Read step - stateless display of a markdown body with an optional glyph.
"""

from typing import Dict, Optional

from moono.schemas.content import ReadContent

# Illustration keywords understood by the authoring tool
GLYPHS: Dict[str, str] = {
    "handshake": "\U0001F91D",
    "money": "\U0001F4B0",
    "chart": "\U0001F4C8",
    "business": "\U0001F4BC",
    "market": "\U0001F3EA",
    "trade": "\U0001F4CA",
    "investment": "\U0001F4B5",
    "stock": "\U0001F4C8",
    "finance": "\U0001F4B3",
    "economy": "\U0001F30D",
    "success": "✅",
    "growth": "\U0001F4CA",
    "profit": "\U0001F48E",
    "partnership": "\U0001F91D",
    "agreement": "\U0001F4DD",
}


def resolve_glyph(image_keyword: Optional[str], default: str) -> Optional[str]:
    """Glyph for a keyword; unknown keyword -> default, no keyword -> None."""
    if not image_keyword:
        return None
    return GLYPHS.get(image_keyword.lower(), default)


class ReadInteraction:
    """Read steps have no interaction; the learner may always continue."""

    def __init__(self, content: ReadContent, default_glyph: str):
        self.content = content
        self.glyph = resolve_glyph(content.image_keyword, default_glyph)

    @property
    def body(self) -> str:
        return self.content.body

    def can_advance(self) -> bool:
        return True
