"""
Flashcard step - front/back card that starts face-down.
"""

from moono.schemas.content import FlashcardContent


class FlashcardInteraction:
    """Flip state for one card. Each step gets its own instance."""

    def __init__(self, step_id: int, content: FlashcardContent):
        self.step_id = step_id
        self.content = content
        self.flipped = False

    def toggle(self) -> bool:
        """Flip the card and return the new state."""
        self.flipped = not self.flipped
        return self.flipped

    @property
    def visible_text(self) -> str:
        return self.content.back_text if self.flipped else self.content.front_text

    def can_advance(self) -> bool:
        return True
