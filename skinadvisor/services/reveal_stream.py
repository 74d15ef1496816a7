"""
Character-by-character reveal of generated text, annotated with detected
ingredients.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Iterable, Iterator, Optional

from skinadvisor.models.ingredient import IngredientRecord
from skinadvisor.services.ingredient_matcher import IngredientMatcher


class RevealStream:
    """A finite character stream. Each iteration starts from the beginning."""

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[str]:
        return iter(self.text)

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class RevealEvent:
    type: str  # "text", "ingredient" or "done"
    text: Optional[str] = None
    ingredient: Optional[IngredientRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.type == "text":
            return {"type": "text", "text": self.text}
        if self.type == "ingredient":
            return {"type": "ingredient", "ingredient": self.ingredient.to_dict()}
        return {"type": self.type}


def annotate(stream: Iterable[str], matcher: IngredientMatcher) -> Iterator[RevealEvent]:
    """
    Reveal ``stream`` through ``matcher``.

    Yields a text event for every character, then an ingredient event for
    each record that character completed. The matcher is reset first and
    flushed after the last character, and a final done event closes the
    stream.
    """
    matcher.reset()
    for char in stream:
        yield RevealEvent("text", text=char)
        for record in matcher.feed(char):
            yield RevealEvent("ingredient", ingredient=record)
    for record in matcher.flush():
        yield RevealEvent("ingredient", ingredient=record)
    yield RevealEvent("done")


async def paced(events: Iterable[RevealEvent], delay_seconds: float) -> AsyncIterator[RevealEvent]:
    """Re-yield events, pausing after each revealed character."""
    for event in events:
        yield event
        if event.type == "text" and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
