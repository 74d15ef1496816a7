"""
Streaming ingredient detection.

Text arrives one character at a time (or in bulk when a stream is drained).
Each completed word is pushed into a sliding window of the last ``max_words``
words, and every suffix n-gram of that window is checked against the title
index. Each ingredient is reported at most once per session.
"""
from collections import deque
from typing import Deque, FrozenSet, List, Set, Tuple

from skinadvisor.models.ingredient import IngredientRecord
from skinadvisor.services.ingredient_index import TitleIndex, is_word_boundary, split_words


class MatcherState:
    """Per-session buffers. Owned by exactly one streaming session."""

    def __init__(self, max_words: int):
        self.word_buffer: Deque[str] = deque(maxlen=max_words)
        self.found_titles: Set[str] = set()
        self.partial_word: List[str] = []

    def reset(self) -> None:
        self.word_buffer.clear()
        self.found_titles.clear()
        self.partial_word.clear()


class IngredientMatcher:
    def __init__(self, index: TitleIndex):
        self.index = index
        self.state = MatcherState(index.max_words)

    @property
    def found_titles(self) -> FrozenSet[str]:
        return frozenset(self.state.found_titles)

    @property
    def word_buffer(self) -> Tuple[str, ...]:
        return tuple(self.state.word_buffer)

    def reset(self) -> None:
        self.state.reset()

    def on_word_boundary(self, word: str) -> List[IngredientRecord]:
        """
        Push a completed word and report titles ending at it.

        N-grams are checked shortest first, so a short title inside a longer
        one is reported before the longer one when both complete here.
        """
        if not word:
            return []

        buffer = self.state.word_buffer
        buffer.append(word.lower())

        found = []
        words = list(buffer)
        for n in range(1, min(self.index.max_words, len(words)) + 1):
            ngram = " ".join(words[-n:])
            if ngram in self.state.found_titles:
                continue
            if ngram not in self.index.by_word_count.get(n, ()):
                continue
            record = self.index.title_lookup[ngram]
            if not record.has_details:
                continue
            self.state.found_titles.add(ngram)
            found.append(record)
        return found

    def feed(self, char: str) -> List[IngredientRecord]:
        """Consume one revealed character."""
        partial = self.state.partial_word
        if not is_word_boundary(char):
            partial.append(char)
            return []
        if not partial:
            return []
        word = "".join(partial)
        partial.clear()
        return self.on_word_boundary(word)

    def feed_text(self, text: str) -> List[IngredientRecord]:
        found = []
        for char in text:
            found.extend(self.feed(char))
        return found

    def flush(self, remaining_text: str = "") -> List[IngredientRecord]:
        """
        Drain the rest of a stream at once.

        The pending partial word is joined with ``remaining_text`` so a word
        split across the reveal position is matched whole. Calling it with no
        text at end of stream matches the final partial word.
        """
        text = "".join(self.state.partial_word) + remaining_text
        self.state.partial_word.clear()

        found = []
        for word in split_words(text):
            found.extend(self.on_word_boundary(word))
        return found
