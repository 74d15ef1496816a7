"""
Title index over the static ingredient dataset.

The index is built once at startup and is read-only afterwards. Titles are
keyed by their normalized form: lowercased, split on the same word boundaries
the streaming matcher uses and re-joined with single spaces.
"""
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Union

from skinadvisor.models.ingredient import IngredientRecord

logger = logging.getLogger(__name__)

# Characters that end a word in generated text. Hyphens, apostrophes and
# slashes stay inside words ("beta-glucan", "dimethicone/vinyl").
WORD_BOUNDARY_CHARS = frozenset(' \t\n\r\f\v.,!?;:*()[]{}"')

_SPLIT_PATTERN = re.compile(
    "[" + re.escape("".join(sorted(WORD_BOUNDARY_CHARS))) + "]+"
)


class DatasetError(Exception):
    """The ingredient dataset could not be read."""


def is_word_boundary(char: str) -> bool:
    return char in WORD_BOUNDARY_CHARS


def split_words(text: str) -> List[str]:
    return [word for word in _SPLIT_PATTERN.split(text) if word]


def normalize_title(title: str) -> str:
    return " ".join(split_words(title.lower()))


@dataclass(frozen=True)
class TitleIndex:
    by_word_count: Mapping[int, FrozenSet[str]]
    title_lookup: Mapping[str, IngredientRecord]
    max_words: int

    @classmethod
    def build(cls, records: Iterable[Union[IngredientRecord, Mapping[str, Any]]]) -> "TitleIndex":
        """Index records by normalized title, dropping rows without a title."""
        lookup: Dict[str, IngredientRecord] = {}
        by_count: Dict[int, Set[str]] = {}
        dropped = 0

        for raw in records:
            record = raw if isinstance(raw, IngredientRecord) else _record_from_row(raw)
            if record is None:
                dropped += 1
                continue

            key = normalize_title(record.title)
            if not key:
                dropped += 1
                continue
            if key in lookup:
                logger.debug(f"Duplicate ingredient title skipped: {record.title!r}")
                continue

            lookup[key] = record
            by_count.setdefault(len(key.split(" ")), set()).add(key)

        if dropped:
            logger.warning(f"Dropped {dropped} ingredient row(s) without a usable title")

        return cls(
            by_word_count=MappingProxyType(
                {count: frozenset(titles) for count, titles in by_count.items()}
            ),
            title_lookup=MappingProxyType(lookup),
            max_words=max(by_count, default=0),
        )

    def __len__(self) -> int:
        return len(self.title_lookup)

    def get(self, title: str) -> Optional[IngredientRecord]:
        return self.title_lookup.get(normalize_title(title))


def _record_from_row(row: Any) -> Optional[IngredientRecord]:
    if not isinstance(row, Mapping):
        return None
    return IngredientRecord.from_dict(row)


def load_ingredient_dataset(path: Union[str, Path]) -> TitleIndex:
    """
    Load the ingredient dataset from a JSON file and build its TitleIndex.

    Args:
        path: JSON file holding a list of ingredient objects

    Returns:
        The built TitleIndex

    Raises:
        DatasetError: if the file is missing, unreadable or not a JSON list
    """
    data_file = Path(path)
    try:
        with data_file.open("r", encoding="utf-8") as f:
            rows = json.load(f)
    except (OSError, ValueError) as e:
        raise DatasetError(f"Failed to load ingredient dataset {data_file}: {e}") from e

    if not isinstance(rows, list):
        raise DatasetError(f"Ingredient dataset {data_file} must contain a JSON list")

    index = TitleIndex.build(rows)
    logger.info(
        f"✅ Loaded {len(index)} ingredient(s) from {data_file.name} "
        f"(longest title: {index.max_words} word(s))"
    )
    return index
