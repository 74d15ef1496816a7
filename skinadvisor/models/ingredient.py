"""
Ingredient records loaded from the static ingredient dataset.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

# Display classes for integer ratings, indexed by the clamped rating value
RATING_LEVELS = ("none", "low", "medium", "high", "very-high")


class SafetyClass(str, Enum):
    HIGH_HAZARD = "high_hazard"
    MODERATE_HAZARD = "moderate_hazard"
    LOW_HAZARD = "low_hazard"
    SAFE = "safe"
    INSUFFICIENT_DATA = "insufficient_data"
    UNRATED = "unrated"


# Checked in order, first substring hit wins
_SAFETY_PRIORITY = (
    (("high",), SafetyClass.HIGH_HAZARD),
    (("moderate",), SafetyClass.MODERATE_HAZARD),
    (("low",), SafetyClass.LOW_HAZARD),
    (("safe",), SafetyClass.SAFE),
    (("data", "unknown"), SafetyClass.INSUFFICIENT_DATA),
)


def classify_safety(decision: Optional[str]) -> SafetyClass:
    """Bucket a free-form EWG decision label into a SafetyClass."""
    if not decision:
        return SafetyClass.UNRATED
    label = decision.lower()
    for needles, safety_class in _SAFETY_PRIORITY:
        if any(needle in label for needle in needles):
            return safety_class
    return SafetyClass.UNRATED


def rating_level(value: int) -> str:
    """Map an integer property rating to its display class."""
    clamped = max(0, min(len(RATING_LEVELS) - 1, int(value)))
    return RATING_LEVELS[clamped]


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


@dataclass(frozen=True)
class IngredientRecord:
    title: str
    introtext: Optional[str] = None
    content: Optional[str] = None
    categories: Optional[str] = None
    ewg_decision: Optional[str] = None
    boolean_properties: Mapping[str, bool] = field(default_factory=dict)
    integer_properties: Mapping[str, int] = field(default_factory=dict)

    @property
    def has_details(self) -> bool:
        return bool(self.introtext or self.content or self.ewg_decision)

    @property
    def safety_class(self) -> SafetyClass:
        return classify_safety(self.ewg_decision)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Optional["IngredientRecord"]:
        """
        Build a record from one row of the dataset.

        Rows without a usable ``title`` yield None so callers can drop them.
        Property values of the wrong type are discarded.
        """
        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            return None

        ewg = raw.get("ewg")
        decision = _optional_text(ewg.get("decision")) if isinstance(ewg, Mapping) else None

        boolean_props = raw.get("booleanProperties") or {}
        integer_props = raw.get("integerProperties") or {}
        if not isinstance(boolean_props, Mapping):
            boolean_props = {}
        if not isinstance(integer_props, Mapping):
            integer_props = {}

        return cls(
            title=title.strip(),
            introtext=_optional_text(raw.get("introtext")),
            content=_optional_text(raw.get("content")),
            categories=_optional_text(raw.get("categories")),
            ewg_decision=decision,
            boolean_properties={
                name: flag for name, flag in boolean_props.items() if isinstance(flag, bool)
            },
            # bool is an int subclass, keep it out of the ratings
            integer_properties={
                name: rating for name, rating in integer_props.items()
                if isinstance(rating, int) and not isinstance(rating, bool)
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "introtext": self.introtext,
            "content": self.content,
            "categories": self.categories,
            "ewg": {"decision": self.ewg_decision} if self.ewg_decision else None,
            "safety_class": self.safety_class.value,
            "boolean_properties": dict(self.boolean_properties),
            "integer_properties": {
                name: {"value": rating, "level": rating_level(rating)}
                for name, rating in self.integer_properties.items()
            },
        }
