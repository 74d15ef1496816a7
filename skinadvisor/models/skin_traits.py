"""
Skin trait assessment: four independent ordinal traits the user can confirm
or edit before a routine is generated.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type, Union


class AcneLevel(str, Enum):
    CLEAR = "clear"
    MILD = "mild"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


class OilinessLevel(str, Enum):
    LOW = "low"
    BALANCED = "balanced"
    HIGH = "high"


class PigmentationLevel(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    PRONOUNCED = "pronounced"


class WrinkleLevel(str, Enum):
    NONE = "none"
    EARLY = "early"


TRAIT_LEVELS: Dict[str, Type[Enum]] = {
    "acne": AcneLevel,
    "oiliness": OilinessLevel,
    "pigmentation": PigmentationLevel,
    "wrinkles": WrinkleLevel,
}


class InvalidTraitSelection(ValueError):
    """Raised when a trait or level is not part of the trait enumeration."""


def baseline(trait: str) -> Enum:
    return next(iter(_levels_for(trait)))


def parse_level(trait: str, level: Union[str, Enum]) -> Enum:
    levels = _levels_for(trait)
    value = level.value if isinstance(level, Enum) else level
    try:
        return levels(value)
    except ValueError:
        allowed = ", ".join(member.value for member in levels)
        raise InvalidTraitSelection(
            f"Invalid level '{value}' for {trait}. Must be one of: {allowed}"
        ) from None


def _levels_for(trait: str) -> Type[Enum]:
    if trait not in TRAIT_LEVELS:
        raise InvalidTraitSelection(
            f"Unknown trait '{trait}'. Must be one of: {', '.join(TRAIT_LEVELS)}"
        )
    return TRAIT_LEVELS[trait]


@dataclass
class SkinReadings:
    """Raw numbers produced by the image heuristic."""
    acne_spots: int
    brightness: float
    pigmentation_spots: int
    edge_density: float  # percent of edge pixels


def classify_acne(spots: int) -> AcneLevel:
    if spots > 100:
        return AcneLevel.SIGNIFICANT
    if spots > 50:
        return AcneLevel.MODERATE
    if spots > 20:
        return AcneLevel.MILD
    return AcneLevel.CLEAR


def classify_oiliness(brightness: float) -> OilinessLevel:
    if brightness > 130:
        return OilinessLevel.HIGH
    if brightness < 70:
        return OilinessLevel.LOW
    return OilinessLevel.BALANCED


def classify_pigmentation(spots: int) -> PigmentationLevel:
    if spots > 50:
        return PigmentationLevel.PRONOUNCED
    if spots > 20:
        return PigmentationLevel.MODERATE
    if spots > 5:
        return PigmentationLevel.MILD
    return PigmentationLevel.NONE


def classify_wrinkles(edge_density: float) -> WrinkleLevel:
    if edge_density > 15:
        return WrinkleLevel.EARLY
    return WrinkleLevel.NONE


@dataclass
class SkinTraitAssessment:
    acne: AcneLevel = AcneLevel.CLEAR
    oiliness: OilinessLevel = OilinessLevel.LOW
    pigmentation: PigmentationLevel = PigmentationLevel.NONE
    wrinkles: WrinkleLevel = WrinkleLevel.NONE

    @classmethod
    def from_readings(cls, readings: SkinReadings) -> "SkinTraitAssessment":
        return cls(
            acne=classify_acne(readings.acne_spots),
            oiliness=classify_oiliness(readings.brightness),
            pigmentation=classify_pigmentation(readings.pigmentation_spots),
            wrinkles=classify_wrinkles(readings.edge_density),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "SkinTraitAssessment":
        assessment = cls()
        for trait, level in data.items():
            setattr(assessment, trait, parse_level(trait, level))
        return assessment

    def toggle(self, trait: str, level: Union[str, Enum]) -> Enum:
        """
        Select ``level`` for ``trait``.

        Selecting the level the trait already has resets it to the trait's
        baseline. Returns the trait's new level; raises InvalidTraitSelection
        without touching the assessment if the trait or level is unknown.
        """
        selected = parse_level(trait, level)
        new_level = baseline(trait) if getattr(self, trait) == selected else selected
        setattr(self, trait, new_level)
        return new_level

    def describe(self) -> str:
        parts = [
            "clear skin" if self.acne == AcneLevel.CLEAR else f"{self.acne.value} acne",
            f"{self.oiliness.value} oiliness",
            "no visible pigmentation" if self.pigmentation == PigmentationLevel.NONE
            else f"{self.pigmentation.value} pigmentation",
            "early wrinkles" if self.wrinkles == WrinkleLevel.EARLY else "no visible wrinkles",
        ]
        return ", ".join(parts[:-1]) + f" and {parts[-1]}"

    def to_dict(self) -> Dict[str, str]:
        return {trait: getattr(self, trait).value for trait in TRAIT_LEVELS}
