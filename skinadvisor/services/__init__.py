"""
Services package for the skin advisor application.

This package contains service layer components: the ingredient index and
streaming matcher, routine generation and the ingredient analysis relay.
"""

# Import key components to make them available at the package level
from .ingredient_index import TitleIndex, load_ingredient_dataset  # noqa: F401
from .ingredient_matcher import IngredientMatcher, MatcherState  # noqa: F401

__all__ = ['TitleIndex', 'load_ingredient_dataset', 'IngredientMatcher', 'MatcherState']
