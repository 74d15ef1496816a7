"""
Module for loading the static ingredient dataset at startup.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from skinadvisor.core.config import get_settings
from skinadvisor.services.ingredient_index import TitleIndex, load_ingredient_dataset

logger = logging.getLogger(__name__)


def init_ingredient_index(path: Optional[Union[str, Path]] = None) -> TitleIndex:
    """Build the ingredient title index from the configured dataset."""
    data_path = Path(path) if path is not None else get_settings().INGREDIENT_DATA_PATH
    logger.info(f"Loading ingredient dataset from {data_path}")
    index = load_ingredient_dataset(data_path)
    logger.info("Ingredient index initialization complete")
    return index


if __name__ == "__main__":
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Run initialization
    index = init_ingredient_index()
    for count in sorted(index.by_word_count):
        logger.info(f"{count}-word titles: {len(index.by_word_count[count])}")
