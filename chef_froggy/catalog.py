"""Recipe catalog — the fixed set of recipes a player can cook.

The default catalog is built in. An alternative catalog can be loaded from a
JSON file shaped like:

    [
      {"name": "Lily Pad Pancakes",
       "steps": [{"instruction": "..."}, ...]},
      ...
    ]

The catalog never changes after it is loaded.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from chef_froggy.models import Recipe, Step

logger = logging.getLogger(__name__)


class UnknownRecipeError(LookupError):
    """Raised when a recipe index is outside the catalog."""


class Catalog:
    def __init__(self, recipes: list[Recipe] | tuple[Recipe, ...]) -> None:
        if not recipes:
            raise ValueError("A catalog needs at least one recipe")
        self._recipes = tuple(recipes)

    def __len__(self) -> int:
        return len(self._recipes)

    @property
    def recipes(self) -> tuple[Recipe, ...]:
        return self._recipes

    def get(self, index: int) -> Recipe:
        # Negative indices are rejected rather than counted from the end
        if not 0 <= index < len(self._recipes):
            raise UnknownRecipeError(
                f"No recipe at index {index} (catalog has {len(self._recipes)})"
            )
        return self._recipes[index]

    def names(self) -> list[str]:
        return [r.name for r in self._recipes]


def _recipe(name: str, *instructions: str) -> Recipe:
    return Recipe(name=name, steps=tuple(Step(instruction=i) for i in instructions))


LILY_PAD_PANCAKES = _recipe(
    "Lily Pad Pancakes",
    "Let's start with the flour. Do you prefer a lighter or denser pancake?",
    "Would you like your pancakes sweet? How much sugar should we add?",
    "For texture, do you prefer fluffy or thin pancakes?",
    "Should we add a splash of green food coloring for fun?",
    "For garnishing, would you prefer kiwi slices or blueberries, or both?",
)

FLY_LICIOUS_FRUIT_SALAD = _recipe(
    "Fly-licious Fruit Salad",
    "Which fruits do you enjoy the most for a fruit salad?",
    "Should we mix all the fruits together or layer them?",
    "Would you like a zesty lime and honey dressing?",
    "Should I toss the salad gently to keep the fruits intact?",
    "Do you prefer your fruit salad served chilled or at room temperature?",
)

TADPOLE_TACOS = _recipe(
    "Tadpole Tacos",
    "Which protein would you like for your tacos? (e.g., ground beef, vegetarian crumbles)",
    "Do you prefer your tacos mildly seasoned or spicy?",
    "What toppings would you like? (e.g., lettuce, tomatoes, cheese, olives)",
    "Should I fill the taco shells with the prepared ingredients?",
    "Would you like any additional toppings or sides?",
)

FROG_LEGGED_SPAGHETTI = _recipe(
    "Frog Legged Spaghetti",
    "Do you prefer your spaghetti with a lot of garlic or just a hint?",
    "Should we add some red pepper flakes for a bit of heat?",
    "Do you want cherry tomatoes in the spaghetti?",
    "Should I toss the spaghetti with the sauce now?",
    "Would you like basil and Parmesan cheese on top?",
    "Do you want to add cooked chicken or tofu for a protein boost?",
)

DEFAULT_CATALOG = Catalog([
    LILY_PAD_PANCAKES,
    FLY_LICIOUS_FRUIT_SALAD,
    TADPOLE_TACOS,
    FROG_LEGGED_SPAGHETTI,
])


def load_catalog(path: Path) -> Catalog:
    """Read a catalog from a JSON file. Raises pydantic.ValidationError on bad data."""
    data = json.loads(path.read_text())
    if not isinstance(data, list):
        raise ValueError(f"Catalog file must hold a JSON array, got {type(data).__name__}")
    catalog = Catalog([Recipe.model_validate(r) for r in data])
    logger.info("Loaded %d recipes from %s", len(catalog), path)
    return catalog
