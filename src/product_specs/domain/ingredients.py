"""Domain models for ingredient compositions."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

RowLevel = Literal["main", "sub", "base"]


@dataclass(frozen=True)
class Ingredient:
    """A named component whose percentage is a share of its direct parent."""

    name: str
    percentage: float | None = None
    origin: str | None = None
    is_marked_as_base: bool = False
    is_wholegrain: bool = False
    sub_ingredients: tuple["Ingredient", ...] = ()


@dataclass(frozen=True)
class IngredientSet:
    """Final recipe plus the base recipe embedded in one of its ingredients.

    ``base_parent`` is the index of the final ingredient the base list belongs
    to. When it is ``None`` the base list is ignored.
    """

    final_ingredients: tuple[Ingredient, ...] = ()
    base_ingredients: tuple[Ingredient, ...] = ()
    base_parent: int | None = None

    def __post_init__(self) -> None:
        if self.base_parent is None:
            return
        if not 0 <= self.base_parent < len(self.final_ingredients):
            raise ValueError(
                f"base_parent {self.base_parent} is outside the final ingredient list"
            )

    @classmethod
    def from_lists(
        cls,
        final_ingredients: Iterable[Ingredient],
        base_ingredients: Iterable[Ingredient] = (),
    ) -> "IngredientSet":
        """Build a set, deriving the base parent from the marked ingredient."""
        finals = tuple(final_ingredients)
        marked = [index for index, ing in enumerate(finals) if ing.is_marked_as_base]
        if len(marked) > 1:
            raise ValueError("At most one ingredient can be marked as base")
        return cls(
            final_ingredients=finals,
            base_ingredients=tuple(base_ingredients),
            base_parent=marked[0] if marked else None,
        )

    @property
    def marked_ingredient(self) -> Ingredient | None:
        """Return the final ingredient that carries the base recipe."""
        if self.base_parent is None:
            return None
        return self.final_ingredients[self.base_parent]


@dataclass(frozen=True)
class FlatIngredientRow:
    """One row of the flattened whole-product ingredient table."""

    name: str
    whole_product_percentage: float
    origin: str
    is_final_product: bool
    level: RowLevel
    is_wholegrain: bool = False


@dataclass(frozen=True)
class CompositionResult:
    """Flattened table and composition text for an ingredient set."""

    table: tuple[FlatIngredientRow, ...]
    text: str
