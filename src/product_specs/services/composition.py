"""Ingredient composition resolution for the product sheet.

Percentages on an ingredient are always a share of its direct parent. The
resolver rescales nested entries (sub-ingredients of any final ingredient and
the base recipe of the marked one) into whole-product percentages and builds
the bracketed composition string shown on the sheet.
"""

import html
import re
from collections.abc import Iterable
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal

from product_specs.domain.ingredients import (
    CompositionResult,
    FlatIngredientRow,
    Ingredient,
    IngredientSet,
    RowLevel,
)

PLACEHOLDER_TEXT = "No ingredients extracted yet..."

_PARENTHESISED_PERCENTAGE = re.compile(r"\((\d+(?:\.\d+)?)\s*%\)")
_BARE_PERCENTAGE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_PERCENTAGE_TOKEN = re.compile(r"\s*\(?\d+(?:\.\d+)?\s*%\)?\s*")
_BOLD_MARKER = re.compile(r"\*\*(.*?)\*\*")

_Group = tuple[FlatIngredientRow, list[FlatIngredientRow]]


def round_half_up(value: float, places: int = 1) -> float:
    """Round to the given decimal places with exact halves rounded away from zero."""
    step = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP))


def whole_product_percentage(
    share: float | None, parent_percentage: float | None
) -> float:
    """Rescale a share of a parent ingredient to a share of the whole product."""
    return round_half_up((share or 0.0) * (parent_percentage or 0.0) / 100)


def _has_name(ingredient: Ingredient) -> bool:
    return bool(ingredient.name.strip())


def _row(
    ingredient: Ingredient,
    percentage: float,
    *,
    is_final_product: bool,
    level: RowLevel,
) -> FlatIngredientRow:
    return FlatIngredientRow(
        name=ingredient.name.strip(),
        whole_product_percentage=percentage,
        origin=ingredient.origin or "",
        is_final_product=is_final_product,
        level=level,
        is_wholegrain=ingredient.is_wholegrain,
    )


def _groups(ingredient_set: IngredientSet) -> list[_Group]:
    """Return each named final ingredient with its nested rows, in input order."""
    groups: list[_Group] = []
    for index, ingredient in enumerate(ingredient_set.final_ingredients):
        if not _has_name(ingredient):
            continue
        main = _row(
            ingredient,
            round_half_up(ingredient.percentage or 0.0),
            is_final_product=True,
            level="main",
        )
        nested = [
            _row(
                sub,
                whole_product_percentage(sub.percentage, ingredient.percentage),
                is_final_product=True,
                level="sub",
            )
            for sub in ingredient.sub_ingredients
            if _has_name(sub)
        ]
        if index == ingredient_set.base_parent:
            nested.extend(
                _row(
                    base,
                    whole_product_percentage(base.percentage, ingredient.percentage),
                    is_final_product=False,
                    level="base",
                )
                for base in ingredient_set.base_ingredients
                if _has_name(base)
            )
        groups.append((main, nested))
    return groups


def ingredients_in_input_order(
    ingredient_set: IngredientSet,
) -> list[FlatIngredientRow]:
    """Flatten the set keeping the order the ingredients were entered in."""
    rows: list[FlatIngredientRow] = []
    for main, nested in _groups(ingredient_set):
        rows.append(main)
        rows.extend(nested)
    return rows


def ingredients_by_percentage(
    ingredient_set: IngredientSet,
) -> list[FlatIngredientRow]:
    """Flatten the set for display, largest share first at every level."""
    groups = sorted(
        _groups(ingredient_set), key=lambda group: -group[0].whole_product_percentage
    )
    rows: list[FlatIngredientRow] = []
    for main, nested in groups:
        rows.append(main)
        rows.extend(sorted(nested, key=lambda row: -row.whole_product_percentage))
    return rows


def _format_shares(ingredients: Iterable[Ingredient], marker: str = "") -> str:
    parts = []
    for ingredient in ingredients:
        if not _has_name(ingredient):
            continue
        name = ingredient.name.strip()
        if ingredient.percentage:
            parts.append(f"{name} {ingredient.percentage:.1f}%{marker}")
        else:
            parts.append(name)
    return ", ".join(parts)


def composition_text(ingredient_set: IngredientSet) -> str:
    """Render the composition string with the base recipe in brackets.

    Final ingredients are bold-marked with ``**``. Base percentages are shares
    of the base recipe itself and are flagged with ``*``.
    """
    base_text = ""
    if ingredient_set.base_parent is not None:
        base_text = _format_shares(ingredient_set.base_ingredients, marker="*")

    parts = []
    for index, ingredient in enumerate(ingredient_set.final_ingredients):
        if not _has_name(ingredient):
            continue
        percentage = (
            f" ({ingredient.percentage:.1f}%)" if ingredient.percentage else ""
        )
        text = f"**{ingredient.name.strip()}{percentage}**"
        sub_text = _format_shares(ingredient.sub_ingredients)
        if sub_text:
            text = f"{text} ({sub_text})"
        if index == ingredient_set.base_parent and base_text:
            text = f"{text} [{base_text}]"
        parts.append(text)

    return ", ".join(parts) or PLACEHOLDER_TEXT


def composition_html(text: str) -> str:
    """Convert a composition string into the markup used by the sheet template."""
    body = _BOLD_MARKER.sub(r"<strong>\1</strong>", html.escape(text, quote=False))
    return f"<strong>Ingredients:</strong> {body}"


def resolve_composition(ingredient_set: IngredientSet) -> CompositionResult:
    """Resolve the canonical flattened table and the composition string."""
    return CompositionResult(
        table=tuple(ingredients_in_input_order(ingredient_set)),
        text=composition_text(ingredient_set),
    )


def parse_ingredient_list(text: str) -> list[Ingredient]:
    """Parse an edited, comma separated ingredient list.

    Accepts ``"Oats (45.5%)"``, ``"Oats 45.5%"`` or a bare name. Items without
    a name are dropped.
    """
    ingredients: list[Ingredient] = []
    for item in text.split(","):
        trimmed = item.strip()
        match = _PARENTHESISED_PERCENTAGE.search(trimmed) or _BARE_PERCENTAGE.search(
            trimmed
        )
        name = _PERCENTAGE_TOKEN.sub(" ", trimmed, count=1).strip()
        if not name:
            continue
        ingredients.append(
            Ingredient(
                name=name,
                percentage=round_half_up(float(match.group(1))) if match else None,
            )
        )
    return ingredients


def format_ingredient_list(ingredients: Iterable[Ingredient]) -> str:
    """Render ingredients back into the editable comma separated form."""
    return ", ".join(
        f"{ing.name} ({ing.percentage:.1f}%)" if ing.percentage else ing.name
        for ing in ingredients
    )


def mark_as_base(ingredients: Iterable[Ingredient], name: str) -> list[Ingredient]:
    """Toggle the base marking on one ingredient and clear it everywhere else."""
    return [
        replace(
            ing,
            is_marked_as_base=ing.name == name and not ing.is_marked_as_base,
        )
        for ing in ingredients
    ]
