from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

Pair = tuple[str, str]


class MalformedRecord(ValueError):
    pass


@dataclass(frozen=True)
class Relations:
    """The three relation lists, in file order, duplicates preserved."""

    dog_food: list[Pair]
    food_ingredient: list[Pair]
    ingredient_flavor: list[Pair]

    def counts(self) -> dict[str, int]:
        return {
            "dog_food": len(self.dog_food),
            "food_ingredient": len(self.food_ingredient),
            "ingredient_flavor": len(self.ingredient_flavor),
        }


def read_relation(lines: Iterable[str], name: str = "relation") -> list[Pair]:
    """Parse ``left,right`` records, one per line."""
    out: list[Pair] = []
    for lineno, raw in enumerate(lines, start=1):
        fields = raw.rstrip("\r\n").split(",")
        if len(fields) != 2:
            raise MalformedRecord(
                f"{name} line {lineno}: expected 2 comma-separated fields, got {len(fields)}."
            )
        out.append((fields[0], fields[1]))
    return out


def load_relation(path: str, name: str | None = None) -> list[Pair]:
    p = Path(path)
    with p.open("r", encoding="utf-8", newline="") as f:
        return read_relation(f, name=name or p.name)


def load_relations(
    dog_food_path: str,
    food_ingredient_path: str,
    ingredient_flavor_path: str,
) -> Relations:
    return Relations(
        dog_food=load_relation(dog_food_path, "dog_food"),
        food_ingredient=load_relation(food_ingredient_path, "food_ingredient"),
        ingredient_flavor=load_relation(ingredient_flavor_path, "ingredient_flavor"),
    )


def filter_relations(relations: Relations) -> Relations:
    """Drop records that would leave a dangling key somewhere down the chain.

    The passes run once, in a fixed order:

    1. foods liked by some dog
    2. food-ingredient records for those foods -> ingredients
    3. ingredient-flavor records for those ingredients -> ingredients that have a flavor
    4. food-ingredient records whose ingredient has a flavor -> foods with a full chain
    5. dog-food records whose food has a full chain
    """
    foods = {food for _, food in relations.dog_food}

    food_ingredient = [r for r in relations.food_ingredient if r[0] in foods]
    ingredients = {ingredient for _, ingredient in food_ingredient}

    ingredient_flavor = [r for r in relations.ingredient_flavor if r[0] in ingredients]
    ingredients = {ingredient for ingredient, _ in ingredient_flavor}

    food_ingredient = [r for r in food_ingredient if r[1] in ingredients]
    foods = {food for food, _ in food_ingredient}

    dog_food = [r for r in relations.dog_food if r[1] in foods]

    return Relations(
        dog_food=dog_food,
        food_ingredient=food_ingredient,
        ingredient_flavor=ingredient_flavor,
    )
