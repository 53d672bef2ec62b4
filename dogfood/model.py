from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from .encoding import CompactEncoding
from .interner import Interner, UnknownCode, write_mapping
from .loader import Relations
from .types import EntityKind


class EmptyAdjacency(LookupError):
    pass


@dataclass(frozen=True)
class AdjacencyTable:
    """Code -> neighbor codes, in insertion order. Repeats carry sampling weight."""

    name: str
    rows: tuple[tuple[int, ...], ...]

    def neighbors(self, code: int) -> tuple[int, ...]:
        if not 0 <= code < len(self.rows):
            raise UnknownCode(f"{self.name}: unknown code {code} (table size {len(self.rows)}).")
        return self.rows[code]

    def pick(self, code: int, rng: random.Random) -> int:
        row = self.neighbors(code)
        if not row:
            raise EmptyAdjacency(f"{self.name}: code {code} has no neighbors.")
        return row[rng.randrange(len(row))]

    def as_lists(self) -> list[list[int]]:
        return [list(r) for r in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


def build_tables(
    pairs: Iterable[tuple[int, int]],
    n_left: int,
    n_right: int,
    forward_name: str,
    reverse_name: str,
) -> tuple[AdjacencyTable, AdjacencyTable]:
    forward: list[list[int]] = [[] for _ in range(n_left)]
    reverse: list[list[int]] = [[] for _ in range(n_right)]
    for left, right in pairs:
        forward[left].append(right)
        reverse[right].append(left)
    return (
        AdjacencyTable(forward_name, tuple(tuple(r) for r in forward)),
        AdjacencyTable(reverse_name, tuple(tuple(r) for r in reverse)),
    )


@dataclass(frozen=True)
class WalkModel:
    """Read-only adjacency model shared by every walk of a run."""

    dogs: Interner
    foods: Interner
    ingredients: Interner
    flavors: Interner
    dog_food: AdjacencyTable
    food_dog: AdjacencyTable
    food_ingredient: AdjacencyTable
    ingredient_food: AdjacencyTable
    ingredient_flavor: AdjacencyTable
    flavor_ingredient: AdjacencyTable
    encoding: CompactEncoding

    def dog_codes(self) -> range:
        return self.dogs.codes()

    def interner(self, kind: EntityKind) -> Interner:
        return {
            EntityKind.DOG: self.dogs,
            EntityKind.FOOD: self.foods,
            EntityKind.INGREDIENT: self.ingredients,
            EntityKind.FLAVOR: self.flavors,
        }[kind]

    def food_liked_by(self, dog: int, rng: random.Random) -> int:
        return self.dog_food.pick(dog, rng)

    def ingredient_in(self, food: int, rng: random.Random) -> int:
        return self.food_ingredient.pick(food, rng)

    def flavor_of(self, ingredient: int, rng: random.Random) -> int:
        return self.ingredient_flavor.pick(ingredient, rng)

    def ingredient_with(self, flavor: int, rng: random.Random) -> int:
        return self.flavor_ingredient.pick(flavor, rng)

    def food_with(self, ingredient: int, rng: random.Random) -> int:
        return self.ingredient_food.pick(ingredient, rng)

    def dog_liking(self, food: int, rng: random.Random) -> int:
        return self.food_dog.pick(food, rng)

    def stats(self) -> dict[str, int]:
        return {
            "dogs": len(self.dogs),
            "foods": len(self.foods),
            "ingredients": len(self.ingredients),
            "flavors": len(self.flavors),
            "encoding_size": len(self.encoding),
        }


def build_model(relations: Relations) -> WalkModel:
    """Intern the (already filtered) relations and build the six tables."""
    dogs = Interner(EntityKind.DOG.value)
    foods = Interner(EntityKind.FOOD.value)
    ingredients = Interner(EntityKind.INGREDIENT.value)
    flavors = Interner(EntityKind.FLAVOR.value)

    dog_food_codes = [(dogs.intern(d), foods.intern(f)) for d, f in relations.dog_food]
    food_ingredient_codes = [
        (foods.intern(f), ingredients.intern(i)) for f, i in relations.food_ingredient
    ]
    ingredient_flavor_codes = [
        (ingredients.intern(i), flavors.intern(fl)) for i, fl in relations.ingredient_flavor
    ]

    dog_food, food_dog = build_tables(
        dog_food_codes, len(dogs), len(foods), "dog->food", "food->dog"
    )
    food_ingredient, ingredient_food = build_tables(
        food_ingredient_codes, len(foods), len(ingredients), "food->ingredient", "ingredient->food"
    )
    ingredient_flavor, flavor_ingredient = build_tables(
        ingredient_flavor_codes, len(ingredients), len(flavors), "ingredient->flavor", "flavor->ingredient"
    )

    encoding = CompactEncoding(max(len(dogs), len(foods), len(ingredients), len(flavors)))

    return WalkModel(
        dogs=dogs,
        foods=foods,
        ingredients=ingredients,
        flavors=flavors,
        dog_food=dog_food,
        food_dog=food_dog,
        food_ingredient=food_ingredient,
        ingredient_food=ingredient_food,
        ingredient_flavor=ingredient_flavor,
        flavor_ingredient=flavor_ingredient,
        encoding=encoding,
    )


def write_mappings(
    model: WalkModel,
    out_dir: str | Path,
    log: Callable[..., None] | None = None,
) -> list[Path]:
    """Write one ``<kind>_mapping.csv`` per entity type into ``out_dir``."""
    written: list[Path] = []
    for kind in EntityKind:
        path = Path(out_dir) / kind.mapping_filename
        written.append(write_mapping(model.interner(kind), path, model.encoding))
    if log is not None:
        log("mappings_written", directory=str(out_dir), files=[p.name for p in written])
    return written
