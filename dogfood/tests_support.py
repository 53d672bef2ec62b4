"""Test helpers (kept in package so they are importable in subprocess workers)."""

from __future__ import annotations

import random
from collections import defaultdict
from pathlib import Path

from .loader import Pair, Relations
from .model import WalkModel

SAMPLE_DOG_FOOD: list[Pair] = [("Sparky", "burger"), ("Sparky", "pizza"), ("Max", "burger"), ("Max", "taco")]
SAMPLE_FOOD_INGREDIENT: list[Pair] = [("burger", "cheese"), ("burger", "tomato"), ("pizza", "cheese"), ("taco", "beef")]
SAMPLE_INGREDIENT_FLAVOR: list[Pair] = [("cheese", "salty"), ("tomato", "salty"), ("tomato", "savory"), ("beef", "savory")]


def sample_relations() -> Relations:
    return Relations(
        dog_food=list(SAMPLE_DOG_FOOD),
        food_ingredient=list(SAMPLE_FOOD_INGREDIENT),
        ingredient_flavor=list(SAMPLE_INGREDIENT_FLAVOR),
    )


def as_text(pairs: list[Pair]) -> str:
    return "\n".join(f"{left},{right}" for left, right in pairs)


def write_relation_files(directory: str | Path, relations: Relations) -> tuple[str, str, str]:
    d = Path(directory)
    d.mkdir(parents=True, exist_ok=True)
    paths = []
    for name, pairs in (
        ("dog_food_lines.csv", relations.dog_food),
        ("food_ingredient_lines.csv", relations.food_ingredient),
        ("ingredient_flavor_lines.csv", relations.ingredient_flavor),
    ):
        p = d / name
        p.write_text(as_text(pairs) + "\n", encoding="utf-8")
        paths.append(str(p))
    return paths[0], paths[1], paths[2]


class StringWalker:
    """Walks the chain with string keys and plain dicts.

    Slow, but simple enough to trust: used to check walks produced by the
    integer-coded model.
    """

    def __init__(self, relations: Relations) -> None:
        self.forward: list[dict[str, list[str]]] = []
        self.reverse: list[dict[str, list[str]]] = []
        for pairs in (relations.dog_food, relations.food_ingredient, relations.ingredient_flavor):
            fwd: dict[str, list[str]] = defaultdict(list)
            rev: dict[str, list[str]] = defaultdict(list)
            for left, right in pairs:
                fwd[left].append(right)
                rev[right].append(left)
            self.forward.append(dict(fwd))
            self.reverse.append(dict(rev))

    def is_valid_walk(self, walk: list[str]) -> bool:
        """True if every hop of ``walk`` follows an edge of the matching relation."""
        hops = [
            self.forward[0], self.forward[1], self.forward[2],
            self.reverse[2], self.reverse[1], self.reverse[0],
        ]
        for i, (src, dst) in enumerate(zip(walk, walk[1:])):
            if dst not in hops[i % 6].get(src, ()):
                return False
        return True

    def line(self, dog: str, walks_per_line: int, rng: random.Random) -> list[str]:
        walk = [dog]
        for _ in range(walks_per_line):
            food = rng.choice(self.forward[0][dog])
            ingredient = rng.choice(self.forward[1][food])
            flavor = rng.choice(self.forward[2][ingredient])
            ingredient_back = rng.choice(self.reverse[2][flavor])
            food_back = rng.choice(self.reverse[1][ingredient_back])
            dog = rng.choice(self.reverse[0][food_back])
            walk += [food, ingredient, flavor, ingredient_back, food_back, dog]
        return walk


def decode_walk(model: WalkModel, walk: list[int]) -> list[str]:
    """Map a coded walk back to entity strings, position by position."""
    spaces = [model.dogs, model.foods, model.ingredients, model.flavors, model.ingredients, model.foods]
    return [spaces[i % 6].string_for(code) for i, code in enumerate(walk)]


def decode_line(model: WalkModel, line: bytes | str) -> list[str]:
    if isinstance(line, bytes):
        line = line.decode("ascii")
    return decode_walk(model, [model.encoding.decode(token) for token in line.rstrip("\n").split(" ")])
