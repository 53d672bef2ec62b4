from __future__ import annotations

import random
from typing import Callable

from .encoding import TOKEN_WIDTH, CompactEncoding
from .model import WalkModel

HOPS_PER_CYCLE = 6
_STRIDE = TOKEN_WIDTH + 1
_NEWLINE = ord("\n")


def tokens_per_line(walks_per_line: int) -> int:
    return 1 + HOPS_PER_CYCLE * walks_per_line


def line_width(walks_per_line: int) -> int:
    """Bytes in one rendered line, newline included."""
    return tokens_per_line(walks_per_line) * _STRIDE


def sample_walk(
    model: WalkModel,
    dog: int,
    walks_per_line: int,
    rng: random.Random | None = None,
) -> list[int]:
    """One continuous walk of ``walks_per_line`` chained cycles.

    A cycle is dog -> food -> ingredient -> flavor -> ingredient -> food -> dog.
    The result starts with ``dog`` and holds the code reached after every hop,
    so it has ``1 + 6 * walks_per_line`` entries. Each cycle starts from the
    dog the previous one ended on.
    """
    if walks_per_line < 1:
        raise ValueError("walks_per_line must be >= 1")
    if rng is None:
        rng = random.Random()

    walk = [dog]
    append = walk.append
    for _ in range(walks_per_line):
        food = model.food_liked_by(dog, rng)
        append(food)
        ingredient = model.ingredient_in(food, rng)
        append(ingredient)
        flavor = model.flavor_of(ingredient, rng)
        append(flavor)
        ingredient = model.ingredient_with(flavor, rng)
        append(ingredient)
        food = model.food_with(ingredient, rng)
        append(food)
        dog = model.dog_liking(food, rng)
        append(dog)
    return walk


def format_walk(walk: list[int], encoding: CompactEncoding) -> bytes:
    return b" ".join(encoding.encode(code) for code in walk) + b"\n"


def render_lines(
    model: WalkModel,
    dog: int,
    count: int,
    walks_per_line: int,
    rng_for_line: Callable[[int], random.Random],
    first_line: int = 0,
) -> bytes:
    """Render ``count`` walks from ``dog`` into one fixed-stride buffer.

    Every token is 3 bytes followed by a space; the last space of each line is
    overwritten with a newline. ``rng_for_line`` gets the line's index within
    the dog's block, starting at ``first_line``.
    """
    width = line_width(walks_per_line)
    buf = bytearray(b" ") * (width * count)
    tokens = model.encoding.tokens
    for n in range(count):
        offset = n * width
        for code in sample_walk(model, dog, walks_per_line, rng_for_line(first_line + n)):
            buf[offset:offset + TOKEN_WIDTH] = tokens[code]
            offset += _STRIDE
        buf[offset - 1] = _NEWLINE
    return bytes(buf)
