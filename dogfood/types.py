from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntityKind(str, Enum):
    DOG = "dog"
    FOOD = "food"
    INGREDIENT = "ingredient"
    FLAVOR = "flavor"

    @property
    def mapping_filename(self) -> str:
        return f"{self.value}_mapping.csv"


@dataclass(frozen=True)
class RunSummary:
    output_path: str
    dogs: int
    lines_written: int
    bytes_written: int
    lines_per_dog: int
    walks_per_line: int
    started_at_iso: str
    finished_at_iso: str
    wall_seconds: float

    @property
    def tokens_per_line(self) -> int:
        return 1 + 6 * self.walks_per_line
