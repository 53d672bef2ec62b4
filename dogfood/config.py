from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

MIN_COUNT = 1
MAX_COUNT = 255

DEFAULTS: dict[str, Any] = {
    "dog_food_path": "dog_food_lines.csv",
    "food_ingredient_path": "food_ingredient_lines.csv",
    "ingredient_flavor_path": "ingredient_flavor_lines.csv",
    "output_path": "output.txt",
    "lines_per_dog": 128,
    "walks_per_line": 64,
    "mapping_dir": ".",
}


class ConfigValidationError(ValueError):
    pass


@dataclass(frozen=True)
class RunConfig:
    dog_food_path: str
    food_ingredient_path: str
    ingredient_flavor_path: str
    output_path: str
    lines_per_dog: int = 128
    walks_per_line: int = 64
    # None disables the id mapping files.
    mapping_dir: str | None = "."


def load_run_config(path: str) -> RunConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_run_config(data)


def parse_run_config(data: dict[str, Any]) -> RunConfig:
    if not isinstance(data, dict):
        raise ConfigValidationError("Run config must be an object.")
    unknown = set(data) - set(DEFAULTS)
    if unknown:
        raise ConfigValidationError(f"Unknown config keys: {', '.join(sorted(unknown))}.")
    merged = {**DEFAULTS, **{k: v for k, v in data.items() if v is not None or k == "mapping_dir"}}

    paths = {}
    for key in ("dog_food_path", "food_ingredient_path", "ingredient_flavor_path", "output_path"):
        value = merged[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigValidationError(f"'{key}' must be a non-empty string.")
        paths[key] = value

    mapping_dir = merged["mapping_dir"]
    if mapping_dir is not None and (not isinstance(mapping_dir, str) or not mapping_dir.strip()):
        raise ConfigValidationError("'mapping_dir' must be a non-empty string or null.")

    return RunConfig(
        **paths,
        lines_per_dog=_parse_int_field("lines_per_dog", merged["lines_per_dog"]),
        walks_per_line=_parse_int_field("walks_per_line", merged["walks_per_line"]),
        mapping_dir=mapping_dir,
    )


def _parse_int_field(
    field_name: str,
    raw: Any,
    *,
    minimum: int = MIN_COUNT,
    maximum: int = MAX_COUNT,
) -> int:
    if isinstance(raw, bool):
        raise ConfigValidationError(f"'{field_name}' must be an integer.")
    if isinstance(raw, float) and not raw.is_integer():
        raise ConfigValidationError(f"'{field_name}' must be an integer.")
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"'{field_name}' must be an integer.") from e
    if not minimum <= value <= maximum:
        raise ConfigValidationError(f"'{field_name}' must be between {minimum} and {maximum}, got {value}.")
    return value
