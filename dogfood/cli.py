from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import Any

from .config import ConfigValidationError, RunConfig, load_run_config, parse_run_config
from .engine import EngineConfig, write_corpus
from .loader import MalformedRecord


def _build_run_config(args: argparse.Namespace) -> RunConfig:
    base: dict[str, Any] = {}
    if args.config:
        base = dataclasses.asdict(load_run_config(args.config))
    overrides = {
        "dog_food_path": args.dog_food_file,
        "food_ingredient_path": args.food_ingredients_file,
        "ingredient_flavor_path": args.ingredients_flavor_file,
        "output_path": args.output_file,
        "lines_per_dog": args.lines_per_dog,
        "walks_per_line": args.walks_per_line,
    }
    data = {**base, **{k: v for k, v in overrides.items() if v is not None}}
    if args.no_mappings:
        data["mapping_dir"] = None
    elif args.mapping_dir is not None:
        data["mapping_dir"] = args.mapping_dir
    return parse_run_config(data)


def main(argv: Any = None) -> int:
    parser = argparse.ArgumentParser(prog="dogfood", description="Writes a walk corpus for dog food recommendations.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    runp = sub.add_parser("run", help="Generate the walk corpus.")
    runp.add_argument("-n", "--lines-per-dog", type=int, default=None, help="Lines per dog, 1 to 255 (default 128)")
    runp.add_argument("-w", "--walks-per-line", type=int, default=None, help="Walk cycles per line, 1 to 255 (default 64)")
    runp.add_argument("--dog-food-file", default=None, help="Dog,food relation file")
    runp.add_argument("--food-ingredients-file", default=None, help="Food,ingredient relation file")
    runp.add_argument("--ingredients-flavor-file", default=None, help="Ingredient,flavor relation file")
    runp.add_argument("-o", "--output-file", default=None, help="Corpus output path")
    runp.add_argument("--config", default=None, help="Run config JSON; flags given here override it")
    runp.add_argument("--mapping-dir", default=None, help="Directory for <kind>_mapping.csv files (default '.')")
    runp.add_argument("--no-mappings", action="store_true", help="Do not write id mapping files")
    runp.add_argument("--max-workers", type=int, default=None, help="Max parallel workers")
    runp.add_argument("--executor", choices=["process", "thread"], default="process", help="Executor type")
    runp.add_argument("--seed", type=int, default=None, help="Seed walks for a reproducible corpus")
    runp.add_argument("--summary-json", default=None, help="Write run summary JSON to this path")
    runp.add_argument("--verbose", action="store_true", help="Log every flushed dog block")
    runp.add_argument("--quiet", action="store_true", help="Disable engine logs")

    args = parser.parse_args(argv)

    if args.cmd == "run":
        try:
            run_cfg = _build_run_config(args)
        except (OSError, json.JSONDecodeError, ConfigValidationError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        cfg = EngineConfig(
            max_workers=args.max_workers or EngineConfig().max_workers,
            executor=args.executor,
            seed=args.seed,
            verbose=bool(args.verbose),
            emit_logs=not bool(args.quiet),
        )

        try:
            summary = write_corpus(run_cfg, cfg)
        except KeyboardInterrupt:
            print("Interrupted", file=sys.stderr)
            return 130
        except (OSError, MalformedRecord) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        except Exception as e:
            print(f"Failed: {type(e).__name__}: {e}", file=sys.stderr)
            return 1

        print(f"Output: {summary.output_path}")
        print(f"Dogs: {summary.dogs} lines={summary.lines_written} tokens_per_line={summary.tokens_per_line}")
        print(f"Done! Took {int(summary.wall_seconds * 1000)}ms")

        if args.summary_json:
            with open(args.summary_json, "w", encoding="utf-8") as f:
                json.dump(dataclasses.asdict(summary), f, ensure_ascii=False, indent=2)

        return 0

    return 0
