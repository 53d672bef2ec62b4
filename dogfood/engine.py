from __future__ import annotations

import concurrent.futures as cf
import os
import random
from collections import deque
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, BinaryIO

from .config import RunConfig
from .loader import filter_relations, load_relations
from .model import WalkModel, build_model, write_mappings
from .types import RunSummary
from .utils import make_event_logger, now_ts, utc_now_iso
from .walk import line_width, render_lines

OUTPUT_BUFFER_BYTES = 4 * 1024 * 1024


@dataclass(frozen=True)
class EngineConfig:
    max_workers: int = max(1, (os.cpu_count() or 2) - 1)
    executor: str = "process"  # "process" or "thread"
    # Lines rendered by one submitted task; a dog's block is split into ceil(lines_per_dog / lines_per_task) tasks.
    lines_per_task: int = 32
    # Dogs with tasks in flight at once; bounds memory held by pending blocks.
    max_inflight_dogs: int | None = None
    # None: every line draws fresh OS entropy.
    seed: int | None = None
    verbose: bool = False
    emit_logs: bool = True


def line_rng(seed: int | None, dog: int, line: int) -> random.Random:
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{dog}:{line}")


def _render_task(
    model: WalkModel,
    dog: int,
    first_line: int,
    count: int,
    walks_per_line: int,
    seed: int | None,
) -> bytes:
    return render_lines(
        model,
        dog,
        count,
        walks_per_line,
        partial(line_rng, seed, dog),
        first_line=first_line,
    )


# Set once per worker process by the pool initializer, read-only afterwards.
_WORKER_MODEL: WalkModel | None = None


def _init_worker(model: WalkModel) -> None:
    global _WORKER_MODEL
    _WORKER_MODEL = model


def _render_task_in_worker(dog: int, first_line: int, count: int, walks_per_line: int, seed: int | None) -> bytes:
    if _WORKER_MODEL is None:  # pragma: no cover
        raise RuntimeError("Worker process was not initialised with a model.")
    return _render_task(_WORKER_MODEL, dog, first_line, count, walks_per_line, seed)


class Engine:
    def __init__(self, config: EngineConfig) -> None:
        if config.max_workers < 1:
            raise ValueError("EngineConfig.max_workers must be >= 1.")
        if config.lines_per_task < 1:
            raise ValueError("EngineConfig.lines_per_task must be >= 1.")
        if config.max_inflight_dogs is not None and config.max_inflight_dogs < 1:
            raise ValueError("EngineConfig.max_inflight_dogs must be >= 1.")
        self.config = config
        self.log = make_event_logger(config.emit_logs)

    def run(
        self,
        model: WalkModel,
        sink: BinaryIO,
        *,
        lines_per_dog: int,
        walks_per_line: int,
        output_path: str = "",
    ) -> RunSummary:
        """Write ``lines_per_dog`` walks for every dog, dog blocks in ascending code order.

        Each dog's block is split into tasks of at most ``lines_per_task`` lines.
        Finished tasks are placed at their offset in a buffer preallocated for
        the block, and the block is written to ``sink`` once all of its tasks are
        done. Order of lines inside a block is fixed by line index, and which
        worker produced them does not matter.
        """
        started = utc_now_iso()
        t0 = now_ts()

        executor_type = self.config.executor.lower().strip()
        if executor_type not in {"process", "thread"}:
            raise ValueError("EngineConfig.executor must be 'process' or 'thread'.")

        width = line_width(walks_per_line)
        block_bytes = width * lines_per_dog
        chunks = [
            (first, min(self.config.lines_per_task, lines_per_dog - first))
            for first in range(0, lines_per_dog, self.config.lines_per_task)
        ]
        max_inflight = self.config.max_inflight_dogs or max(2, 4 * self.config.max_workers)

        executor: cf.Executor
        if executor_type == "process":
            executor = cf.ProcessPoolExecutor(
                max_workers=self.config.max_workers,
                initializer=_init_worker,
                initargs=(model,),
            )

            def submit(dog: int, first: int, count: int) -> cf.Future:
                return executor.submit(_render_task_in_worker, dog, first, count, walks_per_line, self.config.seed)

        else:
            executor = cf.ThreadPoolExecutor(max_workers=self.config.max_workers)

            def submit(dog: int, first: int, count: int) -> cf.Future:
                return executor.submit(_render_task, model, dog, first, count, walks_per_line, self.config.seed)

        self.log(
            "run_start",
            dogs=len(model.dogs),
            lines_per_dog=lines_per_dog,
            walks_per_line=walks_per_line,
            max_workers=self.config.max_workers,
            executor=executor_type,
            seeded=self.config.seed is not None,
        )

        dogs = iter(model.dog_codes())
        window: deque[tuple[int, list[tuple[int, cf.Future]]]] = deque()
        dogs_written = 0
        bytes_written = 0

        def fill_window() -> None:
            while len(window) < max_inflight:
                dog = next(dogs, None)
                if dog is None:
                    return
                window.append((dog, [(first, submit(dog, first, count)) for first, count in chunks]))

        with executor:
            try:
                fill_window()
                while window:
                    dog, pending = window.popleft()
                    cf.wait([fut for _, fut in pending])
                    block = bytearray(block_bytes)
                    for first, fut in pending:
                        part = fut.result()
                        offset = first * width
                        block[offset:offset + len(part)] = part
                    sink.write(block)
                    dogs_written += 1
                    bytes_written += len(block)
                    if self.config.verbose:
                        self.log("dog_flushed", dog=dog, bytes=len(block))
                    fill_window()
            except BaseException as e:
                for _, pending in window:
                    for _, fut in pending:
                        fut.cancel()
                fields: dict[str, Any] = {
                    "dogs_written": dogs_written,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                }
                self.log("run_failed", **fields)
                raise

        sink.flush()
        wall = max(0.0, now_ts() - t0)
        summary = RunSummary(
            output_path=output_path,
            dogs=dogs_written,
            lines_written=dogs_written * lines_per_dog,
            bytes_written=bytes_written,
            lines_per_dog=lines_per_dog,
            walks_per_line=walks_per_line,
            started_at_iso=started,
            finished_at_iso=utc_now_iso(),
            wall_seconds=wall,
        )
        self.log("run_finished", dogs=dogs_written, lines=summary.lines_written, bytes=bytes_written, wall_seconds=wall)
        return summary


def prepare_model(run: RunConfig, emit_logs: bool = True) -> WalkModel:
    """Load, filter and index the three relation files; write the id mappings if configured."""
    log = make_event_logger(emit_logs)
    raw = load_relations(run.dog_food_path, run.food_ingredient_path, run.ingredient_flavor_path)
    log("relations_loaded", **raw.counts())
    relations = filter_relations(raw)
    log("relations_filtered", **relations.counts())
    model = build_model(relations)
    log("model_built", **model.stats())
    if run.mapping_dir is not None:
        write_mappings(model, run.mapping_dir, log=log)
    return model


def write_corpus(run: RunConfig, config: EngineConfig | None = None) -> RunSummary:
    """Build the model from ``run``'s inputs and write the walk corpus to ``run.output_path``.

    Output goes to a temporary sibling file that replaces ``output_path`` only
    after every dog's block has been written.
    """
    config = config or EngineConfig()
    model = prepare_model(run, emit_logs=config.emit_logs)

    out = Path(run.output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_name(out.name + ".tmp")
    try:
        with tmp.open("wb", buffering=OUTPUT_BUFFER_BYTES) as sink:
            summary = Engine(config).run(
                model,
                sink,
                lines_per_dog=run.lines_per_dog,
                walks_per_line=run.walks_per_line,
                output_path=str(out),
            )
        os.replace(tmp, out)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return summary
