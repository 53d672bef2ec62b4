"""dogfood: random-walk corpus generator over the dog -> food -> ingredient -> flavor chain."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .config import RunConfig
from .engine import Engine, EngineConfig, write_corpus
from .model import WalkModel, build_model
from .types import EntityKind, RunSummary

try:
    __version__ = version("dogfood-walks")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "Engine",
    "EngineConfig",
    "EntityKind",
    "RunConfig",
    "RunSummary",
    "WalkModel",
    "build_model",
    "write_corpus",
    "__version__",
]
