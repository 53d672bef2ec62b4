from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .encoding import CompactEncoding


class UnknownCode(LookupError):
    pass


class Interner:
    """Dense 0-based codes for one entity type, assigned in first-appearance order."""

    def __init__(self, kind: str = "entity") -> None:
        self.kind = kind
        self._codes: dict[str, int] = {}
        self._strings: list[str] = []

    def intern(self, value: str) -> int:
        code = self._codes.get(value)
        if code is None:
            code = len(self._strings)
            self._codes[value] = code
            self._strings.append(value)
        return code

    def string_for(self, code: int) -> str:
        if not 0 <= code < len(self._strings):
            raise UnknownCode(f"Unknown {self.kind} code {code} (known: 0..{len(self._strings) - 1}).")
        return self._strings[code]

    def codes(self) -> range:
        return range(len(self._strings))

    def items(self) -> Iterator[tuple[str, int]]:
        for code, value in enumerate(self._strings):
            yield value, code

    def __len__(self) -> int:
        return len(self._strings)

    def __repr__(self) -> str:
        return f"Interner(kind={self.kind!r}, size={len(self)})"


def write_mapping(interner: Interner, path: str | Path, encoding: CompactEncoding) -> Path:
    """Write ``original_string,compact_code`` lines for every interned value."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8", newline="\n") as f:
        for value, code in interner.items():
            f.write(f"{value},{encoding.encode(code).decode('ascii')}\n")
    return p
