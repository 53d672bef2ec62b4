from __future__ import annotations

import base64
import binascii

from .interner import UnknownCode

TOKEN_WIDTH = 3
MAX_CODES = 1 << 16


def encode_code(code: int) -> bytes:
    """Base64 (no padding) of the code's 2-byte little-endian form: always 3 bytes."""
    return base64.b64encode(code.to_bytes(2, "little")).rstrip(b"=")


class CompactEncoding:
    """Precomputed 3-byte tokens for codes ``0..size-1``.

    Size it from the largest entity space of the run. The table is never
    mutated after construction, so it can be shared freely between workers.
    """

    def __init__(self, size: int) -> None:
        if size < 0 or size > MAX_CODES:
            raise ValueError(f"Encoding size must be in 0..{MAX_CODES}, got {size}.")
        self._tokens: tuple[bytes, ...] = tuple(encode_code(n) for n in range(size))

    @property
    def tokens(self) -> tuple[bytes, ...]:
        return self._tokens

    def encode(self, code: int) -> bytes:
        if not 0 <= code < len(self._tokens):
            raise UnknownCode(f"Code {code} is outside the encoding cache (size {len(self._tokens)}).")
        return self._tokens[code]

    def decode(self, token: bytes | str) -> int:
        if isinstance(token, str):
            token = token.encode("ascii")
        if len(token) != TOKEN_WIDTH:
            raise ValueError(f"Token must be {TOKEN_WIDTH} characters, got {token!r}.")
        try:
            raw = base64.b64decode(token + b"=", validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid token {token!r}.") from e
        return int.from_bytes(raw, "little")

    def __len__(self) -> int:
        return len(self._tokens)
