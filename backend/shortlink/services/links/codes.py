"""Short code generation.

Codes are drawn with :mod:`secrets` so live links cannot be enumerated by
predicting the generator. Uniqueness is the caller's concern.
"""

from __future__ import annotations

import secrets
from collections.abc import Iterator

from shortlink.core.config import DEFAULT_ALPHABET

DEFAULT_CODE_LENGTH = 6


def generate_code(length: int = DEFAULT_CODE_LENGTH, alphabet: str = DEFAULT_ALPHABET) -> str:
    """
    Return ``length`` symbols picked uniformly at random from ``alphabet``.

    :param length: Number of symbols (>= 1).
    :param alphabet: Candidate symbols (non-empty).
    :raises ValueError: On a non-positive length or an empty alphabet.
    """
    if length < 1:
        raise ValueError(f"Code length must be positive, got {length}")
    if not alphabet:
        raise ValueError("Alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))


def iter_codes(
    length: int = DEFAULT_CODE_LENGTH, alphabet: str = DEFAULT_ALPHABET
) -> Iterator[str]:
    """Yield fresh candidate codes forever."""
    while True:
        yield generate_code(length, alphabet)
