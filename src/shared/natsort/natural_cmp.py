"""Natural ordering of file and directory names.

``Chapter_2`` sorts before ``Chapter_10`` because embedded digit runs are
compared by numeric value instead of character by character.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from pathlib import PurePath
from typing import TypeVar

T = TypeVar("T")

# ASCII digits only: other Unicode digits are treated as text
_DIGIT_RUN = re.compile(r"([0-9]+)")


def tokenize(name: str) -> list[str]:
    """Split *name* into alternating digit / non-digit runs.

    ``"".join(tokenize(name)) == name`` always holds.
    """
    return [token for token in _DIGIT_RUN.split(name) if token]


def _token_key(token: str) -> tuple:
    # A text run never starts with an ASCII digit, so the first element
    # alone decides between a digit run and a text run, which matches
    # comparing their first characters by codepoint.
    if token[0].isascii() and token[0].isdigit():
        return ("0", 1, int(token), token)
    return (token[0], 0, token)


def natural_key(name: str) -> tuple:
    """Sort key implementing case-insensitive natural order.

    Digit runs compare by value with no size limit; equal values with a
    different spelling (``"007"`` vs ``"7"``) fall back to the digit text.
    Names that only differ by case fall back to the original string so the
    order stays strict and deterministic.
    """
    tokens = tuple(_token_key(token) for token in tokenize(name.lower()))
    return (tokens, name)


def natural_cmp(left: str, right: str) -> int:
    """Three-way comparison: -1 if *left* sorts first, 1 if *right* does, 0 if equal."""
    left_key = natural_key(left)
    right_key = natural_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def natural_path_key(path: str | PurePath) -> tuple:
    """Natural sort key for a relative path, compared component by component.

    Archive entry names use ``/`` whatever the platform, so strings are
    split on both separators.
    """
    if isinstance(path, PurePath):
        parts = path.parts
    else:
        parts = tuple(part for part in re.split(r"[\\/]", path) if part)
    return tuple(natural_key(part) for part in parts)


def natural_paths_cmp(left: str | PurePath, right: str | PurePath) -> int:
    left_key = natural_path_key(left)
    right_key = natural_path_key(right)
    return (left_key > right_key) - (left_key < right_key)


def sort_names(
    items: Iterable[T],
    key: Callable[[T], str] = str,
    natural: bool = True,
) -> list[T]:
    """Materialise *items* and sort them by the name returned from *key*.

    With ``natural=False`` plain codepoint order is used instead (faster but
    ``folder 10`` then sorts before ``folder 2``).
    """
    if natural:
        return sorted(items, key=lambda item: natural_key(key(item)))
    return sorted(items, key=key)
