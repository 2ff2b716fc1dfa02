"""Mark identifiers: lowercase letters are local, uppercase letters are global."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Optional, Union

_LOCAL_LETTERS = frozenset(string.ascii_lowercase)
_GLOBAL_LETTERS = frozenset(string.ascii_uppercase)


@dataclass(frozen=True, slots=True)
class LocalName:
    """Name of a mark scoped to a single buffer."""

    letter: str

    def __post_init__(self) -> None:
        if self.letter not in _LOCAL_LETTERS:
            raise ValueError(f"'{self.letter}' is not a local mark name")

    @property
    def is_global(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.letter


@dataclass(frozen=True, slots=True)
class GlobalName:
    """Name of a mark that follows its buffer across switches and closes."""

    letter: str

    def __post_init__(self) -> None:
        if self.letter not in _GLOBAL_LETTERS:
            raise ValueError(f"'{self.letter}' is not a global mark name")

    @property
    def is_global(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.letter


MarkName = Union[LocalName, GlobalName]


def parse_mark_name(text: str) -> Optional[MarkName]:
    """Return the mark name for a single ASCII letter, or ``None``.

    Anything that is not exactly one character in ``[a-zA-Z]`` is not a mark
    name; callers treat ``None`` as "ignore this input".
    """

    if len(text) != 1:
        return None
    if text in _LOCAL_LETTERS:
        return LocalName(text)
    if text in _GLOBAL_LETTERS:
        return GlobalName(text)
    return None


__all__ = ["LocalName", "GlobalName", "MarkName", "parse_mark_name"]
