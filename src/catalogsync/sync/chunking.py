"""Length-based chunking for long attachment text."""

from __future__ import annotations

from dataclasses import dataclass

from .text import normalize_text

DEFAULT_MAX_CHARACTERS = 32000


@dataclass(slots=True, frozen=True)
class ChunkingConfig:
    """Maximum number of characters stored per chunk."""

    max_characters: int = DEFAULT_MAX_CHARACTERS

    def __post_init__(self) -> None:
        if self.max_characters <= 0:
            msg = "max_characters must be greater than zero"
            raise ValueError(msg)


def split_text(text: str, max_size: int) -> list[str]:
    """Cut ``text`` into contiguous slices of at most ``max_size`` characters.

    Joining the slices reproduces ``text`` exactly. Boundaries ignore word
    edges.
    """

    if max_size <= 0:
        msg = "max_size must be greater than zero"
        raise ValueError(msg)
    return [text[start : start + max_size] for start in range(0, len(text), max_size)]


def chunk_text(text: str, max_size: int = DEFAULT_MAX_CHARACTERS) -> list[str]:
    """Split ``text`` into ordered, normalised chunks no longer than ``max_size``."""

    return [normalize_text(segment) for segment in split_text(text, max_size)]
