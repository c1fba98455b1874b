"""Injectable randomness and identifier helpers.

Every random decision in the engine goes through a :class:`random.Random`
instance handed in by the caller, so a single seed replays persona
generation, jury events and deliberation ordering.
"""
from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


def resolve_rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def pick(rng: random.Random, items: Sequence[T]) -> T:
    if not items:
        raise ValueError("cannot pick from an empty sequence")
    return items[rng.randrange(len(items))]


def shuffled(rng: random.Random, items: Sequence[T]) -> list[T]:
    result = list(items)
    rng.shuffle(result)
    return result


class IdGenerator:
    """Sequential, prefix-tagged identifiers (``event-1``, ``event-2``, ...)."""

    def __init__(self, prefix: str = "id", start: int = 1) -> None:
        self.prefix = prefix
        self._next = start

    def __call__(self) -> str:
        value = f"{self.prefix}-{self._next}"
        self._next += 1
        return value
