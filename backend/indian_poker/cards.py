"""Card ranks, deck construction, and pluggable shufflers."""

from __future__ import annotations

import random
from enum import IntEnum
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class Rank(IntEnum):
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10


def build_deck(copies: int = 1) -> tuple[int, ...]:
    """Return an ordered deck holding ``copies`` of every rank."""
    if copies < 1:
        raise ValueError("A deck needs at least one copy of each rank")
    return tuple(int(rank) for rank in Rank for _ in range(copies))


def draw(deck: Sequence[int], n: int = 1) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Take ``n`` cards off the top. Returns (drawn, remaining)."""
    if n > len(deck):
        raise ValueError("Not enough cards in deck")
    return tuple(deck[:n]), tuple(deck[n:])


class Shuffler(Protocol):
    """Anything that can return a permutation of a sequence."""

    def shuffle(self, cards: Sequence[T]) -> list[T]: ...


class RandomShuffler:
    """Uniform random permutation (Fisher-Yates via ``random.shuffle``).

    The input is never mutated; each call works on a fresh copy.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def shuffle(self, cards: Sequence[T]) -> list[T]:
        result = list(cards)
        self._rng.shuffle(result)
        return result


class StackedShuffler:
    """Deterministic shuffler that hands out pre-arranged orders.

    Each queued order is used for exactly one ``shuffle`` call; with nothing
    queued the input order is returned unchanged.
    """

    def __init__(self, *orders: Sequence[int]) -> None:
        self._orders: list[list[int]] = [list(o) for o in orders]

    def stack(self, order: Sequence[int]) -> None:
        self._orders.append(list(order))

    @property
    def pending(self) -> int:
        return len(self._orders)

    def shuffle(self, cards: Sequence[T]) -> list[T]:
        if self._orders:
            order = self._orders.pop(0)
            if sorted(order) != sorted(cards):
                raise ValueError("Stacked order is not a permutation of the deck")
            return list(order)  # type: ignore[arg-type]
        return list(cards)
