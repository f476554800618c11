import html
import math
import time
from typing import Callable, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float:
        ...


# --- HTML ---
def safe_escape(text: str) -> str:
    return html.escape(str(text), quote=True)


# --- RANDOM PICKS ---
def pick(pool: Sequence[T], rng: RandomSource) -> T:
    """Return a uniformly random element of ``pool``.

    Single-element pools are returned directly so no entropy is consumed.
    """
    if not pool:
        raise ValueError("Cannot pick from an empty pool.")
    if len(pool) == 1:
        return pool[0]
    return pool[int(math.floor(rng.random() * len(pool)))]


def random_id(rng: RandomSource, clock: Callable[[], float] = time.time) -> str:
    # Not unique, Telegram ignores duplicate inline result ids anyway.
    return format(int(math.floor(clock() * 1000 + rng.random() * 10000)), "x")
