import random
from typing import Any, Mapping, Sequence

from outbreak.logger import get_logger

log = get_logger("rng")


class RNGService:
    """Seedable random source shared by the spawner and the split rule.

    A process-wide instance is available via ``get()``; tests inject
    their own seeded instances instead.
    """

    _instance: "RNGService | None" = None

    def __init__(self, seed: int | float | str | bytes | bytearray | None = None):
        self._generator = random.Random(seed)
        log.debug(f"RNG initialized with seed: {seed!r}")

    @classmethod
    def get(cls) -> "RNGService":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def initialize(cls, seed: int | float | str | bytes | bytearray | None = None) -> None:
        cls._instance = cls(seed)

    def seed(self, a: int | float | str | bytes | bytearray | None = None) -> None:
        self._generator.seed(a)
        log.debug(f"RNG re-seeded: {a!r}")

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._generator.random()

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._generator.randint(a, b)

    def choice(self, seq: Sequence[Any]) -> Any:
        """Return a random element from the non-empty sequence seq."""
        return self._generator.choice(seq)

    def weighted_choice(self, seq: Sequence[Any], weights: Mapping[Any, float] | None = None) -> Any:
        """Pick one element of ``seq``, uniformly or by ``weights[element]``.

        Elements missing from ``weights`` get weight 0. Falls back to a
        uniform pick when no weights are given.
        """
        if not seq:
            raise IndexError("cannot choose from an empty sequence")
        if not weights:
            return self.choice(seq)
        w = [float(weights.get(item, 0.0)) for item in seq]
        if sum(w) <= 0:
            raise ValueError("weights must contain at least one positive value")
        return self._generator.choices(seq, weights=w, k=1)[0]

    def get_state(self) -> tuple[Any, ...]:
        """Return an object capturing the current internal state of the generator."""
        return self._generator.getstate()

    def set_state(self, state: tuple[Any, ...]) -> None:
        self._generator.setstate(state)


__all__ = ["RNGService"]
