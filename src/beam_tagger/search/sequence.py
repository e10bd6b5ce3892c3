"""Immutable partial label sequences used by the beam search."""

from __future__ import annotations

import math
from dataclasses import dataclass, field


def _log(probability: float) -> float:
    """Natural log that maps zero to ``-inf`` instead of raising."""
    if probability <= 0.0:
        return -math.inf
    return math.log(probability)


@dataclass(frozen=True, slots=True)
class Sequence:
    """A label history with the probability of each chosen label.

    The cumulative score is accumulated in log space. ``score`` (the
    running product of probabilities) and ``log_score`` induce the same
    ranking, but the log form does not underflow on long inputs.

    Build instances with :meth:`empty` and :meth:`extend`. The log score is
    always derived from the probabilities, never passed in.

    Attributes:
        labels: Labels chosen so far, one per decoded position.
        probabilities: Probability assigned to each label when it was chosen.
        log_score: Sum of the natural logs of ``probabilities``.
    """

    labels: tuple[str, ...] = ()
    probabilities: tuple[float, ...] = ()
    log_score: float = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.labels) != len(self.probabilities):
            raise ValueError(
                f"Sequence has {len(self.labels)} labels but "
                f"{len(self.probabilities)} probabilities"
            )
        object.__setattr__(self, "log_score", math.fsum(_log(p) for p in self.probabilities))

    @classmethod
    def empty(cls) -> Sequence:
        """Return the seed sequence: no labels, score 1.0."""
        return cls()

    def extend(self, label: str, probability: float) -> Sequence:
        """Return a new sequence with *label* appended.

        Args:
            label: Label chosen at the next position.
            probability: Model probability of *label* at that position.

        Returns:
            A new Sequence whose score is ``self.score * probability``.
        """
        probability = float(probability)
        return Sequence(
            labels=(*self.labels, label),
            probabilities=(*self.probabilities, probability),
        )

    @property
    def score(self) -> float:
        """Cumulative probability of the sequence (may underflow to 0.0)."""
        return math.exp(self.log_score)

    def __len__(self) -> int:
        return len(self.labels)

    def __str__(self) -> str:
        return f"{self.log_score:.6f} {list(self.labels)}"
