"""Base class for scoring models.

A scoring model maps a feature context to a probability distribution over a
fixed, ordered label vocabulary. The model is the only authority for the
mapping between label index and label text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

import numpy as np


class ScoringModel(ABC):
    """Abstract base class for scoring models.

    Implementations must be pure: ``eval`` may be called concurrently from
    several decode calls and must not depend on hidden mutable state.
    """

    @property
    @abstractmethod
    def outcomes(self) -> tuple[str, ...]:
        """The label vocabulary, in index order."""

    @abstractmethod
    def eval(self, context: Iterable[str]) -> np.ndarray:
        """Return the probability of every label given *context*.

        Args:
            context: Feature predicates active at the current position.

        Returns:
            1-D array of length ``num_outcomes`` aligned with ``outcomes``.
        """

    @property
    def num_outcomes(self) -> int:
        """Size of the label vocabulary."""
        return len(self.outcomes)

    def get_outcome(self, index: int) -> str:
        """Return the label text at *index*."""
        return self.outcomes[index]

    def get_index(self, label: str) -> int:
        """Return the index of *label*, or -1 if it is not in the vocabulary."""
        try:
            return self.outcomes.index(label)
        except ValueError:
            return -1

    def best_outcome(self, probabilities: np.ndarray) -> str:
        """Return the label with the highest probability (lowest index on ties)."""
        return self.outcomes[int(np.argmax(probabilities))]
