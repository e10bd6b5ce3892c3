"""Log-linear (maximum entropy) scoring model.

Each feature predicate owns one weight per label. The score of a label is
the sum of the weights of the active predicates, normalised with a stable
softmax. Training is done elsewhere; this module only evaluates and
(de)serializes trained weights.

File format (JSON)::

    {
      "outcomes": ["NN", "VB", ...],
      "predicates": ["default", "w=time", ...],
      "weights": [[...L floats...], ...]   # one row per predicate
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import numpy as np

from beam_tagger.exceptions import ConfigurationError, ModelLoadError
from beam_tagger.models.base import ScoringModel

logger = logging.getLogger("beam_tagger")


def _stable_softmax(scores: np.ndarray) -> np.ndarray:
    """Numerically stable softmax via shift-by-max."""
    shifted = scores - np.max(scores)
    exp_shifted = np.exp(shifted)
    result: np.ndarray = exp_shifted / np.sum(exp_shifted)
    return result


class LogLinearModel(ScoringModel):
    """Maximum entropy model over a fixed label vocabulary.

    Args:
        outcomes: Label vocabulary, in index order. Must be non-empty and
            free of duplicates.
        predicates: Feature predicate names, one per weight row.
        weights: Array of shape ``(len(predicates), len(outcomes))``.

    Raises:
        ConfigurationError: If the vocabulary is empty or duplicated, a
            predicate is repeated, or the weight matrix has the wrong shape.
    """

    def __init__(
        self,
        outcomes: Sequence[str],
        predicates: Sequence[str],
        weights: Any,
    ) -> None:
        outcomes = tuple(outcomes)
        if not outcomes:
            raise ConfigurationError("Model vocabulary must contain at least one label")
        if len(set(outcomes)) != len(outcomes):
            raise ConfigurationError(f"Model vocabulary contains duplicate labels: {outcomes}")

        predicate_index = {name: i for i, name in enumerate(predicates)}
        if len(predicate_index) != len(predicates):
            raise ConfigurationError("Model predicates must be unique")

        matrix = np.asarray(weights, dtype=np.float64)
        if len(predicates) == 0:
            matrix = matrix.reshape(0, len(outcomes))
        expected = (len(predicates), len(outcomes))
        if matrix.shape != expected:
            raise ConfigurationError(
                f"Weight matrix has shape {matrix.shape}, expected {expected}"
            )

        self._outcomes = outcomes
        self._predicate_index = predicate_index
        self._weights = matrix
        # Weights are shared across threads; freeze them.
        self._weights.setflags(write=False)

    @property
    def outcomes(self) -> tuple[str, ...]:
        return self._outcomes

    @property
    def num_predicates(self) -> int:
        """Number of feature predicates with weights."""
        return len(self._predicate_index)

    def eval(self, context: Iterable[str]) -> np.ndarray:
        """Return label probabilities for the active predicates in *context*.

        Predicates unknown to the model are ignored. Rows are summed in
        sorted predicate order so the result does not depend on the
        iteration order of the context set.
        """
        rows = [
            self._predicate_index[name]
            for name in sorted(set(context))
            if name in self._predicate_index
        ]
        if rows:
            scores = self._weights[rows].sum(axis=0)
        else:
            scores = np.zeros(len(self._outcomes), dtype=np.float64)
        return _stable_softmax(scores)

    # --- Serialization ---

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the model."""
        predicates = sorted(self._predicate_index, key=self._predicate_index.__getitem__)
        return {
            "outcomes": list(self._outcomes),
            "predicates": predicates,
            "weights": self._weights.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogLinearModel:
        """Build a model from the output of :meth:`to_dict`.

        Raises:
            ModelLoadError: If a required key is missing or a value is invalid.
        """
        try:
            outcomes = data["outcomes"]
            predicates = data["predicates"]
            weights = data["weights"]
        except (KeyError, TypeError) as exc:
            raise ModelLoadError(f"Model data is missing required key: {exc}") from exc
        try:
            return cls(outcomes, predicates, weights)
        except (ConfigurationError, ValueError, TypeError) as exc:
            raise ModelLoadError(f"Invalid model data: {exc}") from exc

    def save(self, path: str | Path) -> None:
        """Write the model to *path* as JSON."""
        Path(path).write_text(json.dumps(self.to_dict()), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> LogLinearModel:
        """Read a model written by :meth:`save`.

        Args:
            path: Location of the JSON model file.

        Returns:
            The loaded model.

        Raises:
            ModelLoadError: If the file cannot be read or is malformed.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ModelLoadError(f"Cannot read model file {str(path)!r}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ModelLoadError(f"Model file {str(path)!r} is not valid JSON: {exc}") from exc

        model = cls.from_dict(data)
        logger.info(
            "Loaded log-linear model from %s: %d labels, %d predicates",
            path,
            model.num_outcomes,
            model.num_predicates,
        )
        return model
