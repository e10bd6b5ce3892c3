"""Shared pytest fixtures for beam-tagger tests.

Provides configuration objects, a table-driven stub scoring model with a
matching context generator, and a small trained-looking log-linear model.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import numpy as np
import pytest

from beam_tagger.config import BeamTaggerConfig
from beam_tagger.context.base import Context, ContextGenerator
from beam_tagger.models.base import ScoringModel
from beam_tagger.models.loglinear import LogLinearModel


class WordAndPreviousLabelContext(ContextGenerator):
    """Context of the current word and the previous label only."""

    def generate(
        self,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        index: int,
        extra_args: Any = None,
    ) -> Context:
        prev = prior_labels[index - 1] if index else "*SB*"
        return frozenset({f"w={tokens[index]}", f"t={prev}"})


class TableModel(ScoringModel):
    """Scoring model that looks probabilities up by (word, previous label).

    A ``(word, None)`` entry applies regardless of the previous label.
    Unknown words get a uniform distribution. Counts every ``eval`` call.
    """

    def __init__(
        self,
        outcomes: Sequence[str],
        table: Mapping[tuple[str, str | None], Sequence[float]],
    ) -> None:
        self._outcomes = tuple(outcomes)
        self._table = dict(table)
        self.calls = 0

    @property
    def outcomes(self) -> tuple[str, ...]:
        return self._outcomes

    def eval(self, context: Iterable[str]) -> np.ndarray:
        self.calls += 1
        features = dict(item.split("=", 1) for item in context)
        word, prev = features["w"], features["t"]
        for key in ((word, prev), (word, None)):
            if key in self._table:
                return np.array(self._table[key], dtype=np.float64)
        n = len(self._outcomes)
        return np.full(n, 1.0 / n)


@pytest.fixture()
def config() -> BeamTaggerConfig:
    """Default config with decode logging silenced."""
    return BeamTaggerConfig(_env_file=None, log_level="none")  # type: ignore[call-arg]


@pytest.fixture()
def word_context() -> WordAndPreviousLabelContext:
    """Context generator matching TableModel."""
    return WordAndPreviousLabelContext()


@pytest.fixture()
def time_flies_model() -> TableModel:
    """The 'time flies' model: greedy and beam search disagree on step 2 only.

    P(time) = [0.6, 0.4]; P(flies | NOUN) = [0.3, 0.7];
    P(flies | VERB) = [0.9, 0.1].
    """
    return TableModel(
        ["NOUN", "VERB"],
        {
            ("time", None): [0.6, 0.4],
            ("flies", "NOUN"): [0.3, 0.7],
            ("flies", "VERB"): [0.9, 0.1],
        },
    )


@pytest.fixture()
def garden_path_model() -> TableModel:
    """A model where the greedy first choice leads to a worse full sequence.

    Greedy picks A (0.6) then at best 0.5 -> 0.30; B (0.4) then 0.95 -> 0.38.
    """
    return TableModel(
        ["A", "B"],
        {
            ("x", None): [0.6, 0.4],
            ("y", "A"): [0.5, 0.5],
            ("y", "B"): [0.95, 0.05],
        },
    )


@pytest.fixture()
def pos_model() -> LogLinearModel:
    """A tiny log-linear POS model for determiner / noun / verb."""
    outcomes = ["DT", "NN", "VB"]
    weights = {
        "w=the": [4.0, 0.0, 0.0],
        "w=a": [4.0, 0.0, 0.0],
        "w=dog": [0.0, 3.0, 1.0],
        "w=cat": [0.0, 3.0, 1.0],
        "w=barks": [0.0, 1.0, 3.0],
        "w=runs": [0.0, 1.5, 2.0],
        "t=DT": [-2.0, 2.0, -1.0],
        "t=NN": [0.0, -1.0, 1.5],
    }
    return LogLinearModel(outcomes, list(weights), list(weights.values()))


@pytest.fixture()
def make_table_model() -> type[TableModel]:
    """Factory for TableModel instances with custom tables."""
    return TableModel
