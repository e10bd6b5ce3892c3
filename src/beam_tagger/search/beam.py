"""Beam search decoder.

Labels a token sequence by keeping the K best partial label sequences after
each position:

    for each position:
        for each sequence in the beam:
            context -> model.eval -> one candidate per label (filtered)
        beam <- K best candidates (stable on generation order)

Cost is ``O(n * K)`` model evaluations instead of the ``L ** n`` full
sequences an exhaustive search would score. Pruning is irreversible, so the
result is not guaranteed to be the globally best sequence. With K=1 the
search is exactly greedy arg-max decoding.
"""

from __future__ import annotations

import heapq
import logging
import time
from collections.abc import Sequence as SequenceABC
from typing import TYPE_CHECKING, Any

import numpy as np

from beam_tagger.exceptions import (
    BeamTaggerError,
    ConfigurationError,
    ContextGenerationError,
    ModelEvaluationError,
    NoValidSequenceError,
)
from beam_tagger.logging.types import DecodeRecord
from beam_tagger.search.sequence import Sequence

if TYPE_CHECKING:
    from beam_tagger.context.base import ContextGenerator
    from beam_tagger.filters.base import ValidityPredicate
    from beam_tagger.logging.logger import DecodeLogger
    from beam_tagger.models.base import ScoringModel

logger = logging.getLogger("beam_tagger")

DEFAULT_BEAM_SIZE = 3


def _rank(sequence: Sequence) -> float:
    return sequence.log_score


def score_position(
    model: ScoringModel,
    context_generator: ContextGenerator,
    tokens: SequenceABC[str],
    prior_labels: SequenceABC[str],
    index: int,
    extra_args: Any = None,
) -> np.ndarray:
    """Score every label at *index* given the labels chosen before it.

    Args:
        model: Scoring model to evaluate.
        context_generator: Builds the feature context for *index*.
        tokens: The full input.
        prior_labels: Labels of the branch being extended.
        index: Position being labelled.
        extra_args: Opaque value handed unchanged to the context generator.

    Returns:
        Probability vector of length ``model.num_outcomes``.

    Raises:
        ContextGenerationError: If the context generator raises.
        ModelEvaluationError: If the model raises or returns a vector that
            is not a finite, non-negative array of length L.
    """
    try:
        context = context_generator.generate(tokens, prior_labels, index, extra_args)
    except BeamTaggerError:
        raise
    except Exception as exc:  # Re-raised with the failing position attached.
        raise ContextGenerationError(index, f"{type(exc).__name__}: {exc}") from exc

    try:
        raw = model.eval(context)
        probabilities = np.asarray(raw, dtype=np.float64)
    except BeamTaggerError:
        raise
    except Exception as exc:  # Re-raised with the failing position attached.
        raise ModelEvaluationError(index, f"{type(exc).__name__}: {exc}") from exc

    expected = (model.num_outcomes,)
    if probabilities.shape != expected:
        raise ModelEvaluationError(
            index,
            f"expected probability vector of shape {expected}, got {probabilities.shape}",
        )
    if not np.all(np.isfinite(probabilities)) or np.any(probabilities < 0.0):
        raise ModelEvaluationError(
            index, "probability vector contains negative or non-finite values"
        )
    return probabilities


class BeamSearchDecoder:
    """Finds a high-scoring label sequence for a token sequence.

    The decoder holds only its immutable collaborators; every ``decode``
    call builds and discards its own beam, so one instance can serve
    concurrent callers as long as the model, context generator and filter
    are themselves pure.

    Args:
        model: Scoring model providing the label vocabulary and probabilities.
        context_generator: Builds the feature context for each position.
        beam_size: Number of sequences kept after each position (K).
        validity_filter: Optional predicate
            ``(index, tokens, prior_labels, label) -> bool``; rejected
            candidates never enter the beam. ``None`` accepts everything.
        decode_logger: Optional diagnostic logger fed one record per decode.

    Raises:
        ConfigurationError: If *beam_size* is not a positive integer or the
            model has an empty vocabulary.
    """

    def __init__(
        self,
        model: ScoringModel,
        context_generator: ContextGenerator,
        beam_size: int = DEFAULT_BEAM_SIZE,
        validity_filter: ValidityPredicate | None = None,
        decode_logger: DecodeLogger | None = None,
    ) -> None:
        if isinstance(beam_size, bool) or not isinstance(beam_size, int) or beam_size <= 0:
            raise ConfigurationError(f"beam_size must be a positive integer, got {beam_size!r}")
        if model.num_outcomes == 0:
            raise ConfigurationError("Scoring model has an empty label vocabulary")

        self._model = model
        self._context_generator = context_generator
        self._beam_size = beam_size
        self._validity_filter = validity_filter
        self._decode_logger = decode_logger

    @property
    def beam_size(self) -> int:
        """Configured beam width K."""
        return self._beam_size

    @property
    def model(self) -> ScoringModel:
        """The scoring model used for every position."""
        return self._model

    def decode(self, tokens: SequenceABC[str], extra_args: Any = None) -> Sequence:
        """Return the best label sequence found for *tokens*.

        Args:
            tokens: Input tokens, in order.
            extra_args: Opaque value handed unchanged to the context generator.

        Returns:
            The top sequence of the final beam. Empty input yields
            ``Sequence.empty()`` without calling the model.

        Raises:
            NoValidSequenceError: If the validity filter rejects every
                candidate at some position.
            ModelEvaluationError: If the model fails or returns an unusable
                probability vector.
            ContextGenerationError: If the context generator fails.
        """
        return self.best_sequences(tokens, 1, extra_args)[0]

    def best_sequences(
        self,
        tokens: SequenceABC[str],
        num_sequences: int,
        extra_args: Any = None,
    ) -> list[Sequence]:
        """Return up to *num_sequences* sequences of the final beam, best first.

        The beam is still pruned to ``beam_size``, so at most
        ``min(num_sequences, beam_size)`` sequences come back.

        Raises:
            ConfigurationError: If *num_sequences* is not positive.
            NoValidSequenceError: See :meth:`decode`.
            ModelEvaluationError: See :meth:`decode`.
        """
        if num_sequences <= 0:
            raise ConfigurationError(f"num_sequences must be positive, got {num_sequences}")

        t_start_ns = time.perf_counter_ns()
        tokens = tuple(tokens)
        outcomes = self._model.outcomes
        validity_filter = self._validity_filter

        evaluations = 0
        generated = 0
        rejected = 0

        beam = [Sequence.empty()]
        for index in range(len(tokens)):
            candidates: list[Sequence] = []
            for sequence in beam:
                probabilities = self._evaluate(tokens, sequence, index, extra_args)
                evaluations += 1
                for label, probability in zip(outcomes, probabilities):
                    generated += 1
                    if validity_filter is not None and not validity_filter(
                        index, tokens, sequence.labels, label
                    ):
                        rejected += 1
                        continue
                    candidates.append(sequence.extend(label, probability))

            if not candidates:
                raise NoValidSequenceError(
                    index,
                    f"Validity filter rejected every candidate at position {index} "
                    f"(token {tokens[index]!r})",
                )

            # nlargest is stable: equal scores keep generation order.
            beam = heapq.nlargest(self._beam_size, candidates, key=_rank)
            logger.debug(
                "position=%d candidates=%d beam=%d best=%.4f",
                index,
                len(candidates),
                len(beam),
                beam[0].log_score,
            )

        if self._decode_logger is not None:
            self._decode_logger.log_decode(
                DecodeRecord(
                    timestamp_ns=t_start_ns,
                    total_decode_ms=(time.perf_counter_ns() - t_start_ns) / 1_000_000.0,
                    num_tokens=len(tokens),
                    beam_size=self._beam_size,
                    model_evaluations=evaluations,
                    candidates_generated=generated,
                    candidates_rejected=rejected,
                    final_beam_size=len(beam),
                    best_log_score=beam[0].log_score,
                    labels=beam[0].labels,
                )
            )

        return beam[:num_sequences]

    def _evaluate(
        self,
        tokens: tuple[str, ...],
        sequence: Sequence,
        index: int,
        extra_args: Any,
    ) -> list[float]:
        """Score every label for extending *sequence* at *index*."""
        probabilities = score_position(
            self._model, self._context_generator, tokens, sequence.labels, index, extra_args
        )
        result: list[float] = probabilities.tolist()
        return result
