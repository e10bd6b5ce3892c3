"""Part-of-speech tagger facade.

Wires a scoring model, a context generator and a validity filter into a
:class:`~beam_tagger.search.beam.BeamSearchDecoder` according to
:class:`~beam_tagger.config.BeamTaggerConfig`, and adds the conveniences a
tagging application needs: sentence strings in and out, alternative
taggings, per-position tag rankings and corpus evaluation.

Results are returned from every call rather than kept on the tagger, so a
single instance can tag many inputs concurrently.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from beam_tagger.config import BeamTaggerConfig, resolve_config
from beam_tagger.context.registry import ContextGeneratorRegistry
from beam_tagger.exceptions import ConfigurationError
from beam_tagger.filters.registry import ValidityFilterRegistry
from beam_tagger.logging.logger import DecodeLogger
from beam_tagger.models.loglinear import LogLinearModel
from beam_tagger.search.beam import BeamSearchDecoder, score_position
from beam_tagger.tagger.corpus import read_annotated_line
from beam_tagger.tagger.types import EvaluationResult, TagResult

if TYPE_CHECKING:
    from beam_tagger.context.base import ContextGenerator
    from beam_tagger.filters.base import ValidityPredicate
    from beam_tagger.models.base import ScoringModel
    from beam_tagger.search.sequence import Sequence as LabelSequence

logger = logging.getLogger("beam_tagger")

FilterKey = tuple[str, tuple[str, ...], bool]


def _filter_key(config: BeamTaggerConfig) -> FilterKey:
    """Settings that determine which validity filter a config builds."""
    return (config.validity_filter, tuple(config.closed_class_tags), config.case_sensitive_tags)


def _to_result(tokens: Sequence[str], sequence: LabelSequence) -> TagResult:
    return TagResult(
        tokens=tuple(tokens),
        labels=sequence.labels,
        probabilities=sequence.probabilities,
        log_score=sequence.log_score,
    )


class POSTagger:
    """Beam search tagger built from configuration.

    Args:
        model: Trained scoring model.
        context_generator: Feature generator. ``None`` builds the one named
            by ``config.context_generator``.
        config: Default configuration. ``None`` loads it from the
            environment.
        validity_filter: Explicit filter used for every call; overriding the
            filter settings per call is then an error. ``None`` builds the
            one named by ``config.validity_filter`` and caches it per
            filter settings, so overrides that leave those settings alone
            never reload the tag dictionary.

    Raises:
        ConfigurationError: If the beam width, a component name, or the
            model vocabulary is invalid, or a per-call override changes the
            filter settings of a tagger built with an explicit filter.
    """

    def __init__(
        self,
        model: ScoringModel,
        context_generator: ContextGenerator | None = None,
        config: BeamTaggerConfig | None = None,
        validity_filter: ValidityPredicate | None = None,
    ) -> None:
        self._default_config = config if config is not None else BeamTaggerConfig()
        self._model = model
        self._context_generator = (
            context_generator
            if context_generator is not None
            else ContextGeneratorRegistry.build(self._default_config)
        )
        self._validity_filter = validity_filter
        self._filters: dict[FilterKey, ValidityPredicate] = {}
        self._filters_lock = threading.Lock()
        self._decode_logger = DecodeLogger(self._default_config)
        self._default_decoder = self._build_decoder(self._default_config)

        logger.info(
            "POSTagger initialized: labels=%d, beam_size=%d, context=%s, filter=%s",
            model.num_outcomes,
            self._default_config.beam_size,
            type(self._context_generator).__name__,
            "custom" if validity_filter is not None else self._default_config.validity_filter,
        )

    @classmethod
    def from_config(cls, config: BeamTaggerConfig | None = None) -> POSTagger:
        """Build a tagger whose model is loaded from ``config.model_path``.

        Raises:
            ConfigurationError: If no model path is configured.
            ModelLoadError: If the model cannot be loaded.
        """
        config = config if config is not None else BeamTaggerConfig()
        if not config.model_path:
            raise ConfigurationError("model_path must be set to load a tagger from config")
        return cls(LogLinearModel.load(config.model_path), config=config)

    def _filter_for(self, config: BeamTaggerConfig) -> ValidityPredicate:
        key = _filter_key(config)
        if self._validity_filter is not None:
            if key != _filter_key(self._default_config):
                raise ConfigurationError(
                    "Validity filter settings cannot be overridden on a tagger "
                    "built with an explicit validity_filter"
                )
            return self._validity_filter

        with self._filters_lock:
            validity_filter = self._filters.get(key)
            if validity_filter is None:
                validity_filter = ValidityFilterRegistry.build(config)
                self._filters[key] = validity_filter
        return validity_filter

    def _build_decoder(self, config: BeamTaggerConfig) -> BeamSearchDecoder:
        return BeamSearchDecoder(
            self._model,
            self._context_generator,
            beam_size=config.beam_size,
            validity_filter=self._filter_for(config),
            decode_logger=self._decode_logger,
        )

    def _decoder_for(self, overrides: dict[str, Any] | None) -> BeamSearchDecoder:
        config = resolve_config(self._default_config, overrides)
        if config is self._default_config:
            return self._default_decoder
        return self._build_decoder(config)

    # --- Tagging ---

    def tag(
        self,
        tokens: Sequence[str],
        extra_args: Any = None,
        overrides: dict[str, Any] | None = None,
    ) -> TagResult:
        """Tag *tokens* with the best sequence found by beam search.

        Args:
            tokens: Input tokens.
            extra_args: Passed unchanged to the context generator.
            overrides: Per-call ``bt_``-prefixed config overrides.

        Returns:
            TagResult with one label and probability per token.
        """
        sequence = self._decoder_for(overrides).decode(tokens, extra_args)
        return _to_result(tokens, sequence)

    def top_sequences(
        self,
        tokens: Sequence[str],
        num_sequences: int,
        extra_args: Any = None,
        overrides: dict[str, Any] | None = None,
    ) -> list[TagResult]:
        """Return up to *num_sequences* alternative taggings, best first."""
        sequences = self._decoder_for(overrides).best_sequences(tokens, num_sequences, extra_args)
        return [_to_result(tokens, sequence) for sequence in sequences]

    def tag_sentence(self, sentence: str) -> str:
        """Tag a whitespace-tokenized sentence and render it as ``token/TAG`` pairs."""
        return self.tag(sentence.split()).to_string()

    def ordered_tags(
        self,
        tokens: Sequence[str],
        tags: Sequence[str],
        index: int,
        extra_args: Any = None,
    ) -> list[str]:
        """Rank every label for position *index* given the preceding *tags*.

        Args:
            tokens: Input tokens.
            tags: Labels already assigned to positions before *index*.
            index: Position to rank labels for.
            extra_args: Passed unchanged to the context generator.

        Returns:
            All labels, most probable first; equal probabilities keep
            vocabulary order.

        Raises:
            ContextGenerationError: If the context generator fails.
            ModelEvaluationError: If the model fails or returns an unusable
                probability vector.
        """
        probabilities = score_position(
            self._model, self._context_generator, tuple(tokens), tuple(tags), index, extra_args
        )
        order = np.argsort(-probabilities, kind="stable")
        return [self._model.get_outcome(int(i)) for i in order]

    # --- Evaluation ---

    def evaluate(self, lines: Iterable[str]) -> EvaluationResult:
        """Measure accuracy against ``word_TAG`` annotated sentences.

        Blank lines are skipped.

        Raises:
            InvalidFormatError: If a line is not in ``word_TAG`` format.
        """
        total_tokens = correct_tokens = total_sentences = correct_sentences = 0
        for line in lines:
            if not line.strip():
                continue
            words, reference = read_annotated_line(line)
            predicted = self.tag(words).labels
            matches = sum(1 for p, r in zip(predicted, reference) if p == r)
            total_sentences += 1
            total_tokens += len(reference)
            correct_tokens += matches
            if matches == len(reference):
                correct_sentences += 1

        result = EvaluationResult(
            total_tokens=total_tokens,
            correct_tokens=correct_tokens,
            total_sentences=total_sentences,
            correct_sentences=correct_sentences,
        )
        logger.info(
            "Evaluation: accuracy=%.4f sentence_accuracy=%.4f (%d tokens, %d sentences)",
            result.accuracy,
            result.sentence_accuracy,
            total_tokens,
            total_sentences,
        )
        return result

    # --- Accessors ---

    @property
    def model(self) -> ScoringModel:
        """The scoring model."""
        return self._model

    @property
    def default_config(self) -> BeamTaggerConfig:
        """The default configuration."""
        return self._default_config

    @property
    def decode_logger(self) -> DecodeLogger:
        """The diagnostic logger shared by all decodes of this tagger."""
        return self._decode_logger
