"""Tests for the BeamSearchDecoder."""

from __future__ import annotations

import itertools
import math
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import numpy as np
import pytest

from beam_tagger.config import BeamTaggerConfig
from beam_tagger.context import ChunkContextGenerator
from beam_tagger.exceptions import (
    ConfigurationError,
    ContextGenerationError,
    ModelEvaluationError,
    NoValidSequenceError,
)
from beam_tagger.logging.logger import DecodeLogger
from beam_tagger.search.beam import DEFAULT_BEAM_SIZE, BeamSearchDecoder
from beam_tagger.search.sequence import Sequence as LabelSequence


def _reject_all(index: int, tokens: Sequence[str], prior: Sequence[str], label: str) -> bool:
    return False


class TestConstruction:
    """Tests for decoder construction checks."""

    def test_default_beam_size(self, time_flies_model, word_context) -> None:
        decoder = BeamSearchDecoder(time_flies_model, word_context)
        assert decoder.beam_size == DEFAULT_BEAM_SIZE == 3

    @pytest.mark.parametrize("beam_size", [0, -1, -10])
    def test_non_positive_beam_size_rejected(
        self, time_flies_model, word_context, beam_size: int
    ) -> None:
        with pytest.raises(ConfigurationError, match="beam_size"):
            BeamSearchDecoder(time_flies_model, word_context, beam_size=beam_size)

    @pytest.mark.parametrize("beam_size", [1.5, "3", True])
    def test_non_int_beam_size_rejected(self, time_flies_model, word_context, beam_size) -> None:
        with pytest.raises(ConfigurationError):
            BeamSearchDecoder(time_flies_model, word_context, beam_size=beam_size)

    def test_empty_vocabulary_rejected(self, word_context) -> None:
        model = MagicMock()
        model.num_outcomes = 0
        with pytest.raises(ConfigurationError, match="empty label vocabulary"):
            BeamSearchDecoder(model, word_context)


class TestDecode:
    """Tests for the decoding algorithm."""

    def test_time_flies(self, time_flies_model, word_context) -> None:
        """NOUN VERB (0.6 * 0.7 = 0.42) beats VERB NOUN (0.4 * 0.9 = 0.36)."""
        decoder = BeamSearchDecoder(time_flies_model, word_context, beam_size=2)
        result = decoder.decode(["time", "flies"])
        assert result.labels == ("NOUN", "VERB")
        assert result.probabilities == (0.6, 0.7)
        assert result.score == pytest.approx(0.42)

    def test_time_flies_runner_up(self, time_flies_model, word_context) -> None:
        decoder = BeamSearchDecoder(time_flies_model, word_context, beam_size=2)
        best, second = decoder.best_sequences(["time", "flies"], 2)
        assert best.labels == ("NOUN", "VERB")
        assert second.labels == ("VERB", "NOUN")
        assert second.score == pytest.approx(0.36)

    def test_beam_width_one_is_greedy(self, garden_path_model, word_context) -> None:
        """K=1 follows the per-step arg-max, even into a worse full sequence."""
        decoder = BeamSearchDecoder(garden_path_model, word_context, beam_size=1)
        result = decoder.decode(["x", "y"])
        assert result.labels == ("A", "A")
        assert result.score == pytest.approx(0.30)

    def test_wider_beam_recovers_from_greedy_mistake(self, garden_path_model, word_context) -> None:
        decoder = BeamSearchDecoder(garden_path_model, word_context, beam_size=2)
        result = decoder.decode(["x", "y"])
        assert result.labels == ("B", "A")
        assert result.score == pytest.approx(0.38)

    def test_empty_tokens_returns_empty_sequence(self, time_flies_model, word_context) -> None:
        decoder = BeamSearchDecoder(time_flies_model, word_context)
        result = decoder.decode([])
        assert result == LabelSequence.empty()
        assert result.labels == ()
        assert result.probabilities == ()
        assert time_flies_model.calls == 0

    def test_result_is_top_of_final_beam(self, garden_path_model, word_context) -> None:
        decoder = BeamSearchDecoder(garden_path_model, word_context, beam_size=3)
        beam = decoder.best_sequences(["x", "y", "y"], 3)
        best = decoder.decode(["x", "y", "y"])
        assert best == beam[0]
        for other in beam[1:]:
            assert best.log_score >= other.log_score
        scores = [s.log_score for s in beam]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_label_order(self, make_table_model, word_context) -> None:
        model = make_table_model(["X", "Y", "Z"], {("w", None): [1 / 3, 1 / 3, 1 / 3]})
        decoder = BeamSearchDecoder(model, word_context, beam_size=2)
        beam = decoder.best_sequences(["w"], 2)
        assert [s.labels for s in beam] == [("X",), ("Y",)]

    def test_deterministic(self, garden_path_model, word_context) -> None:
        decoder = BeamSearchDecoder(garden_path_model, word_context, beam_size=2)
        first = decoder.decode(["x", "y", "x", "y"])
        second = decoder.decode(["x", "y", "x", "y"])
        assert first.labels == second.labels
        assert first.probabilities == second.probabilities

    def test_extra_args_passed_to_context_generator(self, time_flies_model) -> None:
        context = MagicMock()
        context.generate.return_value = frozenset({"w=time", "t=*SB*"})
        decoder = BeamSearchDecoder(time_flies_model, context, beam_size=1)
        marker = object()
        decoder.decode(["time"], extra_args=marker)
        context.generate.assert_called_once_with(("time",), (), 0, marker)

    def test_long_input_does_not_underflow_ranking(self, make_table_model, word_context) -> None:
        """Products underflow to 0.0 but log scores still rank correctly."""
        model = make_table_model(["A", "B"], {("w", None): [0.1, 0.05]})
        decoder = BeamSearchDecoder(model, word_context, beam_size=2)
        best, second = decoder.best_sequences(["w"] * 400, 2)
        assert best.labels == ("A",) * 400
        assert best.score == 0.0
        assert math.isfinite(best.log_score)
        assert best.log_score > second.log_score

    def test_zero_probability_ranks_last(self, make_table_model, word_context) -> None:
        model = make_table_model(["A", "B"], {("w", None): [0.0, 1.0]})
        decoder = BeamSearchDecoder(model, word_context, beam_size=2)
        best, second = decoder.best_sequences(["w"], 2)
        assert best.labels == ("B",)
        assert second.labels == ("A",)
        assert second.log_score == -math.inf


class TestModelEvaluations:
    """The number of scoring model calls is bounded by n * K."""

    @pytest.mark.parametrize("beam_size", [1, 2, 3, 5])
    def test_evaluation_count(self, make_table_model, word_context, beam_size: int) -> None:
        model = make_table_model(["A", "B", "C"], {})
        decoder = BeamSearchDecoder(model, word_context, beam_size=beam_size)
        tokens = ["w"] * 4
        decoder.decode(tokens)

        # Beam holds min(K, 3 ** i) sequences entering position i.
        expected = sum(min(beam_size, 3**i) for i in range(len(tokens)))
        assert model.calls == expected
        assert model.calls <= len(tokens) * beam_size

    def test_evaluation_count_recorded(
        self, make_table_model, word_context, config: BeamTaggerConfig
    ) -> None:
        model = make_table_model(["A", "B"], {})
        diag = DecodeLogger(config.model_copy(update={"diagnostic_mode": True}))
        decoder = BeamSearchDecoder(model, word_context, beam_size=2, decode_logger=diag)
        decoder.decode(["w", "w", "w"])

        (record,) = diag.get_diagnostic_data()
        assert record.model_evaluations == model.calls == 1 + 2 + 2
        assert record.candidates_generated == 2 * record.model_evaluations
        assert record.candidates_rejected == 0
        assert record.num_tokens == 3
        assert record.final_beam_size == 2


class TestValidityFilter:
    """Tests for the validity filter hook."""

    def test_filter_excludes_labels(self, time_flies_model, word_context) -> None:
        def no_verbs(index, tokens, prior, label) -> bool:
            return label != "VERB"

        decoder = BeamSearchDecoder(
            time_flies_model, word_context, beam_size=2, validity_filter=no_verbs
        )
        result = decoder.decode(["time", "flies"])
        assert result.labels == ("NOUN", "NOUN")
        assert result.probabilities == (0.6, 0.3)

    def test_filter_receives_branch_history(self, time_flies_model, word_context) -> None:
        calls = []

        def spy(index, tokens, prior, label) -> bool:
            calls.append((index, tuple(tokens), tuple(prior), label))
            return True

        decoder = BeamSearchDecoder(
            time_flies_model, word_context, beam_size=2, validity_filter=spy
        )
        decoder.decode(["time", "flies"])
        assert calls[:2] == [
            (0, ("time", "flies"), (), "NOUN"),
            (0, ("time", "flies"), (), "VERB"),
        ]
        assert (1, ("time", "flies"), ("VERB",), "NOUN") in calls
        assert len(calls) == 2 + 2 * 2

    def test_all_rejected_raises(self, time_flies_model, word_context) -> None:
        decoder = BeamSearchDecoder(
            time_flies_model, word_context, validity_filter=_reject_all
        )
        with pytest.raises(NoValidSequenceError) as exc_info:
            decoder.decode(["time", "flies"])
        assert exc_info.value.index == 0

    def test_rejection_at_later_position_reports_index(
        self, time_flies_model, word_context, config: BeamTaggerConfig
    ) -> None:
        def only_first(index, tokens, prior, label) -> bool:
            return index == 0

        diag = DecodeLogger(config.model_copy(update={"diagnostic_mode": True}))
        decoder = BeamSearchDecoder(
            time_flies_model, word_context, validity_filter=only_first, decode_logger=diag
        )
        with pytest.raises(NoValidSequenceError) as exc_info:
            decoder.decode(["time", "flies"])
        assert exc_info.value.index == 1
        # No partial result is recorded.
        assert diag.get_diagnostic_data() == []


class TestModelErrors:
    """Failures of the scoring model abort the decode."""

    def _decoder_with(self, eval_result=None, eval_error=None, word_context=None):
        model = MagicMock()
        model.num_outcomes = 2
        model.outcomes = ("A", "B")
        if eval_error is not None:
            model.eval.side_effect = eval_error
        else:
            model.eval.return_value = eval_result
        return BeamSearchDecoder(model, word_context)

    def test_wrong_length(self, word_context) -> None:
        decoder = self._decoder_with(np.array([0.2, 0.3, 0.5]), word_context=word_context)
        with pytest.raises(ModelEvaluationError, match="shape") as exc_info:
            decoder.decode(["w"])
        assert exc_info.value.index == 0

    def test_wrong_dimensions(self, word_context) -> None:
        decoder = self._decoder_with(np.array([[0.5, 0.5]]), word_context=word_context)
        with pytest.raises(ModelEvaluationError):
            decoder.decode(["w"])

    @pytest.mark.parametrize("bad", [[np.nan, 1.0], [np.inf, 0.0], [-0.1, 1.1]])
    def test_invalid_values(self, word_context, bad) -> None:
        decoder = self._decoder_with(np.array(bad), word_context=word_context)
        with pytest.raises(ModelEvaluationError, match="non-finite"):
            decoder.decode(["w"])

    def test_model_exception_wrapped_with_cause(self, word_context) -> None:
        decoder = self._decoder_with(eval_error=RuntimeError("boom"), word_context=word_context)
        with pytest.raises(ModelEvaluationError, match="boom") as exc_info:
            decoder.decode(["w", "w"])
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.index == 0

    def test_accepts_plain_lists(self, word_context) -> None:
        decoder = self._decoder_with([0.25, 0.75], word_context=word_context)
        assert decoder.decode(["w"]).labels == ("B",)


class TestContextErrors:
    """Failures of the context generator abort the decode with the position."""

    def test_exception_wrapped_with_index_and_cause(self, time_flies_model) -> None:
        def generate(tokens, prior_labels, index, extra_args=None):
            if index == 1:
                raise ValueError("no features for token")
            return frozenset({f"w={tokens[index]}", "t=*SB*"})

        context = MagicMock()
        context.generate.side_effect = generate
        decoder = BeamSearchDecoder(time_flies_model, context)
        with pytest.raises(ContextGenerationError, match="position 1") as exc_info:
            decoder.decode(["time", "flies"])
        assert exc_info.value.index == 1
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_library_errors_pass_through(self, time_flies_model) -> None:
        context = MagicMock()
        context.generate.side_effect = ConfigurationError("misconfigured")
        decoder = BeamSearchDecoder(time_flies_model, context)
        with pytest.raises(ConfigurationError, match="misconfigured"):
            decoder.decode(["time"])

    def test_chunk_context_without_pos_tags(self, time_flies_model) -> None:
        decoder = BeamSearchDecoder(time_flies_model, ChunkContextGenerator())
        with pytest.raises(ContextGenerationError, match="requires the POS tags") as exc_info:
            decoder.decode(["time", "flies"])
        assert exc_info.value.index == 0


class TestConcurrency:
    """One decoder serves concurrent callers."""

    def test_shared_decoder_across_threads(self, make_table_model, word_context) -> None:
        rng = np.random.default_rng(seed=11)
        labels = ["A", "B", "C"]
        words = ["u", "v", "w", "x"]
        table = {}
        for word, prev in itertools.product(words, labels + ["*SB*"]):
            probs = rng.random(len(labels))
            table[(word, prev)] = (probs / probs.sum()).tolist()
        model = make_table_model(labels, table)
        config = BeamTaggerConfig(  # type: ignore[call-arg]
            _env_file=None, log_level="none", diagnostic_mode=True
        )
        decode_logger = DecodeLogger(config)
        decoder = BeamSearchDecoder(model, word_context, beam_size=3, decode_logger=decode_logger)

        inputs = [
            [words[i] for i in rng.integers(0, len(words), size=int(n))]
            for n in rng.integers(1, 12, size=64)
        ]
        expected = [decoder.decode(tokens) for tokens in inputs]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(decoder.decode, inputs))

        assert results == expected
        assert len(decode_logger.get_diagnostic_data()) == 2 * len(inputs)


class TestGreedyEquivalence:
    """With K=1 the decoder returns the per-step arg-max path."""

    def test_greedy_on_random_tables(self, make_table_model, word_context) -> None:
        rng = np.random.default_rng(seed=7)
        labels = ["A", "B", "C", "D"]
        words = ["u", "v", "w"]
        table = {}
        for word, prev in itertools.product(words, labels + ["*SB*"]):
            probs = rng.random(len(labels))
            table[(word, prev)] = (probs / probs.sum()).tolist()
        model = make_table_model(labels, table)
        decoder = BeamSearchDecoder(model, word_context, beam_size=1)

        tokens = ["u", "w", "v", "v", "u"]
        result = decoder.decode(tokens)

        prev = "*SB*"
        expected = []
        for word in tokens:
            probs = table[(word, prev)]
            prev = labels[int(np.argmax(probs))]
            expected.append(prev)
        assert list(result.labels) == expected
