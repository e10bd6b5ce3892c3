"""Data types for the tagger facade."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TagResult:
    """Labels assigned to one input, with per-token confidence.

    Attributes:
        tokens: The input tokens.
        labels: One label per token.
        probabilities: Probability of each label on the winning path.
        log_score: Sum of the natural logs of ``probabilities``.
    """

    tokens: tuple[str, ...]
    labels: tuple[str, ...]
    probabilities: tuple[float, ...]
    log_score: float

    def to_string(self, separator: str = "/") -> str:
        """Render as ``token/label`` pairs separated by single spaces."""
        return " ".join(
            f"{token}{separator}{label}" for token, label in zip(self.tokens, self.labels)
        )


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Accuracy of the tagger against an annotated corpus.

    Attributes:
        total_tokens: Number of tokens compared.
        correct_tokens: Tokens whose predicted tag matched the reference.
        total_sentences: Number of annotated sentences.
        correct_sentences: Sentences tagged without any error.
    """

    total_tokens: int
    correct_tokens: int
    total_sentences: int
    correct_sentences: int

    @property
    def accuracy(self) -> float:
        """Token-level accuracy, 0.0 for an empty corpus."""
        return self.correct_tokens / self.total_tokens if self.total_tokens else 0.0

    @property
    def sentence_accuracy(self) -> float:
        """Sentence-level accuracy, 0.0 for an empty corpus."""
        return self.correct_sentences / self.total_sentences if self.total_sentences else 0.0
