"""Exception hierarchy for beam-tagger.

All exceptions derive from BeamTaggerError, enabling broad catch patterns
at the application boundary while allowing fine-grained handling internally.
"""

from __future__ import annotations


class BeamTaggerError(Exception):
    """Base exception for all beam-tagger errors."""


class ConfigurationError(BeamTaggerError):
    """Invalid configuration detected before any decoding happens.

    Raised for a non-positive beam width, an empty or duplicated label
    vocabulary, an unknown component name, or a per-call override that
    names an unknown or non-overridable field.
    """


class NoValidSequenceError(BeamTaggerError):
    """Every candidate extension was rejected at some position.

    The decode is abandoned; no partial sequence is returned.

    Attributes:
        index: Token position at which the candidate pool became empty.
    """

    def __init__(self, index: int, message: str | None = None) -> None:
        self.index = index
        super().__init__(message or f"No valid label sequence at position {index}")


class ModelEvaluationError(BeamTaggerError):
    """The scoring model did not produce a usable probability vector.

    Raised when the returned vector has the wrong length or shape, holds
    negative or non-finite values, or the model raised while evaluating.

    Attributes:
        index: Token position being decoded when evaluation failed.
    """

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        super().__init__(f"Model evaluation failed at position {index}: {message}")


class ContextGenerationError(BeamTaggerError):
    """The context generator failed while building features for a position.

    The original exception is kept as ``__cause__``.

    Attributes:
        index: Token position whose context could not be built.
    """

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        super().__init__(f"Context generation failed at position {index}: {message}")


class ModelLoadError(BeamTaggerError):
    """A scoring model could not be constructed from its serialized form.

    Raised when the model file is missing, unreadable, or malformed.
    """


class InvalidFormatError(BeamTaggerError):
    """Serialized data does not follow the expected format.

    Raised for n-gram files with a missing or non-integer count, and for
    annotated corpus lines that are not ``word_TAG`` pairs.
    """
