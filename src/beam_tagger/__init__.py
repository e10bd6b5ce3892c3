"""beam-tagger: beam search sequence labelling with pluggable scoring models.

Assigns a label (e.g. a part-of-speech tag) to every token of an input by
keeping the K best partial label sequences at each position. The scoring
model, the feature context generator and the validity filter are all
pluggable.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("beam-tagger")
except PackageNotFoundError:
    __version__ = "0.0.0"

from beam_tagger.config import BeamTaggerConfig, resolve_config, validate_overrides
from beam_tagger.exceptions import (
    BeamTaggerError,
    ConfigurationError,
    ContextGenerationError,
    InvalidFormatError,
    ModelEvaluationError,
    ModelLoadError,
    NoValidSequenceError,
)
from beam_tagger.search.beam import BeamSearchDecoder
from beam_tagger.search.sequence import Sequence
from beam_tagger.tagger.tagger import POSTagger
from beam_tagger.tagger.types import TagResult

__all__ = [
    "BeamSearchDecoder",
    "BeamTaggerConfig",
    "BeamTaggerError",
    "ConfigurationError",
    "ContextGenerationError",
    "InvalidFormatError",
    "ModelEvaluationError",
    "ModelLoadError",
    "NoValidSequenceError",
    "POSTagger",
    "Sequence",
    "TagResult",
    "__version__",
    "resolve_config",
    "validate_overrides",
]
