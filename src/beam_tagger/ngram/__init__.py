"""N-gram counting subsystem for beam-tagger."""

from beam_tagger.ngram.model import NGramModel

__all__ = [
    "NGramModel",
]
