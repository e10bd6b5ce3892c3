"""Tagger facade for beam-tagger.

Configuration-driven part-of-speech tagging on top of the beam search
decoder, plus evaluation against annotated corpora.
"""

from beam_tagger.tagger.corpus import read_annotated_line
from beam_tagger.tagger.tagger import POSTagger
from beam_tagger.tagger.types import EvaluationResult, TagResult

__all__ = [
    "EvaluationResult",
    "POSTagger",
    "TagResult",
    "read_annotated_line",
]
