"""Scoring model subsystem for beam-tagger.

Scoring models turn a feature context into a probability distribution over
a fixed label vocabulary.
"""

from beam_tagger.models.base import ScoringModel
from beam_tagger.models.loglinear import LogLinearModel

__all__ = [
    "LogLinearModel",
    "ScoringModel",
]
