"""Beam search subsystem for beam-tagger.

Bounded, approximate search over partial label sequences.
"""

from beam_tagger.search.beam import DEFAULT_BEAM_SIZE, BeamSearchDecoder, score_position
from beam_tagger.search.sequence import Sequence

__all__ = [
    "DEFAULT_BEAM_SIZE",
    "BeamSearchDecoder",
    "Sequence",
    "score_position",
]
