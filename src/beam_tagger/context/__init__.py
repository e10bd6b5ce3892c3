"""Context generation subsystem for beam-tagger.

Turns tokens, label history and position into feature predicates for the
scoring model. Supports part-of-speech and chunking feature sets.
"""

from beam_tagger.context.base import Context, ContextGenerator
from beam_tagger.context.chunk import ChunkContextGenerator
from beam_tagger.context.default import DefaultContextGenerator
from beam_tagger.context.registry import ContextGeneratorRegistry

__all__ = [
    "ChunkContextGenerator",
    "Context",
    "ContextGenerator",
    "ContextGeneratorRegistry",
    "DefaultContextGenerator",
]
