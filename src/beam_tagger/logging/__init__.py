"""Diagnostic logging subsystem for beam-tagger.

Provides immutable per-decode records and a configurable logger that
supports none/summary/full verbosity and in-memory diagnostic mode.
"""

from beam_tagger.logging.logger import DecodeLogger
from beam_tagger.logging.types import DecodeRecord

__all__ = [
    "DecodeLogger",
    "DecodeRecord",
]
