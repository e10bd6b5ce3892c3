"""Data types for the diagnostic logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DecodeRecord:
    """Immutable record of one successful decode call.

    Attributes:
        timestamp_ns: Monotonic start time of the decode (nanoseconds).
        total_decode_ms: Wall time spent in the decode (milliseconds).
        num_tokens: Length of the input.
        beam_size: Configured beam width K.
        model_evaluations: Number of scoring model calls made.
        candidates_generated: Candidate extensions considered.
        candidates_rejected: Candidates rejected by the validity filter.
        final_beam_size: Sequences left in the beam after the last position.
        best_log_score: Log score of the returned sequence.
        labels: Labels of the returned sequence.
    """

    # Timing
    timestamp_ns: int
    total_decode_ms: float

    # Search shape
    num_tokens: int
    beam_size: int
    model_evaluations: int
    candidates_generated: int
    candidates_rejected: int
    final_beam_size: int

    # Result
    best_log_score: float
    labels: tuple[str, ...]
