"""Diagnostic logger for decode calls.

Uses the standard ``logging`` module with the ``"beam_tagger"`` logger.
No ``print()`` statements. Supports three verbosity levels and an
in-memory diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from beam_tagger.config import BeamTaggerConfig
    from beam_tagger.logging.types import DecodeRecord

logger = logging.getLogger("beam_tagger")


class DecodeLogger:
    """Per-decode diagnostic logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per decode with key metrics (tokens,
        evaluations, rejections, best score).

        ``"full"``: Full JSON dump of all record fields.

    Diagnostic mode stores all records in memory for post-hoc analysis via
    ``get_diagnostic_data()`` and ``get_summary_stats()``. Records are only
    ever appended, so one logger can be shared by concurrent decodes.
    """

    def __init__(self, config: BeamTaggerConfig) -> None:
        """Initialize the logger from configuration.

        Args:
            config: Configuration providing ``log_level`` and ``diagnostic_mode``.
        """
        self._log_level = config.log_level
        self._diagnostic_mode = config.diagnostic_mode
        self._records: list[DecodeRecord] = []

    def log_decode(self, record: DecodeRecord) -> None:
        """Log a single decode call.

        Args:
            record: Immutable record of the finished decode.
        """
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                "decode tokens=%d beam=%d evals=%d candidates=%d rejected=%d "
                "final_beam=%d log_score=%.4f total=%.2fms",
                record.num_tokens,
                record.beam_size,
                record.model_evaluations,
                record.candidates_generated,
                record.candidates_rejected,
                record.final_beam_size,
                record.best_log_score,
                record.total_decode_ms,
            )
        elif self._log_level == "full":
            logger.info("decode_record: %s", json.dumps(asdict(record), default=str))

    def get_diagnostic_data(self) -> list[DecodeRecord]:
        """Return all stored records (requires ``diagnostic_mode=True``)."""
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with aggregate stats, or empty dict if no records.
        """
        if not self._records:
            return {}

        n = len(self._records)
        tokens = sum(r.num_tokens for r in self._records)
        evaluations = sum(r.model_evaluations for r in self._records)
        generated = sum(r.candidates_generated for r in self._records)
        rejected = sum(r.candidates_rejected for r in self._records)
        times = [r.total_decode_ms for r in self._records]
        finite_scores = [r.best_log_score for r in self._records if math.isfinite(r.best_log_score)]

        return {
            "total_decodes": n,
            "total_tokens": tokens,
            "total_model_evaluations": evaluations,
            "mean_evaluations_per_token": evaluations / tokens if tokens else 0.0,
            "rejection_rate": rejected / generated if generated else 0.0,
            "mean_best_log_score": (
                sum(finite_scores) / len(finite_scores) if finite_scores else -math.inf
            ),
            "mean_decode_ms": sum(times) / n,
            "max_decode_ms": max(times),
        }
