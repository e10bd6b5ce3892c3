"""Base class for context generators.

A context generator turns (tokens, prior labels, position, extra args) into
the set of feature predicates the scoring model is evaluated on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from beam_tagger.config import BeamTaggerConfig

Context = frozenset[str]


class ContextGenerator(ABC):
    """Abstract base class for context generators.

    ``generate`` must be deterministic and side-effect free: the decoder
    calls it once per sequence in the beam and relies on identical inputs
    producing identical contexts. It may read ``prior_labels`` (the history
    of the branch being extended) but nothing past ``index``.
    """

    @abstractmethod
    def generate(
        self,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        index: int,
        extra_args: Any = None,
    ) -> Context:
        """Compute the feature context for position *index*.

        Args:
            tokens: The full input.
            prior_labels: Labels chosen for positions ``0..index-1`` on this branch.
            index: Position being labelled.
            extra_args: Opaque value passed through from the decode call.

        Returns:
            Frozen set of feature predicate strings.
        """

    @classmethod
    def from_config(cls, config: BeamTaggerConfig) -> ContextGenerator:
        """Build an instance from configuration. Defaults to no arguments."""
        return cls()
