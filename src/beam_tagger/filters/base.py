"""Base classes for validity filters.

A validity filter approves or rejects a candidate label before the
extended sequence can enter the next beam. The decoder accepts any callable
with the :data:`ValidityPredicate` signature; subclassing
:class:`ValidityFilter` is only needed for registry-built filters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from beam_tagger.filters.registry import ValidityFilterRegistry

if TYPE_CHECKING:
    from beam_tagger.config import BeamTaggerConfig

ValidityPredicate = Callable[[int, Sequence[str], Sequence[str], str], bool]


class ValidityFilter(ABC):
    """Abstract base class for validity filters.

    Filters must be pure functions of their arguments so that decoding stays
    deterministic and thread-safe.
    """

    @abstractmethod
    def __call__(
        self,
        index: int,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        label: str,
    ) -> bool:
        """Return True if *label* may be assigned at *index*.

        Args:
            index: Position being labelled.
            tokens: The full input.
            prior_labels: Labels of the branch being extended.
            label: Candidate label.
        """

    @classmethod
    def from_config(cls, config: BeamTaggerConfig) -> ValidityFilter:
        """Build an instance from configuration. Defaults to no arguments."""
        return cls()


@ValidityFilterRegistry.register("accept_all")
class AcceptAllFilter(ValidityFilter):
    """Accepts every candidate."""

    def __call__(
        self,
        index: int,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        label: str,
    ) -> bool:
        return True
