"""Tag dictionary validity filter.

Restricts known words to the tags they were observed with, and keeps
closed-class tags (determiners, prepositions, pronouns, ...) away from
words the dictionary does not know.

Dictionary file format (JSON)::

    {"the": ["DT"], "time": ["NN", "VB"], ...}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Collection, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from beam_tagger.exceptions import ConfigurationError, ModelLoadError
from beam_tagger.filters.base import ValidityFilter
from beam_tagger.filters.registry import ValidityFilterRegistry

if TYPE_CHECKING:
    from beam_tagger.config import BeamTaggerConfig

logger = logging.getLogger("beam_tagger")


@ValidityFilterRegistry.register("tag_dictionary")
class TagDictionaryFilter(ValidityFilter):
    """Rejects tags a word is not allowed to take.

    Args:
        dictionary: Map of word -> allowed tags.
        closed_class_tags: Tags that words missing from *dictionary* may
            never receive.
        case_sensitive: Match words exactly instead of lower-cased.
    """

    def __init__(
        self,
        dictionary: Mapping[str, Collection[str]],
        closed_class_tags: Collection[str] = (),
        case_sensitive: bool = False,
    ) -> None:
        self._case_sensitive = case_sensitive
        self._dictionary: dict[str, frozenset[str]] = {}
        for word, tags in dictionary.items():
            key = self._normalize(word)
            self._dictionary[key] = self._dictionary.get(key, frozenset()) | frozenset(tags)
        self._closed_class_tags = frozenset(closed_class_tags)

    @classmethod
    def from_config(cls, config: BeamTaggerConfig) -> TagDictionaryFilter:
        """Load the dictionary at ``config.tag_dictionary_path``.

        Raises:
            ConfigurationError: If no path is configured.
            ModelLoadError: If the file cannot be read or is malformed.
        """
        if not config.tag_dictionary_path:
            raise ConfigurationError(
                "validity_filter='tag_dictionary' requires tag_dictionary_path to be set"
            )
        dictionary = load_tag_dictionary(config.tag_dictionary_path)
        return cls(
            dictionary,
            closed_class_tags=config.closed_class_tags,
            case_sensitive=config.case_sensitive_tags,
        )

    def _normalize(self, word: str) -> str:
        return word if self._case_sensitive else word.lower()

    def allowed_tags(self, word: str) -> frozenset[str] | None:
        """Return the tags *word* may take, or None if the word is unknown."""
        return self._dictionary.get(self._normalize(word))

    def __call__(
        self,
        index: int,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        label: str,
    ) -> bool:
        allowed = self.allowed_tags(tokens[index])
        if allowed is None:
            return label not in self._closed_class_tags
        return label in allowed


def load_tag_dictionary(path: str | Path) -> dict[str, list[str]]:
    """Read a word -> tags JSON map.

    Raises:
        ModelLoadError: If the file cannot be read, is not JSON, or does not
            map strings to lists of strings.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ModelLoadError(f"Cannot read tag dictionary {str(path)!r}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ModelLoadError(f"Tag dictionary {str(path)!r} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict) or not all(
        isinstance(tags, list) and all(isinstance(t, str) for t in tags) for tags in data.values()
    ):
        raise ModelLoadError(f"Tag dictionary {str(path)!r} must map words to lists of tags")

    logger.info("Loaded tag dictionary from %s: %d words", path, len(data))
    return data
