"""Part-of-speech context generator.

Features describe the current word, its two neighbours on each side, the
two previously assigned tags, and, for words outside the common-word
dictionary, the word's shape (affixes, hyphen, capitals, digits).
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from typing import TYPE_CHECKING, Any

from beam_tagger.context.base import Context, ContextGenerator
from beam_tagger.context.registry import ContextGeneratorRegistry
from beam_tagger.exceptions import ModelLoadError
from beam_tagger.ngram.model import NGramModel

if TYPE_CHECKING:
    from beam_tagger.config import BeamTaggerConfig

logger = logging.getLogger("beam_tagger")

SENTENCE_BEGIN = "*SB*"
SENTENCE_END = "*SE*"

_MAX_AFFIX_LENGTH = 4


def _affixes(word: str) -> list[str]:
    features = []
    for length in range(1, min(_MAX_AFFIX_LENGTH, len(word)) + 1):
        features.append("suf=" + word[-length:])
        features.append("pre=" + word[:length])
    return features


def _shape(word: str) -> list[str]:
    features = []
    if "-" in word:
        features.append("h")
    if any(ch.isupper() for ch in word):
        features.append("c")
    if any(ch.isdigit() for ch in word):
        features.append("d")
    return features


@ContextGeneratorRegistry.register("default")
class DefaultContextGenerator(ContextGenerator):
    """Context generator for part-of-speech tagging.

    Args:
        dictionary: Lower-cased single-word n-grams considered common. Words
            found here skip the affix and shape features. ``None`` treats
            every word as rare.
    """

    def __init__(self, dictionary: Collection[tuple[str, ...]] | None = None) -> None:
        self._dictionary = frozenset(dictionary) if dictionary is not None else None

    @classmethod
    def from_config(cls, config: BeamTaggerConfig) -> DefaultContextGenerator:
        """Load the common-word dictionary from ``config.dictionary_path``, if set."""
        if not config.dictionary_path:
            return cls()
        try:
            ngrams = NGramModel.load(config.dictionary_path)
        except OSError as exc:
            raise ModelLoadError(
                f"Cannot read dictionary {config.dictionary_path!r}: {exc}"
            ) from exc
        ngrams.cutoff(config.dictionary_cutoff)
        logger.info(
            "Loaded common-word dictionary from %s: %d entries",
            config.dictionary_path,
            len(ngrams),
        )
        return cls(ngrams.to_dictionary())

    def is_rare(self, word: str) -> bool:
        """Return True if *word* should get affix and shape features."""
        return self._dictionary is None or (word.lower(),) not in self._dictionary

    def generate(
        self,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        index: int,
        extra_args: Any = None,
    ) -> Context:
        word = tokens[index]
        prev_word = tokens[index - 1] if index >= 1 else SENTENCE_BEGIN
        prev_prev_word = tokens[index - 2] if index >= 2 else SENTENCE_BEGIN
        next_word = tokens[index + 1] if index + 1 < len(tokens) else SENTENCE_END
        next_next_word = tokens[index + 2] if index + 2 < len(tokens) else SENTENCE_END

        features = ["default", "w=" + word]
        if self.is_rare(word):
            features.extend(_affixes(word))
            features.extend(_shape(word))

        features.append("p=" + prev_word)
        features.append("pp=" + prev_prev_word)
        features.append("n=" + next_word)
        features.append("nn=" + next_next_word)

        if index >= 1:
            prev_tag = prior_labels[index - 1]
            features.append("t=" + prev_tag)
            if index >= 2:
                features.append("t2=" + prior_labels[index - 2] + "," + prev_tag)

        return frozenset(features)
