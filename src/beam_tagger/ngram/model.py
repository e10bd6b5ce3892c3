"""Counted n-gram collection.

Stores token n-grams (tuples of strings) together with how often each was
added. Used upstream of decoding, e.g. to build the common-word dictionary
that decides which words get affix features.

Serialized form is JSON::

    {"entries": [{"tokens": ["a", "b"], "count": 2}, ...]}
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import IO

from beam_tagger.exceptions import InvalidFormatError

logger = logging.getLogger("beam_tagger")

NGram = tuple[str, ...]


def _key(ngram: Iterable[str]) -> NGram:
    if isinstance(ngram, str):
        return (ngram,)
    return tuple(ngram)


class NGramModel:
    """Mapping of n-grams to occurrence counts.

    ``count()`` of an n-gram that was never added is 0, never an error.
    """

    def __init__(self) -> None:
        self._ngrams: dict[NGram, int] = {}

    # --- Counting ---

    def count(self, ngram: Iterable[str]) -> int:
        """Return how often *ngram* was added, or 0 if it is not contained."""
        return self._ngrams.get(_key(ngram), 0)

    def set_count(self, ngram: Iterable[str], count: int) -> None:
        """Overwrite the count of an n-gram that is already contained.

        Raises:
            KeyError: If *ngram* is not in the model.
        """
        key = _key(ngram)
        if key not in self._ngrams:
            raise KeyError(key)
        self._ngrams[key] = count

    def add(self, ngram: Iterable[str]) -> None:
        """Add one occurrence of *ngram*."""
        key = _key(ngram)
        self._ngrams[key] = self._ngrams.get(key, 0) + 1

    def add_ngrams(self, tokens: Sequence[str], min_length: int, max_length: int) -> None:
        """Add every n-gram of *tokens* with length in ``[min_length, max_length]``."""
        for length in range(min_length, max_length + 1):
            for start in range(len(tokens) - length + 1):
                self.add(tokens[start : start + length])

    def add_char_ngrams(self, text: str, min_length: int, max_length: int) -> None:
        """Add lower-cased character n-grams of *text* as single-token entries."""
        for length in range(min_length, max_length + 1):
            for start in range(len(text) - length + 1):
                self.add((text[start : start + length].lower(),))

    def remove(self, ngram: Iterable[str]) -> None:
        """Drop *ngram* regardless of its count. Missing n-grams are ignored."""
        self._ngrams.pop(_key(ngram), None)

    def contains(self, ngram: Iterable[str]) -> bool:
        return _key(ngram) in self._ngrams

    def __contains__(self, ngram: object) -> bool:
        if not isinstance(ngram, (str, tuple, list)):
            return False
        return self.contains(ngram)

    def __len__(self) -> int:
        return len(self._ngrams)

    def __iter__(self) -> Iterator[NGram]:
        return iter(list(self._ngrams))

    def number_of_grams(self) -> int:
        """Total count over all n-grams."""
        return sum(self._ngrams.values())

    def cutoff(self, cutoff_under: int = 0, cutoff_over: int = sys.maxsize) -> None:
        """Delete n-grams seen fewer than *cutoff_under* or more than *cutoff_over* times."""
        if cutoff_under <= 0 and cutoff_over >= sys.maxsize:
            return
        removed = [
            key
            for key, count in self._ngrams.items()
            if count < cutoff_under or count > cutoff_over
        ]
        for key in removed:
            del self._ngrams[key]
        logger.debug(
            "N-gram cutoff [%d, %d] removed %d of %d entries",
            cutoff_under,
            cutoff_over,
            len(removed),
            len(removed) + len(self._ngrams),
        )

    def to_dictionary(self, case_sensitive: bool = False) -> frozenset[NGram]:
        """Return the contained n-grams as a set, lower-cased unless *case_sensitive*."""
        if case_sensitive:
            return frozenset(self._ngrams)
        return frozenset(tuple(token.lower() for token in key) for key in self._ngrams)

    # --- Serialization ---

    def serialize(self, out: IO[str]) -> None:
        """Write all entries with their counts to the text stream *out*."""
        entries = [{"tokens": list(key), "count": count} for key, count in self._ngrams.items()]
        json.dump({"entries": entries}, out)

    @classmethod
    def deserialize(cls, stream: IO[str]) -> NGramModel:
        """Read a model written by :meth:`serialize`.

        Raises:
            InvalidFormatError: If the stream is not valid JSON, an entry has
                no tokens, or its count is missing or not an integer.
        """
        try:
            data = json.load(stream)
        except json.JSONDecodeError as exc:
            raise InvalidFormatError(f"N-gram data is not valid JSON: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise InvalidFormatError("N-gram data must be an object with an 'entries' list")

        model = cls()
        for entry in data["entries"]:
            if not isinstance(entry, dict):
                raise InvalidFormatError(f"N-gram entry must be an object, got {entry!r}")
            tokens = entry.get("tokens")
            if not isinstance(tokens, list) or not all(isinstance(t, str) for t in tokens):
                raise InvalidFormatError(f"N-gram entry has invalid tokens: {entry!r}")
            if "count" not in entry:
                raise InvalidFormatError("The count attribute must be set")
            count = entry["count"]
            if isinstance(count, bool) or not isinstance(count, (int, str)):
                raise InvalidFormatError(f"The count attribute must be a number, got {count!r}")
            try:
                count = int(count)
            except ValueError as exc:
                raise InvalidFormatError(
                    f"The count attribute must be a number, got {count!r}"
                ) from exc
            model._ngrams[tuple(tokens)] = count
        return model

    def save(self, path: str | Path) -> None:
        """Serialize to the file at *path*."""
        with open(path, "w", encoding="utf-8") as out:
            self.serialize(out)

    @classmethod
    def load(cls, path: str | Path) -> NGramModel:
        """Deserialize from the file at *path*."""
        with open(path, encoding="utf-8") as stream:
            return cls.deserialize(stream)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NGramModel):
            return NotImplemented
        return self._ngrams == other._ngrams

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"NGramModel(size={len(self)})"
