"""Reader for ``word_TAG`` annotated sentences."""

from __future__ import annotations

from beam_tagger.exceptions import InvalidFormatError

TAG_SEPARATOR = "_"


def read_annotated_line(line: str) -> tuple[list[str], list[str]]:
    """Split an annotated sentence into words and tags.

    Each whitespace-separated item is ``word_TAG``; the tag follows the last
    underscore, so words may themselves contain underscores.

    Args:
        line: One annotated sentence, e.g. ``"Time_NN flies_VBZ"``.

    Returns:
        Tuple of (words, tags), aligned.

    Raises:
        InvalidFormatError: If an item has no underscore, or an empty word or tag.
    """
    words: list[str] = []
    tags: list[str] = []
    for item in line.split():
        word, sep, tag = item.rpartition(TAG_SEPARATOR)
        if not sep or not word or not tag:
            raise InvalidFormatError(f"Expected word{TAG_SEPARATOR}TAG, got {item!r}")
        words.append(word)
        tags.append(tag)
    return words, tags
