"""Validity filter subsystem for beam-tagger.

Hard-excludes disallowed labels from the search before candidates are
ranked.
"""

from beam_tagger.filters.base import AcceptAllFilter, ValidityFilter, ValidityPredicate
from beam_tagger.filters.registry import ValidityFilterRegistry
from beam_tagger.filters.tag_dictionary import TagDictionaryFilter, load_tag_dictionary

__all__ = [
    "AcceptAllFilter",
    "TagDictionaryFilter",
    "ValidityFilter",
    "ValidityFilterRegistry",
    "ValidityPredicate",
    "load_tag_dictionary",
]
