"""Chunking context generator.

Chunking runs after part-of-speech tagging: ``extra_args`` carries the POS
tags produced by the earlier stage, aligned one-to-one with the tokens.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from beam_tagger.context.base import Context, ContextGenerator
from beam_tagger.context.default import SENTENCE_BEGIN, SENTENCE_END
from beam_tagger.context.registry import ContextGeneratorRegistry

_WINDOW = 2


@ContextGeneratorRegistry.register("chunk")
class ChunkContextGenerator(ContextGenerator):
    """Features from a +/-2 window of words and POS tags plus previous chunk labels."""

    def generate(
        self,
        tokens: Sequence[str],
        prior_labels: Sequence[str],
        index: int,
        extra_args: Any = None,
    ) -> Context:
        """Compute chunking features for position *index*.

        Args:
            tokens: The full input.
            prior_labels: Chunk labels chosen for earlier positions.
            index: Position being labelled.
            extra_args: POS tags for *tokens*, one per token.

        Raises:
            ValueError: If *extra_args* is missing or not aligned with *tokens*.
        """
        if extra_args is None or isinstance(extra_args, str):
            raise ValueError("Chunk context requires the POS tags of the tokens as extra_args")
        pos_tags = list(extra_args)
        if len(pos_tags) != len(tokens):
            raise ValueError(
                f"Expected {len(tokens)} POS tags in extra_args, got {len(pos_tags)}"
            )

        features = ["default"]
        for offset in range(-_WINDOW, _WINDOW + 1):
            position = index + offset
            if position < 0:
                word, tag = SENTENCE_BEGIN, SENTENCE_BEGIN
            elif position >= len(tokens):
                word, tag = SENTENCE_END, SENTENCE_END
            else:
                word, tag = tokens[position], pos_tags[position]
            features.append(f"w[{offset}]={word}")
            features.append(f"p[{offset}]={tag}")

        # POS bigrams around the current token.
        prev_pos = pos_tags[index - 1] if index >= 1 else SENTENCE_BEGIN
        features.append("p[-1,0]=" + prev_pos + "," + pos_tags[index])
        if index + 1 < len(tokens):
            features.append("p[0,1]=" + pos_tags[index] + "," + pos_tags[index + 1])

        prev_chunk = prior_labels[index - 1] if index >= 1 else SENTENCE_BEGIN
        prev_prev_chunk = prior_labels[index - 2] if index >= 2 else SENTENCE_BEGIN
        features.append("c[-1]=" + prev_chunk)
        features.append("c[-2,-1]=" + prev_prev_chunk + "," + prev_chunk)
        features.append("c[-1]p[0]=" + prev_chunk + "," + pos_tags[index])

        return frozenset(features)
