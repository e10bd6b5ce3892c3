"""Command-line tagger.

Usage:
    # Tag sentences from standard input, one per line:
    beam-tagger model.json < sentences.txt

    # Tag a single sentence:
    beam-tagger --test "Mr. Smith gave a car to his son on Friday." model.json

    # Measure accuracy on word_TAG annotated sentences:
    beam-tagger --eval annotated.txt model.json

Output lines are ``token/TAG`` pairs separated by single spaces. Other
settings (dictionary, validity filter, ...) come from ``BT_*`` environment
variables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import NoReturn

from beam_tagger.config import BeamTaggerConfig
from beam_tagger.exceptions import BeamTaggerError
from beam_tagger.tagger.tagger import POSTagger

logger = logging.getLogger("beam_tagger")


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="beam-tagger",
        description="Part-of-speech tag sentences with beam search.",
    )
    parser.add_argument("model", help="Path to a JSON log-linear model")
    parser.add_argument("--test", metavar="SENTENCE", help="Tag a single sentence and exit")
    parser.add_argument(
        "--eval", metavar="FILE", help="Report accuracy on a word_TAG annotated file"
    )
    parser.add_argument(
        "--beam-size", type=int, default=None, help="Override the configured beam width"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Python logging level (default: WARNING)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tagger CLI and return the process exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    if not argv:
        parser.print_usage(sys.stderr)
        return 1

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help exits 0, usage errors exit 1.
        return exc.code if isinstance(exc.code, int) else 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    overrides: dict[str, object] = {"model_path": args.model}
    if args.beam_size is not None:
        overrides["beam_size"] = args.beam_size

    try:
        tagger = POSTagger.from_config(BeamTaggerConfig(**overrides))  # type: ignore[arg-type]
        if args.test is not None:
            print(tagger.tag_sentence(args.test))
        elif args.eval is not None:
            with open(args.eval, encoding="utf-8") as annotated:
                result = tagger.evaluate(annotated)
            print(f"Accuracy         : {result.accuracy:.4f}")
            print(f"Sentence Accuracy: {result.sentence_accuracy:.4f}")
        else:
            for line in sys.stdin:
                print(tagger.tag_sentence(line))
    except (BeamTaggerError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
