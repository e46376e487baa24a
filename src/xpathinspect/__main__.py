from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import logging
from pathlib import Path
import sys

from lxml import etree

from .config import InspectorConfig
from .confidence import tier_from_label
from .errors import InspectorError
from .inspector import LocatorInspector
from .models import Candidate
from .oracle import DocumentOracle
from .providers import ProviderChain
from .snippets import FRAMEWORKS
from .tree import load_document


def build_logger(config: InspectorConfig) -> logging.Logger:
    logger = logging.getLogger("xpathinspect")
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, config.log_level, logging.INFO))
    logger.propagate = False
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    try:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_dir / "xpathinspect.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError:
        # Fallback to stderr logging if file logger cannot be initialized.
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    return logger


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="xpathinspect",
        description="Generate a stable, verified XPath locator for one element of an HTML document.",
    )
    parser.add_argument("file", help="HTML file to inspect")
    parser.add_argument(
        "--target",
        "-t",
        required=True,
        help="XPath selecting the element to locate (the first match is used)",
    )
    parser.add_argument(
        "--regenerate",
        "-r",
        type=int,
        default=0,
        help="Number of alternative locators to request after the first one",
    )
    parser.add_argument(
        "--min-tier",
        choices=("reliable", "caution", "weak"),
        help="Minimum confidence for alternatives (defaults to the current locator's tier)",
    )
    parser.add_argument("--external", help="Validate a locator produced elsewhere")
    parser.add_argument("--ai", action="store_true", help="Ask the configured providers for a locator")
    parser.add_argument("--framework", "-f", choices=FRAMEWORKS, help="Print a code snippet for this framework")
    parser.add_argument("--log-dir", help="Directory for xpathinspect.log")
    return parser.parse_args(args)


def _format(candidate: Candidate) -> str:
    return f"[{candidate.confidence.label}] {candidate.expression}  ({candidate.rationale})"


def main(argv: list[str] | None = None) -> int:
    if sys.version_info < (3, 11):
        raise SystemExit(
            "xpathinspect requires Python 3.11+. "
            f"Current interpreter: {sys.executable} (Python {sys.version.split()[0]})"
        )
    args = parse_args(argv)
    config = InspectorConfig.from_env()
    if args.log_dir:
        config = replace(config, log_dir=Path(args.log_dir).expanduser())
    logger = build_logger(config)

    try:
        markup = Path(args.file).read_bytes()
    except OSError as exc:
        print(f"Cannot read {args.file}: {exc}", file=sys.stderr)
        return 1

    try:
        document = load_document(markup)
    except etree.ParserError as exc:
        print(f"Cannot parse {args.file}: {exc}", file=sys.stderr)
        return 1

    oracle = DocumentOracle(document)
    targets = oracle.matches(args.target)
    if not targets:
        print(f"Target {args.target!r} selects no element.", file=sys.stderr)
        return 2

    chain = ProviderChain.from_config(config) if args.ai else None
    inspector = LocatorInspector(oracle, chain)
    try:
        print(_format(inspector.on_node_selected(targets[0])))

        min_tier = tier_from_label(args.min_tier) if args.min_tier else None
        for _ in range(max(0, args.regenerate)):
            alternative = inspector.on_regenerate_requested(min_tier)
            if alternative is None:
                print("No better alternative found. Keeping current locator.")
                break
            print(_format(alternative))

        if args.external:
            verdict = inspector.submit_external_candidate(args.external)
            status = "accepted" if verdict.accepted else "rejected"
            print(f"External locator {status}: {verdict.message}")

        if args.ai:
            outcome = asyncio.run(inspector.generate_with_provider())
            print(outcome.message)
            if outcome.candidate is not None:
                print(_format(outcome.candidate))

        if args.framework:
            print()
            print(inspector.snippet(args.framework))
    except InspectorError as exc:
        logger.exception("Locator generation failed.")
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
