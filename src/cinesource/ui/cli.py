from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cinesource.app import resolve_entities, sweep_response_cache
from cinesource.config import configure_logging
from cinesource.domain.model import FIELD_SCHEMA, EntityKey, validate_requested_fields
from cinesource.domain.resolution import ResolutionOptions, ResolutionRequest

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve film and person metadata")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve fields of one film or person")
    target = resolve.add_mutually_exclusive_group(required=True)
    target.add_argument("--film", type=str, help="Film title to resolve")
    target.add_argument("--person", type=str, help="Person name to resolve")
    resolve.add_argument(
        "--year",
        type=int,
        help="Release year of the film or birth year of the person",
    )
    resolve.add_argument("--tmdb-id", type=int, help="Known TMDB id")
    resolve.add_argument("--imdb-id", type=str, help="Known IMDb id (films)")
    resolve.add_argument("--wikipedia-title", type=str, help="Exact Wikipedia article title")
    resolve.add_argument(
        "--fields",
        type=str,
        help="Comma separated fields to resolve (defaults to every field of the entity type)",
    )
    resolve.add_argument(
        "--min-accept-confidence",
        type=float,
        default=None,
        help="Ignore candidates below this confidence (defaults to config)",
    )
    resolve.add_argument(
        "--max-adapters",
        type=int,
        help="Maximum number of primary sources to consult",
    )
    resolve.add_argument(
        "--override",
        action="store_true",
        help="Discard the stored record and resolve from scratch",
    )

    subparsers.add_parser("sweep-cache", help="Delete expired response cache entries")

    return parser.parse_args(list(argv))


def _build_request(args: argparse.Namespace) -> ResolutionRequest:
    ids = {"tmdb_id": args.tmdb_id, "wikipedia_title": args.wikipedia_title}
    if args.film is not None:
        key = EntityKey.film(args.film, args.year, imdb_id=args.imdb_id, **ids)
    else:
        if args.imdb_id is not None:
            raise ValueError("--imdb-id only applies to films")
        key = EntityKey.person(args.person, args.year, **ids)

    if args.fields:
        requested = [name.strip() for name in args.fields.split(",") if name.strip()]
    else:
        requested = sorted(FIELD_SCHEMA[key.entity_type])
    return ResolutionRequest(key, validate_requested_fields(key.entity_type, requested))


def _build_options(args: argparse.Namespace) -> ResolutionOptions | None:
    if args.min_accept_confidence is None and args.max_adapters is None and not args.override:
        return None
    return ResolutionOptions(
        min_accept_confidence=args.min_accept_confidence or 0.0,
        max_adapters_tried=args.max_adapters,
        override=args.override,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    request: ResolutionRequest | None = None
    options: ResolutionOptions | None = None
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "resolve":
            request = _build_request(parsed_args)
            options = _build_options(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "resolve" and request is not None:
            (outcome,) = resolve_entities([request], options=options)
            record = outcome.result.record
            log.info(
                "%s: state=%s confidence=%.4f (%s) review=%s%s",
                record.entity_key,
                outcome.result.state,
                record.confidence,
                record.trust_badge,
                record.needs_manual_review,
                f" ({record.review_reason})" if record.review_reason else "",
            )
            if outcome.failure is not None:
                log.error("Result was not stored: %s", outcome.failure)
            print(json.dumps(record.to_payload(), indent=2, sort_keys=True))  # noqa: T201
        elif parsed_args.command == "sweep-cache":
            sweep_response_cache()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during resolution")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
