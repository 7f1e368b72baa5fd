import argparse
import dataclasses
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from taxonkv import config, indexing
from taxonkv.apis.name_match import NameMatchClient
from taxonkv.db.store import open_name_usage_match_store
from taxonkv.species.rank import RankParser
from taxonkv.species.request import canonicalize


def _parse_term(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name, value


def run_index(args: argparse.Namespace, options: config.Options) -> int:
    summary = indexing.index_records(
        indexing.read_records(args.input), options, dry_run=args.dry_run
    )
    print(json.dumps(dataclasses.asdict(summary), indent=2))
    return 0


def run_lookup(args: argparse.Namespace, options: config.Options) -> int:
    request = canonicalize(dict(args.term), RankParser())
    if request.is_empty():
        print("nothing to look up", file=sys.stderr)
        return 1
    output: dict[str, object] = {
        "logical_key": request.logical_key,
        "params": request.to_query_params(),
    }
    with NameMatchClient.from_options(options) as client:
        loader = None if args.no_match else client
        with open_name_usage_match_store(options, loader=loader) as store:
            match = store.get(request)
    if match is None:
        output["match"] = None
    else:
        accepted = match.accepted
        output["match"] = match.to_json()
        output["accepted_name"] = accepted.name if accepted is not None else None
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser("taxonkv")
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser(
        "index", help="match all records in a CSV/TSV file and store the results"
    )
    index_parser.add_argument("input", type=Path)
    index_parser.add_argument("--dry-run", action="store_true", default=False)

    lookup_parser = subparsers.add_parser(
        "lookup", help="look up a single classification"
    )
    lookup_parser.add_argument(
        "-t", "--term", type=_parse_term, action="append", default=[], metavar="NAME=VALUE"
    )
    lookup_parser.add_argument(
        "--no-match",
        action="store_true",
        default=False,
        help="only read the store, never call the matching service",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    if not args.verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    options = config.get_options()
    if args.command == "index":
        return run_index(args, options)
    else:
        return run_lookup(args, options)


if __name__ == "__main__":
    sys.exit(main())
