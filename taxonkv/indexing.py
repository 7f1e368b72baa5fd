"""Indexes name usage matches into the match table.

1. Reads term maps from a delimited file.
2. Canonicalizes them and keeps one request per logical key.
3. Matches each distinct request against the name-matching service, in a
   pool of workers that each own their own client.
4. Writes the matches under their salted keys.

A failure on one record never stops the run: it is logged and the record is
dropped. Rerunning picks such records up again, and since keys and mutations
are deterministic, records that already succeeded are simply rewritten.

"""

import csv
import functools
import logging
import math
import sqlite3
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractContextManager
from dataclasses import dataclass
from pathlib import Path

from taxonkv.apis.name_match import (
    NameMatchClient,
    NameMatcher,
    match_request,
)
from taxonkv.config import Options
from taxonkv.db.helpers import sift
from taxonkv.db.mutation import Mutation, ValueMutator, value_mutator
from taxonkv.db.salt import SaltedKeyGenerator
from taxonkv.db.store import TableWriter
from taxonkv.species.rank import RankParser
from taxonkv.species.request import ClassificationRequest, canonicalize
from taxonkv.species.terms import term_of_identifier

logger = logging.getLogger(__name__)

MatcherFactory = Callable[[], AbstractContextManager[NameMatcher]]


@dataclass(frozen=True)
class Indexed:
    request: ClassificationRequest
    mutation: Mutation


@dataclass(frozen=True)
class NoMatch:
    request: ClassificationRequest


@dataclass(frozen=True)
class Failed:
    request: ClassificationRequest
    error: Exception


RecordOutcome = Indexed | NoMatch | Failed


@dataclass(frozen=True)
class IndexingSummary:
    records: int = 0
    distinct: int = 0
    indexed: int = 0
    no_match: int = 0
    failed: int = 0
    written: int = 0
    write_failed: int = 0


@dataclass(frozen=True)
class RecordIndexer:
    """Turns a canonical request into the mutation that stores its match."""

    key_generator: SaltedKeyGenerator
    mutator: ValueMutator

    @classmethod
    def from_options(cls, options: Options) -> "RecordIndexer":
        return cls(
            SaltedKeyGenerator(options.num_of_key_buckets),
            value_mutator(
                options.column_family.encode("utf-8"),
                options.value_column_qualifier.encode("utf-8"),
            ),
        )

    def index(self, matcher: NameMatcher, request: ClassificationRequest) -> RecordOutcome:
        try:
            match = match_request(matcher, request)
        except Exception as e:
            # any matcher failure only fails this record
            return Failed(request, e)
        if match is None:
            return NoMatch(request)
        salted_key = self.key_generator.compute_key(request.logical_key)
        return Indexed(request, self.mutator(salted_key, match))


def read_records(path: Path) -> Iterator[dict[str, str]]:
    """Reads term maps from a CSV (or tab-separated .tsv/.txt) file with a header row."""
    delimiter = "\t" if path.suffix in (".tsv", ".txt", ".tab") else ","
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        unknown = [
            column for column in reader.fieldnames or ()
            if term_of_identifier(column) is None
        ]
        if unknown:
            logger.debug("ignoring columns %s in %s", ", ".join(unknown), path)
        for row in reader:
            yield {key: value for key, value in row.items() if key and value}


def distinct_requests(
    requests: Iterable[ClassificationRequest],
) -> Iterator[ClassificationRequest]:
    seen: set[str] = set()
    for request in requests:
        key = request.logical_key
        if key not in seen:
            seen.add(key)
            yield request


def _chunks(items: Sequence[ClassificationRequest], n: int) -> list[Sequence[ClassificationRequest]]:
    size = max(1, math.ceil(len(items) / n))
    return [items[i : i + size] for i in range(0, len(items), size)]


def _index_chunk(
    chunk: Sequence[ClassificationRequest],
    indexer: RecordIndexer,
    matcher_factory: MatcherFactory,
) -> list[RecordOutcome]:
    with matcher_factory() as matcher:
        return [indexer.index(matcher, request) for request in chunk]


def write_outcomes(writer: TableWriter, outcomes: Iterable[RecordOutcome]) -> tuple[int, int]:
    """Writes the mutations of indexed records, one at a time.

    Returns the number of written and failed mutations.

    """
    written = failed = 0
    for outcome in outcomes:
        if not isinstance(outcome, Indexed):
            continue
        try:
            writer.write([outcome.mutation])
        except sqlite3.Error:
            logger.exception("Error storing match for %s", outcome.request.logical_key)
            failed += 1
        else:
            written += 1
    return written, failed


def index_requests(
    requests: Iterable[ClassificationRequest],
    options: Options,
    *,
    matcher_factory: MatcherFactory | None = None,
    dry_run: bool = False,
) -> IndexingSummary:
    if matcher_factory is None:
        matcher_factory = functools.partial(NameMatchClient.from_options, options)
    indexer = RecordIndexer.from_options(options)
    all_requests = list(requests)
    distinct = list(distinct_requests(all_requests))
    logger.info("%d records, %d distinct requests", len(all_requests), len(distinct))

    outcomes: list[RecordOutcome] = []
    if distinct:
        with ThreadPoolExecutor(max_workers=options.num_workers) as pool:
            futures = [
                pool.submit(_index_chunk, chunk, indexer, matcher_factory)
                for chunk in _chunks(distinct, options.num_workers)
            ]
            for future in futures:
                outcomes += future.result()

    failures, rest = sift(outcomes, lambda outcome: isinstance(outcome, Failed))
    for failure in failures:
        assert isinstance(failure, Failed)
        logger.error(
            "Error performing name match for %s: %r",
            failure.request.logical_key,
            failure.error,
        )
    indexed, no_match = sift(rest, lambda outcome: isinstance(outcome, Indexed))

    written = write_failed = 0
    if not dry_run and indexed:
        with TableWriter.open(options.store_filename, options.table_name) as writer:
            written, write_failed = write_outcomes(writer, indexed)

    summary = IndexingSummary(
        records=len(all_requests),
        distinct=len(distinct),
        indexed=len(indexed),
        no_match=len(no_match),
        failed=len(failures),
        written=written,
        write_failed=write_failed,
    )
    logger.info("indexing finished: %s", summary)
    return summary


def index_records(
    records: Iterable[Mapping[str, str]],
    options: Options,
    *,
    parser: RankParser | None = None,
    matcher_factory: MatcherFactory | None = None,
    dry_run: bool = False,
) -> IndexingSummary:
    if parser is None:
        parser = RankParser()
    return index_requests(
        (canonicalize(record, parser) for record in records),
        options,
        matcher_factory=matcher_factory,
        dry_run=dry_run,
    )
