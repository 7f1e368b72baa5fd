"""Writes against the match table."""

import functools
from collections.abc import Callable
from dataclasses import dataclass

from taxonkv.species.match import NameUsageMatch


@dataclass(frozen=True)
class Mutation:
    row: bytes
    family: bytes
    qualifier: bytes
    value: bytes


ValueMutator = Callable[[bytes, NameUsageMatch], Mutation]


def build_mutation(
    salted_key: bytes,
    match: NameUsageMatch,
    column_family: bytes,
    column_qualifier: bytes,
) -> Mutation:
    return Mutation(
        row=salted_key,
        family=column_family,
        qualifier=column_qualifier,
        value=match.serialize(),
    )


def value_mutator(column_family: bytes, column_qualifier: bytes) -> ValueMutator:
    """Returns a function that builds the mutation storing a match under a salted key."""
    return functools.partial(
        build_mutation, column_family=column_family, column_qualifier=column_qualifier
    )
