"""Extraction and cleanup of classification fields from term maps."""

from collections.abc import Mapping

from taxonkv.db.constants import Term
from taxonkv.db.helpers import clean_authorship, clean_name

TermMap = Mapping[str, str]

_BY_IDENTIFIER: dict[str, Term] = {
    **{term.simple_name: term for term in Term},
    **{term.qualified_name: term for term in Term},
}


def term_of_identifier(identifier: str) -> Term | None:
    """Returns the term for a qualified (or simple) identifier, if we know it."""
    return _BY_IDENTIFIER.get(identifier)


def get_term_value(terms: TermMap, term: Term) -> str | None:
    """Gets the clean value of a term, preferring its qualified name."""
    raw = terms.get(term.qualified_name)
    if raw is None:
        raw = terms.get(term.simple_name)
    if term.is_authorship():
        return clean_authorship(raw)
    return clean_name(raw)


def clean_terms(terms: TermMap) -> dict[Term, str]:
    """Returns the recognized terms of a raw term map, cleaned.

    Unrecognized keys are ignored, as are recognized terms whose value
    cleans down to nothing.

    """
    cleaned = {}
    for term in Term:
        value = get_term_value(terms, term)
        if value is not None:
            cleaned[term] = value
    return cleaned
