"""Canonical requests for the name-matching service."""

import re
from dataclasses import dataclass, fields

from taxonkv.db.constants import CLASSIFICATION_TERMS, Rank, Term
from taxonkv.db.helpers import remove_null
from taxonkv.species.names import assemble_name
from taxonkv.species.rank import AtomizedName, RankParser, infer_rank
from taxonkv.species.terms import TermMap, clean_terms

LOGICAL_KEY_SEPARATOR = "|"
# carried by maps derived from a request, never by raw records
REQUEST_FLAGS = ("strict", "verbose")

_KEY_SPECIAL_RGX = re.compile(r"([\\|=])")


def _escape_key_part(value: str) -> str:
    return _KEY_SPECIAL_RGX.sub(r"\\\1", value)


@dataclass(frozen=True)
class ClassificationRequest:
    kingdom: str | None = None
    phylum: str | None = None
    class_: str | None = None
    order: str | None = None
    family: str | None = None
    genus: str | None = None
    rank: Rank | None = None
    scientific_name: str | None = None

    def classification(self) -> dict[Term, str | None]:
        return {term: getattr(self, term.name) for term in CLASSIFICATION_TERMS}

    @property
    def logical_key(self) -> str:
        """Stable identity of the request, used for lookups and deduplication.

        Made of "field=value" pairs for the populated fields, in a fixed order.
        Backslashes and the separators are backslash-escaped inside values.

        """
        return LOGICAL_KEY_SEPARATOR.join(
            f"{field}={_escape_key_part(value)}"
            for field, value in self.to_query_params().items()
            if field not in REQUEST_FLAGS
        )

    def is_empty(self) -> bool:
        return all(getattr(self, field.name) is None for field in fields(self))

    def to_query_params(self) -> dict[str, str]:
        """Parameters for the name-matching service."""
        params = {
            term.simple_name: value
            for term, value in remove_null(self.classification()).items()
        }
        if self.rank is not None:
            params["rank"] = self.rank.code
        if self.scientific_name is not None:
            params["name"] = self.scientific_name
        params.update(dict.fromkeys(REQUEST_FLAGS, "false"))
        return params

    def to_term_map(self) -> dict[str, str]:
        """Converts the request back into the term-map interchange format."""
        terms = {
            term.qualified_name: value
            for term, value in remove_null(self.classification()).items()
        }
        if self.rank is not None:
            terms[Term.taxon_rank.qualified_name] = self.rank.code
        if self.scientific_name is not None:
            terms[Term.scientific_name.qualified_name] = self.scientific_name
        terms.update(dict.fromkeys(REQUEST_FLAGS, "false"))
        return terms


def _is_request_map(terms: TermMap) -> bool:
    return all(flag in terms for flag in REQUEST_FLAGS)


def canonicalize(
    terms: TermMap | ClassificationRequest, parser: RankParser
) -> ClassificationRequest:
    """Converts a map of terms (or an existing request) into a canonical request.

    Raw records get their rank and scientific name inferred. Maps derived from
    a request (see ClassificationRequest.to_term_map) already hold the resolved
    values, so their fields are only cleaned and an absent rank or name stays
    absent.

    """
    if isinstance(terms, ClassificationRequest):
        terms = terms.to_term_map()
    cleaned = clean_terms(terms)
    if _is_request_map(terms):
        rank = parser.parse(cleaned.get(Term.taxon_rank))
        scientific_name = cleaned.get(Term.scientific_name)
        genus = cleaned.get(Term.genus)
    else:
        atomized = AtomizedName(
            genus=cleaned.get(Term.genus),
            specific_epithet=cleaned.get(Term.specific_epithet),
            infraspecific_epithet=cleaned.get(Term.infraspecific_epithet),
        )
        rank = infer_rank(
            cleaned.get(Term.taxon_rank),
            cleaned.get(Term.verbatim_taxon_rank),
            atomized,
            parser,
        )
        scientific_name = assemble_name(
            cleaned.get(Term.scientific_name),
            cleaned.get(Term.generic_name),
            atomized.genus,
            atomized.specific_epithet,
            atomized.infraspecific_epithet,
            cleaned.get(Term.scientific_name_authorship),
        )
        genus = atomized.genus
    return ClassificationRequest(
        kingdom=cleaned.get(Term.kingdom),
        phylum=cleaned.get(Term.phylum),
        class_=cleaned.get(Term.class_),
        order=cleaned.get(Term.order),
        family=cleaned.get(Term.family),
        genus=genus,
        rank=rank,
        scientific_name=scientific_name,
    )
