"""Interpretation of taxonomic ranks.

A rank is taken from the explicit rank code if it parses, then from the
verbatim rank code, and only as a last resort inferred from which name
parts are present.

"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import NamedTuple

import unidecode

from taxonkv.db.constants import Rank


class AtomizedName(NamedTuple):
    genus: str | None = None
    specific_epithet: str | None = None
    infraspecific_epithet: str | None = None


# Abbreviations and vernacular forms that are not simply a rank's own code
_RANK_MARKERS: dict[str, Rank] = {
    # abbreviations
    "sp": Rank.species,
    "spp": Rank.species,
    "spec": Rank.species,
    "ssp": Rank.subspecies,
    "subsp": Rank.subspecies,
    "infrasp": Rank.infraspecific_name,
    "infraspec": Rank.infraspecific_name,
    "agg": Rank.species_aggregate,
    "aggr": Rank.species_aggregate,
    "var": Rank.variety,
    "v": Rank.variety,
    "subvar": Rank.subvariety,
    "f": Rank.form,
    "fo": Rank.form,
    "fma": Rank.form,
    "subf": Rank.subform,
    "f_sp": Rank.forma_specialis,
    "cv": Rank.cultivar,
    "convar": Rank.convariety,
    "ab": Rank.aberration,
    "ser": Rank.series,
    "subser": Rank.subseries,
    "sect": Rank.section,
    "subsect": Rank.subsection,
    "gen": Rank.genus,
    "subgen": Rank.subgenus,
    "trib": Rank.tribe,
    "subtrib": Rank.subtribe,
    "fam": Rank.family,
    "subfam": Rank.subfamily,
    "superfam": Rank.superfamily,
    "ord": Rank.order,
    "subord": Rank.suborder,
    "cl": Rank.class_,
    "phyl": Rank.phylum,
    "div": Rank.phylum,
    "reg": Rank.kingdom,
    # Latin
    "regnum": Rank.kingdom,
    "subregnum": Rank.subkingdom,
    "divisio": Rank.phylum,
    "division": Rank.phylum,
    "subdivisio": Rank.subphylum,
    "subdivision": Rank.subphylum,
    "classis": Rank.class_,
    "subclassis": Rank.subclass,
    "ordo": Rank.order,
    "subordo": Rank.suborder,
    "infraordo": Rank.infraorder,
    "superordo": Rank.superorder,
    "familia": Rank.family,
    "subfamilia": Rank.subfamily,
    "superfamilia": Rank.superfamily,
    "tribus": Rank.tribe,
    "subtribus": Rank.subtribe,
    "sectio": Rank.section,
    "subsectio": Rank.subsection,
    "varietas": Rank.variety,
    "subvarietas": Rank.subvariety,
    "forma": Rank.form,
    "subforma": Rank.subform,
    "nothosubspecies": Rank.subspecies,
    # French
    "regne": Rank.kingdom,
    "embranchement": Rank.phylum,
    "classe": Rank.class_,
    "ordre": Rank.order,
    "famille": Rank.family,
    "sous_famille": Rank.subfamily,
    "genre": Rank.genus,
    "espece": Rank.species,
    "sous_espece": Rank.subspecies,
    "variete": Rank.variety,
    # Spanish
    "reino": Rank.kingdom,
    "filo": Rank.phylum,
    "clase": Rank.class_,
    "orden": Rank.order,
    "genero": Rank.genus,
    "especie": Rank.species,
    "subespecie": Rank.subspecies,
    "variedad": Rank.variety,
    # German
    "reich": Rank.kingdom,
    "stamm": Rank.phylum,
    "klasse": Rank.class_,
    "ordnung": Rank.order,
    "familie": Rank.family,
    "unterfamilie": Rank.subfamily,
    "gattung": Rank.genus,
    "art": Rank.species,
    "unterart": Rank.subspecies,
    "varietat": Rank.variety,
}


def normalize_rank_text(text: str) -> str:
    text = unidecode.unidecode(text).casefold()
    text = re.sub(r"[\s_.\-]+", "_", text)
    return text.strip("_")


def _default_vocabulary() -> dict[str, Rank]:
    vocabulary = {}
    for rank in Rank:
        vocabulary[normalize_rank_text(rank.code)] = rank
    for marker, rank in _RANK_MARKERS.items():
        vocabulary[normalize_rank_text(marker)] = rank
    return vocabulary


@dataclass(frozen=True)
class RankParser:
    """Parses rank codes against a controlled vocabulary.

    Build one per process and pass it to whatever needs it.

    """

    vocabulary: Mapping[str, Rank] = field(default_factory=_default_vocabulary)

    def parse(self, text: str | None) -> Rank | None:
        if text is None:
            return None
        return self.vocabulary.get(normalize_rank_text(text))


def rank_from_fields(fields: AtomizedName) -> Rank | None:
    if fields.genus is None:
        return None
    if fields.specific_epithet is None:
        return Rank.genus
    if fields.infraspecific_epithet is not None:
        return Rank.infraspecific_name
    return Rank.species


def infer_rank(
    rank_code: str | None,
    verbatim_rank_code: str | None,
    fields: AtomizedName,
    parser: RankParser,
) -> Rank | None:
    """Interprets the rank of a classification.

    An explicit rank code always wins, even if it disagrees with the name
    parts that are present.

    """
    rank = parser.parse(rank_code)
    if rank is not None:
        return rank
    rank = parser.parse(verbatim_rank_code)
    if rank is not None:
        return rank
    return rank_from_fields(fields)
