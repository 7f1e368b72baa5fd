"""Enums for various fields."""

import enum


class Rank(enum.IntEnum):
    """Taxonomic ranks understood by the name-matching service.

    Higher values are higher ranks. The wire form of a rank is its upper-case
    code (see ``code``), e.g. ``Rank.infraspecific_name.code == "INFRASPECIFIC_NAME"``.

    """

    unranked = 1
    other = 2
    strain = 5
    cultivar = 10
    forma_specialis = 12
    chemoform = 13
    serovar = 14
    phagovar = 15
    morphovar = 16
    chemovar = 17
    biovar = 18
    pathovar = 19
    subform = 20
    form = 25
    subvariety = 30
    variety = 35
    morph = 40
    aberration = 41
    natio = 42
    race = 43
    proles = 44
    infrasubspecific_name = 45
    convariety = 50
    cultivar_group = 55
    subspecies = 60
    grex = 65
    infraspecific_name = 70
    species = 75
    species_aggregate = 80
    infrageneric_name = 85
    subseries = 90
    series = 95
    subsection = 100
    section = 105
    infragenus = 110
    subgenus = 115
    genus = 120
    suprageneric_name = 125
    infratribe = 130
    subtribe = 135
    tribe = 140
    supertribe = 145
    infrafamily = 150
    subfamily = 155
    family = 160
    superfamily = 165
    parvorder = 170
    infraorder = 175
    suborder = 180
    order = 185
    grandorder = 190
    superorder = 195
    magnorder = 200
    infracohort = 205
    subcohort = 210
    cohort = 215
    supercohort = 220
    parvclass = 225
    infraclass = 230
    subclass = 235
    class_ = 240
    superclass = 245
    infraphylum = 250
    subphylum = 255
    phylum = 260
    superphylum = 265
    infrakingdom = 270
    subkingdom = 275
    kingdom = 280
    superkingdom = 290
    domain = 300

    @property
    def code(self) -> str:
        return self.name.rstrip("_").upper()


_DWC = "http://rs.tdwg.org/dwc/terms/"
_GBIF = "http://rs.gbif.org/terms/1.0/"


class Term(enum.Enum):
    """Recognized identifiers of the term-map interchange format."""

    kingdom = _DWC + "kingdom"
    phylum = _DWC + "phylum"
    class_ = _DWC + "class"
    order = _DWC + "order"
    family = _DWC + "family"
    genus = _DWC + "genus"
    specific_epithet = _DWC + "specificEpithet"
    infraspecific_epithet = _DWC + "infraspecificEpithet"
    scientific_name = _DWC + "scientificName"
    scientific_name_authorship = _DWC + "scientificNameAuthorship"
    taxon_rank = _DWC + "taxonRank"
    verbatim_taxon_rank = _DWC + "verbatimTaxonRank"
    generic_name = _GBIF + "genericName"

    @property
    def qualified_name(self) -> str:
        return self.value

    @property
    def simple_name(self) -> str:
        return self.value.rsplit("/", 1)[1]

    def is_authorship(self) -> bool:
        return self is Term.scientific_name_authorship

    def is_rank(self) -> bool:
        return self in (Term.taxon_rank, Term.verbatim_taxon_rank)


# the classification terms carried verbatim on a canonical request, in logical key order
CLASSIFICATION_TERMS = (
    Term.kingdom,
    Term.phylum,
    Term.class_,
    Term.order,
    Term.family,
    Term.genus,
)
