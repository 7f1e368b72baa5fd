import pytest

from taxonkv.db.constants import Rank

from .rank import AtomizedName, RankParser, infer_rank, normalize_rank_text, rank_from_fields

PARSER = RankParser()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("SPECIES", Rank.species),
        ("species", Rank.species),
        (" Genus ", Rank.genus),
        ("INFRASPECIFIC_NAME", Rank.infraspecific_name),
        ("infraspecific name", Rank.infraspecific_name),
        ("class", Rank.class_),
        ("sp.", Rank.species),
        ("subsp.", Rank.subspecies),
        ("var.", Rank.variety),
        ("f. sp.", Rank.forma_specialis),
        ("Familia", Rank.family),
        ("espèce", Rank.species),
        ("sous-espèce", Rank.subspecies),
        ("Gattung", Rank.genus),
        ("especie", Rank.species),
    ],
)
def test_parse(text: str, expected: Rank) -> None:
    assert PARSER.parse(text) is expected


def test_parse_unknown() -> None:
    assert PARSER.parse(None) is None
    assert PARSER.parse("") is None
    assert PARSER.parse("not a rank") is None


def test_custom_vocabulary() -> None:
    parser = RankParser({"gattung": Rank.genus})
    assert parser.parse("Gattung") is Rank.genus
    assert parser.parse("species") is None


def test_normalize_rank_text() -> None:
    assert normalize_rank_text("Sous-Espèce") == "sous_espece"
    assert normalize_rank_text(" f. sp. ") == "f_sp"


@pytest.mark.parametrize(
    "genus,specific,infraspecific,expected",
    [
        (None, None, None, None),
        (None, "concolor", None, None),
        (None, None, "couguar", None),
        (None, "concolor", "couguar", None),
        ("Puma", None, None, Rank.genus),
        ("Puma", None, "couguar", Rank.genus),
        ("Puma", "concolor", None, Rank.species),
        ("Puma", "concolor", "couguar", Rank.infraspecific_name),
    ],
)
def test_rank_from_fields(
    genus: str | None, specific: str | None, infraspecific: str | None, expected: Rank | None
) -> None:
    fields = AtomizedName(genus, specific, infraspecific)
    assert rank_from_fields(fields) is expected
    assert infer_rank(None, None, fields, PARSER) is expected


def test_explicit_rank_wins() -> None:
    genus_only = AtomizedName(genus="Puma")
    assert infer_rank("SPECIES", None, genus_only, PARSER) is Rank.species
    assert infer_rank("SPECIES", "family", genus_only, PARSER) is Rank.species
    no_genus = AtomizedName(specific_epithet="concolor")
    assert infer_rank("species", None, no_genus, PARSER) is Rank.species


def test_verbatim_fallback() -> None:
    fields = AtomizedName(genus="Puma", specific_epithet="concolor")
    assert infer_rank(None, "subsp.", fields, PARSER) is Rank.subspecies
    assert infer_rank("unparseable", "Familia", fields, PARSER) is Rank.family
    # neither parses, so the name parts decide
    assert infer_rank("??", "whatever", fields, PARSER) is Rank.species
