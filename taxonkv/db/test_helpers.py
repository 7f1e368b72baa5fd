from .helpers import clean_authorship, clean_name, clean_string, remove_null, sift


def test_clean_string() -> None:
    assert clean_string("  Puma   concolor ") == "Puma concolor"
    assert clean_string("d’Orbigny") == "d'Orbigny"
    assert clean_string("“Felis”\xa0catus") == '"Felis" catus'
    assert clean_string("a\tb\nc") == "a b c"


def test_clean_name() -> None:
    assert clean_name(None) is None
    assert clean_name("") is None
    assert clean_name("   ") is None
    assert clean_name("\\N") is None
    assert clean_name("NULL") is None
    assert clean_name(" null ") is None
    assert clean_name(" Felidae ") == "Felidae"
    # only whole-value placeholders are treated as missing
    assert clean_name("Nullaster") == "Nullaster"


def test_clean_authorship() -> None:
    assert clean_authorship(None) is None
    assert clean_authorship(" Linnaeus, 1758 ") == "Linnaeus, 1758"
    assert clean_authorship(", Linnaeus , 1758;") == "Linnaeus, 1758"
    assert clean_authorship("Linnaeus, 1758 [sic]") == "Linnaeus, 1758"
    assert clean_authorship("[in part] Gray") == "Gray"
    assert clean_authorship("(Linnaeus, 1771)") == "(Linnaeus, 1771)"
    assert clean_authorship("L.") == "L."
    assert clean_authorship(" ; ") is None
    assert clean_authorship("[sic]") is None


def test_cleaning_is_idempotent() -> None:
    for text in [" , Linnaeus ,  1758 [sic];", "  (Gray,  1825)", "Wagner [1841]"]:
        once = clean_authorship(text)
        assert once is not None
        assert clean_authorship(once) == once
    for text in ["  Puma  ", "Felis  catus", "‘Felis’"]:
        once = clean_name(text)
        assert once is not None
        assert clean_name(once) == once


def test_remove_null() -> None:
    assert remove_null({"a": 1, "b": None, "c": 0}) == {"a": 1, "c": 0}


def test_sift() -> None:
    assert sift([1, 2, 3, 4], lambda i: i % 2 == 0) == ([2, 4], [1, 3])
