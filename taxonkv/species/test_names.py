from .names import assemble_name, compose_name, name_with_authorship


def test_authorship_not_duplicated() -> None:
    assert (
        assemble_name(
            "Puma concolor Linnaeus, 1771", None, None, None, None, "Linnaeus, 1771"
        )
        == "Puma concolor Linnaeus, 1771"
    )
    assert (
        assemble_name("Puma concolor LINNAEUS, 1771", None, None, None, None, "linnaeus, 1771")
        == "Puma concolor LINNAEUS, 1771"
    )


def test_authorship_appended() -> None:
    assert (
        assemble_name("Puma concolor", None, None, None, None, "Linnaeus, 1771")
        == "Puma concolor Linnaeus, 1771"
    )
    assert (
        assemble_name("  Puma   concolor ", None, None, None, None, " Linnaeus, 1771 [sic]")
        == "Puma concolor Linnaeus, 1771"
    )
    assert assemble_name("Puma concolor", None, None, None, None, " ; ") == "Puma concolor"


def test_substring_overlap_counts_as_contained() -> None:
    assert name_with_authorship("Puma linnaeusi", "Linnaeus") == "Puma linnaeusi"
    assert name_with_authorship("Puma concolor", None) == "Puma concolor"
    assert name_with_authorship("Puma concolor", "") == "Puma concolor"


def test_name_from_parts() -> None:
    assert assemble_name(None, None, "Puma", "concolor", None, None) == "Puma concolor"
    assert assemble_name(None, None, "Puma", None, None, None) == "Puma"
    assert (
        assemble_name(None, None, "puma", "CONCOLOR", "Couguar", "(Kerr, 1792)")
        == "Puma concolor couguar (Kerr, 1792)"
    )


def test_generic_name_preferred_over_genus() -> None:
    assert assemble_name(None, "Puma", "Felis", "concolor", None, None) == "Puma concolor"
    assert assemble_name(None, "  ", "Felis", "concolor", None, None) == "Felis concolor"


def test_blank_name_falls_back_to_parts() -> None:
    assert assemble_name("  ", None, "Puma", None, None, None) == "Puma"
    assert assemble_name("NULL", None, "Puma", "concolor", None, None) == "Puma concolor"


def test_no_name() -> None:
    assert assemble_name(None, None, None, None, None, None) is None
    assert assemble_name(None, None, None, None, None, "Linnaeus, 1758") is None
    assert compose_name(None, None, None, "Linnaeus, 1758") is None
    # an epithet alone still yields a name
    assert compose_name(None, "concolor", None, None) == "concolor"
