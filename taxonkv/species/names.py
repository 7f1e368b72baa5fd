"""Assembly of the most complete scientific name from full and atomized name parts."""

from taxonkv.db.helpers import clean_authorship, clean_name


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:].lower()


def name_with_authorship(name: str, authorship: str | None) -> str:
    """Appends the authorship unless the name already contains it.

    The containment check is a plain case-insensitive substring test, so an
    authorship that merely overlaps part of the name is not appended either.

    """
    if authorship and authorship.lower() not in name.lower():
        return f"{name} {authorship}"
    return name


def compose_name(
    generic_part: str | None,
    specific_epithet: str | None,
    infraspecific_epithet: str | None,
    authorship: str | None,
) -> str | None:
    """Formats a binomial or trinomial from its parts."""
    if generic_part is None and specific_epithet is None and infraspecific_epithet is None:
        return None
    parts = []
    if generic_part is not None:
        parts.append(_capitalize(generic_part))
    if specific_epithet is not None:
        parts.append(specific_epithet.lower())
    if infraspecific_epithet is not None:
        parts.append(infraspecific_epithet.lower())
    if authorship:
        parts.append(authorship)
    return " ".join(parts)


def assemble_name(
    scientific_name: str | None,
    generic_name: str | None,
    genus: str | None,
    specific_epithet: str | None,
    infraspecific_epithet: str | None,
    authorship: str | None,
) -> str | None:
    authorship = clean_authorship(authorship)
    name = clean_name(scientific_name)
    if name is not None:
        return name_with_authorship(name, authorship)
    # only atomized fields are given
    generic_part = clean_name(generic_name) or clean_name(genus)
    return compose_name(
        generic_part,
        clean_name(specific_epithet),
        clean_name(infraspecific_epithet),
        authorship,
    )
