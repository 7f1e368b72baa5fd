"""Helper functions"""

import re
import unicodedata
from collections.abc import Callable, Iterable, Mapping
from typing import TypeVar

T = TypeVar("T")
_T1 = TypeVar("_T1")
_T2 = TypeVar("_T2")

# placeholders that database exports use for missing values
_NULL_RGX = re.compile(r"^\s*(\\N|\\?NULL|null)\s*$")


def remove_null(d: Mapping[_T1, _T2 | None]) -> dict[_T1, _T2]:
    return {k: v for k, v in d.items() if v is not None}


def clean_string(text: str, *, clean_whitespace: bool = True) -> str:
    """Clean a string.

    This is intended as a safe operation that can be applied to any
    text (e.g., for cleaning up user input).

    """
    # As an optimization, skip various expensive transformations if we know we
    # don't need them.
    if not text.isascii():
        text = unicodedata.normalize("NFC", text)
        text = text.replace("’", "'")
        text = text.replace("‘", "'")
        text = text.replace("′", "'")
        text = text.replace("ʹ", "'")
        text = text.replace("‐", "-")  # use ASCII hyphen
        text = re.sub(r"[“”]", '"', text)
        text = text.replace("\xad", "")
        text = text.replace("\xa0", " ")
    if clean_whitespace:
        text = re.sub(r"\s+", " ", text)
    return text.strip()


def clean_name(text: str | None) -> str | None:
    """Clean a classification value, returning None if nothing useful is left."""
    if text is None or _NULL_RGX.match(text):
        return None
    text = clean_string(text)
    return text or None


def clean_authorship(text: str | None) -> str | None:
    """Clean a scientific name authorship.

    Besides the general cleanup, this removes bracketed editorial annotations
    ("[sic]"), stray whitespace before commas, and punctuation left dangling at
    either end.

    >>> clean_authorship(" , Linnaeus ,  1758 [sic];")
    'Linnaeus, 1758'

    """
    text = clean_name(text)
    if text is None:
        return None
    text = re.sub(r"\s*\[[^\]]*\]", "", text)
    text = re.sub(r"\s+,", ",", text)
    text = text.strip(" ,;:")
    return text or None


def sift(objs: Iterable[T], pred: Callable[[T], bool]) -> tuple[list[T], list[T]]:
    true, false = [], []
    for obj in objs:
        if pred(obj):
            true.append(obj)
        else:
            false.append(obj)
    return true, false
