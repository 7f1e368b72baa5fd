"""Results of the name-matching service.

These mirror the JSON returned by GBIF's /v1/species/match2 endpoint. They are
immutable; the serialized form is canonical JSON without a version tag, so the
same match always serializes to the same bytes.

"""

import enum
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Self

from taxonkv.db.helpers import remove_null


class MatchType(enum.Enum):
    exact = "EXACT"
    fuzzy = "FUZZY"
    higherrank = "HIGHERRANK"
    aggregate = "AGGREGATE"
    variant = "VARIANT"
    none = "NONE"


@dataclass(frozen=True)
class RankedName:
    name: str
    key: int | None = None
    canonical_name: str | None = None
    authorship: str | None = None
    rank: str | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            name=data["name"],
            key=data.get("key"),
            canonical_name=data.get("canonicalName"),
            authorship=data.get("authorship"),
            rank=data.get("rank"),
        )

    def to_json(self) -> dict[str, Any]:
        return remove_null(
            {
                "key": self.key,
                "name": self.name,
                "canonicalName": self.canonical_name,
                "authorship": self.authorship,
                "rank": self.rank,
            }
        )


@dataclass(frozen=True)
class Diagnostics:
    match_type: MatchType = MatchType.none
    confidence: int | None = None
    status: str | None = None
    note: str | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            match_type=MatchType(data.get("matchType", "NONE")),
            confidence=data.get("confidence"),
            status=data.get("status"),
            note=data.get("note"),
        )

    def to_json(self) -> dict[str, Any]:
        return remove_null(
            {
                "matchType": self.match_type.value,
                "confidence": self.confidence,
                "status": self.status,
                "note": self.note,
            }
        )


@dataclass(frozen=True)
class NameUsageMatch:
    usage: RankedName | None = None
    accepted_usage: RankedName | None = None
    synonym: bool = False
    classification: tuple[RankedName, ...] = ()
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def is_match(self) -> bool:
        return self.usage is not None and self.diagnostics.match_type is not MatchType.none

    @property
    def accepted(self) -> RankedName | None:
        """The accepted name usage; the usage itself unless it is a synonym."""
        if self.synonym:
            return self.accepted_usage
        return self.usage

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Self:
        usage = data.get("usage")
        accepted_usage = data.get("acceptedUsage")
        return cls(
            usage=RankedName.from_json(usage) if usage else None,
            accepted_usage=(
                RankedName.from_json(accepted_usage) if accepted_usage else None
            ),
            synonym=bool(data.get("synonym", False)),
            classification=tuple(
                RankedName.from_json(entry) for entry in data.get("classification", ())
            ),
            diagnostics=Diagnostics.from_json(data.get("diagnostics", {})),
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "synonym": self.synonym,
            "classification": [entry.to_json() for entry in self.classification],
            "diagnostics": self.diagnostics.to_json(),
        }
        if self.usage is not None:
            data["usage"] = self.usage.to_json()
        if self.accepted_usage is not None:
            data["acceptedUsage"] = self.accepted_usage.to_json()
        return data

    def serialize(self) -> bytes:
        return json.dumps(
            self.to_json(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")

    @classmethod
    def deserialize(cls, data: bytes) -> Self:
        return cls.from_json(json.loads(data.decode("utf-8")))
