"""Client for the name-matching service (GBIF /v1/species/match2)."""

from types import TracebackType
from typing import Protocol, Self

import httpx

from taxonkv import config
from taxonkv.apis.util import RateLimiter
from taxonkv.db.helpers import remove_null
from taxonkv.species.match import NameUsageMatch
from taxonkv.species.request import ClassificationRequest

UA = "taxonkv (name usage match indexer)"
MATCH_PATH = "/v1/species/match2"


class NameMatchError(Exception):
    """The name-matching service could not be reached or returned garbage."""


class NameMatcher(Protocol):
    def match(
        self,
        kingdom: str | None = None,
        phylum: str | None = None,
        class_: str | None = None,
        order: str | None = None,
        family: str | None = None,
        genus: str | None = None,
        rank: str | None = None,
        name: str | None = None,
        *,
        verbose: bool = False,
        strict: bool = False,
    ) -> NameUsageMatch | None:
        raise NotImplementedError


def match_request(matcher: NameMatcher, request: ClassificationRequest) -> NameUsageMatch | None:
    """Looks up a canonical request, asking for a best-effort (non-strict) match."""
    return matcher.match(
        kingdom=request.kingdom,
        phylum=request.phylum,
        class_=request.class_,
        order=request.order,
        family=request.family,
        genus=request.genus,
        rank=request.rank.code if request.rank is not None else None,
        name=request.scientific_name,
        verbose=False,
        strict=False,
    )


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class NameMatchClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        min_interval: float = 0.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": UA},
            transport=transport,
        )
        self._rate_limiter = RateLimiter(min_interval)

    @classmethod
    def from_options(cls, options: config.Options) -> Self:
        return cls(
            options.match_api_url,
            timeout=options.match_api_timeout,
            min_interval=options.match_min_interval,
        )

    def match(
        self,
        kingdom: str | None = None,
        phylum: str | None = None,
        class_: str | None = None,
        order: str | None = None,
        family: str | None = None,
        genus: str | None = None,
        rank: str | None = None,
        name: str | None = None,
        *,
        verbose: bool = False,
        strict: bool = False,
    ) -> NameUsageMatch | None:
        if not config.is_network_available():
            raise NameMatchError("network is not available")
        params = remove_null(
            {
                "kingdom": kingdom,
                "phylum": phylum,
                "class": class_,
                "order": order,
                "family": family,
                "genus": genus,
                "rank": rank,
                "name": name,
            }
        )
        params["verbose"] = _bool_param(verbose)
        params["strict"] = _bool_param(strict)
        self._rate_limiter.wait()
        try:
            response = self._client.get(MATCH_PATH, params=params)
        except httpx.HTTPError as e:
            raise NameMatchError(f"error calling {MATCH_PATH} with {params}: {e}") from e
        if response.status_code in (204, 404):
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NameMatchError(f"{MATCH_PATH} returned {response.status_code}") from e
        if not response.content.strip():
            return None
        try:
            match = NameUsageMatch.from_json(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise NameMatchError(f"unexpected response from {MATCH_PATH}: {response.text!r}") from e
        if not match.is_match:
            return None
        return match

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
