"""Request models for the Apple Maps Server API endpoints.

Every request validates itself and encodes to query parameters in one step
through :meth:`MapsRequest.to_params`. Encoding either returns the complete
parameter dict or raises :class:`~applemaps.exceptions.ValidationError`
without producing anything; the client calls it before any network I/O.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Iterable, cast

from pydantic import AfterValidator, ConfigDict, Field

from applemaps.exceptions import ValidationError
from applemaps.types import (
    CheckedModel,
    DirectionsAvoid,
    EtaTransportType,
    Location,
    PoiCategory,
    Region,
    SearchResultType,
    TransportType,
)

MAX_ETA_DESTINATIONS = 10


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------


def _join(values: Iterable[str | Enum], sep: str = ",") -> str:
    return sep.join(v.value if isinstance(v, Enum) else str(v) for v in values)


def format_time(value: datetime) -> str:
    """RFC 3339 in UTC with second precision, e.g. ``2023-04-15T16:42:00Z``.

    Naive datetimes are taken to be in UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _normalize_countries(codes: list[str]) -> list[str]:
    normalized = []
    for code in codes:
        code = code.strip().upper()
        if len(code) != 2 or not code.isalpha():
            raise ValueError(f"not an ISO 3166-1 alpha-2 country code: {code!r}")
        normalized.append(code)
    return normalized


CountryCodes = Annotated[list[str], AfterValidator(_normalize_countries)]


def _location(value: Location | None) -> Location:
    # Only called after validate_request has rejected None.
    return cast(Location, value)


def _endpoint(value: str | Location | None) -> str:
    return value.to_query() if isinstance(value, Location) else cast(str, value)


def _put_hints(
    params: dict[str, str],
    lang: str | None,
    search_location: Location | None,
    search_region: Region | None,
    user_location: Location | None,
) -> None:
    if lang:
        params["lang"] = lang
    if search_location is not None:
        params["searchLocation"] = search_location.to_query()
    if search_region is not None:
        params["searchRegion"] = search_region.to_query()
    if user_location is not None:
        params["userLocation"] = user_location.to_query()


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class MapsRequest(CheckedModel):
    """Base for endpoint requests. Requests are immutable once built.

    A bad field value (an out-of-range coordinate, a malformed country code)
    raises :class:`ValidationError` at construction; a missing required
    field raises it from :meth:`to_params`.
    """

    model_config = ConfigDict(frozen=True)

    def validate_request(self) -> None:
        """Raise :class:`ValidationError` if a required field is missing."""

    @abstractmethod
    def to_params(self) -> dict[str, str]:
        """Validate, then encode as query parameters."""


class GeocodeRequest(MapsRequest):
    """Parameters for ``GET /v1/geocode``.

    Usage::

        GeocodeRequest(query="1 Apple Park, Cupertino, CA", limit_to_countries=["US"])
    """

    query: str
    limit_to_countries: CountryCodes = Field(default_factory=list)
    lang: str | None = None
    search_location: Location | None = None
    search_region: Region | None = None
    user_location: Location | None = None

    def validate_request(self) -> None:
        if not self.query:
            raise ValidationError("query is required")

    def to_params(self) -> dict[str, str]:
        self.validate_request()
        params = {"q": self.query}
        if self.limit_to_countries:
            params["limitToCountries"] = _join(self.limit_to_countries)
        _put_hints(params, self.lang, self.search_location, self.search_region, self.user_location)
        return params


class ReverseGeocodeRequest(MapsRequest):
    """Parameters for ``GET /v1/reverseGeocode``."""

    loc: Location | None = None
    lang: str | None = None

    def validate_request(self) -> None:
        if self.loc is None:
            raise ValidationError("loc is required")

    def to_params(self) -> dict[str, str]:
        self.validate_request()
        params = {"loc": _location(self.loc).to_query()}
        if self.lang:
            params["lang"] = self.lang
        return params


class _PlaceSearchRequest(MapsRequest):
    query: str
    exclude_poi_categories: list[PoiCategory] = Field(default_factory=list)
    include_poi_categories: list[PoiCategory] = Field(default_factory=list)
    limit_to_countries: CountryCodes = Field(default_factory=list)
    result_type_filter: list[SearchResultType] = Field(default_factory=list)
    lang: str | None = None
    search_location: Location | None = None
    search_region: Region | None = None
    user_location: Location | None = None

    def validate_request(self) -> None:
        if not self.query:
            raise ValidationError("query is required")

    def to_params(self) -> dict[str, str]:
        self.validate_request()
        params = {"q": self.query}
        if self.exclude_poi_categories:
            params["excludePoiCategories"] = _join(self.exclude_poi_categories)
        if self.include_poi_categories:
            params["includePoiCategories"] = _join(self.include_poi_categories)
        if self.limit_to_countries:
            params["limitToCountries"] = _join(self.limit_to_countries)
        if self.result_type_filter:
            params["resultTypeFilter"] = _join(self.result_type_filter)
        _put_hints(params, self.lang, self.search_location, self.search_region, self.user_location)
        return params


class SearchRequest(_PlaceSearchRequest):
    """Parameters for ``GET /v1/search``.

    ``result_type_filter`` accepts ``Poi`` and ``Address``.
    """


class SearchAutocompleteRequest(_PlaceSearchRequest):
    """Parameters for ``GET /v1/searchAutocomplete``.

    ``result_type_filter`` accepts ``Poi``, ``Address`` and ``Query``.
    """


class DirectionsRequest(MapsRequest):
    """Parameters for ``GET /v1/directions``.

    ``origin`` and ``destination`` are either an address string or a
    :class:`Location`. Set at most one of ``arrival_date`` and
    ``departure_date``; with neither, the server departs now.
    """

    origin: str | Location | None = None
    destination: str | Location | None = None
    arrival_date: datetime | None = None
    avoid: list[DirectionsAvoid] = Field(default_factory=list)
    departure_date: datetime | None = None
    lang: str | None = None
    requests_alternate_routes: bool = False
    search_location: Location | None = None
    search_region: Region | None = None
    transport_type: TransportType | None = None
    user_location: Location | None = None

    def validate_request(self) -> None:
        if self.origin is None or self.origin == "":
            raise ValidationError("origin is required")
        if self.destination is None or self.destination == "":
            raise ValidationError("destination is required")

    def to_params(self) -> dict[str, str]:
        self.validate_request()
        params = {
            "origin": _endpoint(self.origin),
            "destination": _endpoint(self.destination),
        }
        if self.arrival_date is not None:
            params["arrivalDate"] = format_time(self.arrival_date)
        if self.avoid:
            params["avoid"] = _join(self.avoid)
        if self.departure_date is not None:
            params["departureDate"] = format_time(self.departure_date)
        if self.requests_alternate_routes:
            params["requestsAlternateRoutes"] = "true"
        if self.transport_type is not None:
            params["transportType"] = self.transport_type.value
        _put_hints(params, self.lang, self.search_location, self.search_region, self.user_location)
        return params


class EtaRequest(MapsRequest):
    """Parameters for ``GET /v1/etas``: one origin, 1 to 10 destinations."""

    origin: Location | None = None
    destinations: list[Location] = Field(default_factory=list)
    transport_type: EtaTransportType | None = None
    departure_date: datetime | None = None
    arrival_date: datetime | None = None

    def validate_request(self) -> None:
        if self.origin is None:
            raise ValidationError("origin is required")
        if not self.destinations:
            raise ValidationError("destinations is required")
        if len(self.destinations) > MAX_ETA_DESTINATIONS:
            raise ValidationError(f"destinations max length is {MAX_ETA_DESTINATIONS}")

    def to_params(self) -> dict[str, str]:
        self.validate_request()
        params = {
            "origin": _location(self.origin).to_query(),
            "destinations": _join((d.to_query() for d in self.destinations), sep="|"),
        }
        if self.transport_type is not None:
            params["transportType"] = self.transport_type.value
        if self.departure_date is not None:
            params["departureDate"] = format_time(self.departure_date)
        if self.arrival_date is not None:
            params["arrivalDate"] = format_time(self.arrival_date)
        return params
