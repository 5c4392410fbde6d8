"""Pydantic models mirroring the Apple Maps Server API wire types."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from applemaps.exceptions import ValidationError


def format_coordinate(value: float) -> str:
    """Shortest round-trippable decimal form, without exponent or trailing zeros."""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class WireModel(BaseModel):
    """Base for models whose wire names are the camelCase form of the field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckedModel(BaseModel):
    """Base for values callers build by hand.

    Constraint failures at construction raise :class:`ValidationError`
    instead of pydantic's own error. Decoding from JSON does not go through
    ``__init__``, so malformed responses still fail as pydantic errors.
    """

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except pydantic.ValidationError as exc:
            raise ValidationError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class PoiCategory(str, Enum):
    """A point of interest category, used to filter search results."""

    AIRPORT = "Airport"
    AIRPORT_GATE = "AirportGate"
    AIRPORT_TERMINAL = "AirportTerminal"
    AMUSEMENT_PARK = "AmusementPark"
    ATM = "ATM"
    AQUARIUM = "Aquarium"
    BAKERY = "Bakery"
    BANK = "Bank"
    BEACH = "Beach"
    BREWERY = "Brewery"
    CAFE = "Cafe"
    CAMPGROUND = "Campground"
    CAR_RENTAL = "CarRental"
    EV_CHARGER = "EVCharger"
    FIRE_STATION = "FireStation"
    FITNESS_CENTER = "FitnessCenter"
    FOOD_MARKET = "FoodMarket"
    GAS_STATION = "GasStation"
    HOSPITAL = "Hospital"
    HOTEL = "Hotel"
    LAUNDRY = "Laundry"
    LIBRARY = "Library"
    MARINA = "Marina"
    MOVIE_THEATER = "MovieTheater"
    MUSEUM = "Museum"
    NATIONAL_PARK = "NationalPark"
    NIGHTLIFE = "Nightlife"
    PARK = "Park"
    PARKING = "Parking"
    PHARMACY = "Pharmacy"
    PLAYGROUND = "Playground"
    POLICE = "Police"
    POST_OFFICE = "PostOffice"
    PUBLIC_TRANSPORT = "PublicTransport"
    RELIGIOUS_SITE = "ReligiousSite"
    RESTAURANT = "Restaurant"
    RESTROOM = "Restroom"
    SCHOOL = "School"
    STADIUM = "Stadium"
    STORE = "Store"
    THEATER = "Theater"
    UNIVERSITY = "University"
    WINERY = "Winery"
    ZOO = "Zoo"


class SearchResultType(str, Enum):
    """Kinds of results the search endpoints can be restricted to."""

    POI = "Poi"
    ADDRESS = "Address"
    QUERY = "Query"  # autocomplete only


class DirectionsAvoid(str, Enum):
    """Route features to avoid.

    Avoiding tolls only ranks toll-free routes higher; check
    ``DirectionsRoute.has_tolls`` on the result.
    """

    TOLLS = "Tolls"


class TransportType(str, Enum):
    """Transport modes supported by the directions endpoint."""

    AUTOMOBILE = "Automobile"
    WALKING = "Walking"


class EtaTransportType(str, Enum):
    """Transport modes supported by the ETA endpoint."""

    AUTOMOBILE = "Automobile"
    WALKING = "Walking"
    TRANSIT = "Transit"


# ---------------------------------------------------------------------------
# Shared value types
# ---------------------------------------------------------------------------


class Location(WireModel, CheckedModel):
    """A latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    def to_query(self) -> str:
        """Encode as ``"lat,lon"``, e.g. ``"37.78,-122.42"``."""
        return f"{format_coordinate(self.latitude)},{format_coordinate(self.longitude)}"

    @classmethod
    def parse(cls, text: str) -> Location:
        """Inverse of :meth:`to_query`."""
        lat, sep, lon = text.partition(",")
        if not sep:
            raise ValueError(f"expected 'latitude,longitude', got {text!r}")
        return cls(latitude=float(lat), longitude=float(lon))


class Region(WireModel, CheckedModel):
    """A rectangular map region bounded by two latitudes and two longitudes."""

    model_config = ConfigDict(frozen=True)

    north_latitude: float = Field(ge=-90.0, le=90.0)
    east_longitude: float = Field(ge=-180.0, le=180.0)
    south_latitude: float = Field(ge=-90.0, le=90.0)
    west_longitude: float = Field(ge=-180.0, le=180.0)

    def to_query(self) -> str:
        """Encode as ``"north,east,south,west"``, e.g. ``"38,-122.1,37.5,-122.5"``."""
        return ",".join(
            format_coordinate(v)
            for v in (self.north_latitude, self.east_longitude, self.south_latitude, self.west_longitude)
        )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ErrorResponseError(WireModel):
    message: str = ""
    details: list[str] = Field(default_factory=list)

    @field_validator("message", "details", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: pydantic.ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "details" else ""
        return value


class ErrorResponse(WireModel):
    """Structured error payload returned with non-2xx statuses."""

    error: ErrorResponseError


class AccessTokenResponse(WireModel):
    """Response of ``GET /v1/token``."""

    access_token: str
    expires_in_seconds: int


class StructuredAddress(WireModel):
    """The detailed address components of a place."""

    administrative_area: str = ""
    administrative_area_code: str = ""
    areas_of_interest: list[str] = Field(default_factory=list)
    dependent_localities: list[str] = Field(default_factory=list)
    full_thoroughfare: str = ""
    locality: str = ""
    post_code: str = ""
    sub_locality: str = ""
    sub_thoroughfare: str = ""
    thoroughfare: str = ""


class Place(WireModel):
    """A place returned by geocoding or search."""

    country: str = ""
    country_code: str = ""
    display_map_region: Region | None = None
    formatted_address_lines: list[str] = Field(default_factory=list)
    name: str = ""
    coordinate: Location | None = None
    structured_address: StructuredAddress | None = None


class PlaceResults(WireModel):
    """Response of the geocode and reverse geocode endpoints."""

    results: list[Place] = Field(default_factory=list)


class SearchResponse(WireModel):
    display_map_region: Region | None = None
    results: list[Place] = Field(default_factory=list)


class AutocompleteResult(WireModel):
    """A single autocomplete suggestion.

    ``completion_url`` is relative to the search endpoint and carries opaque
    metadata; pass ``lang`` yourself when fetching it.
    """

    completion_url: str = ""
    display_lines: list[str] = Field(default_factory=list)
    location: Location | None = None
    structured_address: StructuredAddress | None = None


class SearchAutocompleteResponse(WireModel):
    results: list[AutocompleteResult] = Field(default_factory=list)


class DirectionsRoute(WireModel):
    """One route; ``step_indexes`` point into ``DirectionsResponse.steps``."""

    distance_meters: int = 0
    duration_seconds: int = 0
    has_tolls: bool = False
    name: str = ""
    step_indexes: list[int] = Field(default_factory=list)
    transport_type: str = ""


class DirectionsStep(WireModel):
    """One step; ``step_path_index`` points into ``DirectionsResponse.step_paths``."""

    distance_meters: int = 0
    duration_seconds: int = 0
    instructions: str = ""
    step_path_index: int = 0
    transport_type: str = ""


class DirectionsResponse(WireModel):
    destination: Place | None = None
    origin: Place | None = None
    routes: list[DirectionsRoute] = Field(default_factory=list)
    step_paths: list[list[Location]] = Field(default_factory=list)
    steps: list[DirectionsStep] = Field(default_factory=list)


class Eta(WireModel):
    """Estimated travel time and distance to one destination."""

    destination: Location | None = None
    distance_meters: int = 0
    expected_travel_time_seconds: int = 0
    static_travel_time_seconds: int = 0
    # The service has been seen returning upper-case values here.
    transport_type: str = ""


class EtaResponse(WireModel):
    etas: list[Eta] = Field(default_factory=list)
