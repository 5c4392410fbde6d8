"""Tests for request validation and query parameter encoding."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from applemaps.exceptions import AppleMapsError, ValidationError
from applemaps.requests import (
    DirectionsRequest,
    EtaRequest,
    GeocodeRequest,
    MapsRequest,
    ReverseGeocodeRequest,
    SearchAutocompleteRequest,
    SearchRequest,
    format_time,
)
from applemaps.types import (
    DirectionsAvoid,
    EtaTransportType,
    Location,
    PoiCategory,
    Region,
    SearchResultType,
    TransportType,
    format_coordinate,
)

KYOANI = Location(latitude=34.985849, longitude=135.7561864)
KYOTO = Region(
    north_latitude=35.0219,
    east_longitude=135.8426,
    south_latitude=34.8440,
    west_longitude=135.6215,
)
APPLE_PARK = Location(latitude=37.331871, longitude=-122.029626)


class TestCoordinates:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (34.985849, "34.985849"),
            (34.8440, "34.844"),
            (38.0, "38"),
            (-122.5, "-122.5"),
            (0.00001, "0.00001"),
            (135.7561864, "135.7561864"),
        ],
    )
    def test_format_coordinate(self, value: float, expected: str) -> None:
        assert format_coordinate(value) == expected

    def test_location_round_trips_through_query_string(self) -> None:
        for loc in (KYOANI, APPLE_PARK, Location(latitude=-90, longitude=180), Location(latitude=1e-7, longitude=-0.1)):
            assert Location.parse(loc.to_query()) == loc

    def test_region_order_is_north_east_south_west(self) -> None:
        assert KYOTO.to_query() == "35.0219,135.8426,34.844,135.6215"

    def test_out_of_range_latitude_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Location(latitude=91, longitude=0)

    def test_out_of_range_region_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Region(north_latitude=10, east_longitude=181, south_latitude=0, west_longitude=0)

    def test_nested_out_of_range_location_is_rejected(self) -> None:
        with pytest.raises(AppleMapsError):
            GeocodeRequest(query="hello", search_location={"latitude": 0, "longitude": -200})

    def test_parse_rejects_malformed_text(self) -> None:
        with pytest.raises(ValueError):
            Location.parse("34.98")


class TestFormatTime:
    def test_utc_with_second_precision(self) -> None:
        value = datetime(2023, 4, 15, 16, 42, 0, 123456, tzinfo=timezone.utc)
        assert format_time(value) == "2023-04-15T16:42:00Z"

    def test_converts_offsets_to_utc(self) -> None:
        jst = timezone(timedelta(hours=9))
        assert format_time(datetime(2023, 10, 5, 14, 47, 39, tzinfo=jst)) == "2023-10-05T05:47:39Z"

    def test_naive_datetimes_are_utc(self) -> None:
        assert format_time(datetime(2023, 10, 5, 5, 47, 39)) == "2023-10-05T05:47:39Z"


class TestGeocodeRequest:
    def test_query_only(self) -> None:
        assert GeocodeRequest(query="hello").to_params() == {"q": "hello"}

    def test_multiple_countries(self) -> None:
        params = GeocodeRequest(query="hello", limit_to_countries=["US", "ca"]).to_params()
        assert params == {"q": "hello", "limitToCountries": "US,CA"}

    def test_all_hints(self) -> None:
        req = GeocodeRequest(
            query="KyoAni",
            limit_to_countries=["JP"],
            lang="en-US",
            search_location=KYOANI,
            search_region=KYOTO,
            user_location=KYOANI,
        )
        assert req.to_params() == {
            "q": "KyoAni",
            "limitToCountries": "JP",
            "lang": "en-US",
            "searchLocation": "34.985849,135.7561864",
            "searchRegion": "35.0219,135.8426,34.844,135.6215",
            "userLocation": "34.985849,135.7561864",
        }

    def test_empty_query_fails(self) -> None:
        with pytest.raises(ValidationError, match="query is required"):
            GeocodeRequest(query="").to_params()

    def test_invalid_country_code_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Japan"):
            GeocodeRequest(query="hello", limit_to_countries=["Japan"])

    def test_invalid_country_code_is_an_apple_maps_error(self) -> None:
        with pytest.raises(AppleMapsError):
            SearchRequest(query="hello", limit_to_countries=["U1"])


class TestReverseGeocodeRequest:
    def test_loc_and_lang(self) -> None:
        req = ReverseGeocodeRequest(loc=Location(latitude=37.33182, longitude=-122.03118), lang="en-US")
        assert req.to_params() == {"loc": "37.33182,-122.03118", "lang": "en-US"}

    def test_missing_loc_fails(self) -> None:
        with pytest.raises(ValidationError, match="loc is required"):
            ReverseGeocodeRequest().to_params()


class TestSearchRequests:
    def test_search_filters(self) -> None:
        req = SearchRequest(
            query="eiffel tower",
            exclude_poi_categories=[PoiCategory.RESTAURANT, PoiCategory.CAFE],
            include_poi_categories=["Museum"],
            limit_to_countries=["FR"],
            result_type_filter=[SearchResultType.POI],
            user_location=Location(latitude=48.8584, longitude=2.2945),
        )
        assert req.to_params() == {
            "q": "eiffel tower",
            "excludePoiCategories": "Restaurant,Cafe",
            "includePoiCategories": "Museum",
            "limitToCountries": "FR",
            "resultTypeFilter": "Poi",
            "userLocation": "48.8584,2.2945",
        }

    def test_autocomplete_accepts_query_results(self) -> None:
        req = SearchAutocompleteRequest(query="eiff", result_type_filter=["Poi", "Query"])
        assert req.to_params() == {"q": "eiff", "resultTypeFilter": "Poi,Query"}

    @pytest.mark.parametrize("cls", [SearchRequest, SearchAutocompleteRequest])
    def test_empty_query_fails(self, cls: type[SearchRequest]) -> None:
        with pytest.raises(ValidationError):
            cls(query="").to_params()


class TestDirectionsRequest:
    def test_arrival_date(self) -> None:
        req = DirectionsRequest(
            origin=APPLE_PARK,
            destination="1 Infinite Loop, Cupertino, CA 95014",
            arrival_date=datetime.fromtimestamp(1696484859, tz=timezone.utc),
        )
        assert req.to_params() == {
            "origin": "37.331871,-122.029626",
            "destination": "1 Infinite Loop, Cupertino, CA 95014",
            "arrivalDate": "2023-10-05T05:47:39Z",
        }

    def test_all_options(self) -> None:
        req = DirectionsRequest(
            origin="Apple Park",
            destination=APPLE_PARK,
            departure_date=datetime(2023, 4, 15, 16, 42, tzinfo=timezone.utc),
            avoid=[DirectionsAvoid.TOLLS],
            lang="en-US",
            requests_alternate_routes=True,
            search_location=APPLE_PARK,
            search_region=KYOTO,
            transport_type=TransportType.WALKING,
            user_location=APPLE_PARK,
        )
        assert req.to_params() == {
            "origin": "Apple Park",
            "destination": "37.331871,-122.029626",
            "departureDate": "2023-04-15T16:42:00Z",
            "avoid": "Tolls",
            "lang": "en-US",
            "requestsAlternateRoutes": "true",
            "searchLocation": "37.331871,-122.029626",
            "searchRegion": "35.0219,135.8426,34.844,135.6215",
            "transportType": "Walking",
            "userLocation": "37.331871,-122.029626",
        }

    def test_alternate_routes_omitted_when_false(self) -> None:
        params = DirectionsRequest(origin="a", destination="b").to_params()
        assert "requestsAlternateRoutes" not in params

    @pytest.mark.parametrize(
        ("origin", "destination", "message"),
        [
            (None, "b", "origin is required"),
            ("", "b", "origin is required"),
            ("a", None, "destination is required"),
            ("a", "", "destination is required"),
        ],
    )
    def test_missing_endpoints_fail(self, origin: str | None, destination: str | None, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            DirectionsRequest(origin=origin, destination=destination).to_params()


class TestEtaRequest:
    def _destinations(self, n: int) -> list[Location]:
        return [Location(latitude=37.0 + i / 100, longitude=-122.0) for i in range(n)]

    def test_destinations_are_pipe_separated(self) -> None:
        req = EtaRequest(
            origin=Location(latitude=37.331423, longitude=-122.030503),
            destinations=[
                Location(latitude=37.32556561130194, longitude=-121.94635203581443),
                Location(latitude=37.44176585512703, longitude=-122.17259315798667),
            ],
            transport_type=EtaTransportType.TRANSIT,
            departure_date=datetime(2020, 9, 15, 16, 42, tzinfo=timezone.utc),
        )
        assert req.to_params() == {
            "origin": "37.331423,-122.030503",
            "destinations": "37.32556561130194,-121.94635203581443|37.44176585512703,-122.17259315798667",
            "transportType": "Transit",
            "departureDate": "2020-09-15T16:42:00Z",
        }

    @pytest.mark.parametrize("n", [1, 5, 10])
    def test_one_to_ten_destinations(self, n: int) -> None:
        params = EtaRequest(origin=APPLE_PARK, destinations=self._destinations(n)).to_params()
        assert len(params["destinations"].split("|")) == n

    def test_no_destinations_fails(self) -> None:
        with pytest.raises(ValidationError, match="destinations is required"):
            EtaRequest(origin=APPLE_PARK).to_params()

    def test_eleven_destinations_fail(self) -> None:
        with pytest.raises(ValidationError, match="max length is 10"):
            EtaRequest(origin=APPLE_PARK, destinations=self._destinations(11)).to_params()

    def test_missing_origin_fails(self) -> None:
        with pytest.raises(ValidationError, match="origin is required"):
            EtaRequest(destinations=self._destinations(1)).to_params()


class TestMapsRequest:
    def test_base_request_cannot_be_built(self) -> None:
        with pytest.raises(TypeError):
            MapsRequest()
