"""applemaps: typed Python client for the Apple Maps Server API."""

from applemaps.auth import (
    FRESHNESS_THRESHOLD_SECONDS,
    AccessToken,
    AsyncAutoRefresh,
    AsyncMemoryTokenStore,
    AsyncTokenStore,
    AutoRefresh,
    MemoryTokenStore,
    TokenStore,
)
from applemaps.client import DEFAULT_BASE_URL, AppleMapsClient, AppleMapsSyncClient
from applemaps.exceptions import (
    APIError,
    AppleMapsError,
    AuthenticationError,
    AuthorizationError,
    DecodeError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TokenStoreError,
    ValidationError,
)
from applemaps.requests import (
    DirectionsRequest,
    EtaRequest,
    GeocodeRequest,
    ReverseGeocodeRequest,
    SearchAutocompleteRequest,
    SearchRequest,
)
from applemaps.types import (
    AccessTokenResponse,
    AutocompleteResult,
    DirectionsAvoid,
    DirectionsResponse,
    DirectionsRoute,
    DirectionsStep,
    ErrorResponse,
    Eta,
    EtaResponse,
    EtaTransportType,
    Location,
    Place,
    PlaceResults,
    PoiCategory,
    Region,
    SearchAutocompleteResponse,
    SearchResponse,
    SearchResultType,
    StructuredAddress,
    TransportType,
)

__all__ = [
    # Clients
    "AppleMapsClient",
    "AppleMapsSyncClient",
    "DEFAULT_BASE_URL",
    # Access tokens
    "AccessToken",
    "TokenStore",
    "AsyncTokenStore",
    "MemoryTokenStore",
    "AsyncMemoryTokenStore",
    "AutoRefresh",
    "AsyncAutoRefresh",
    "FRESHNESS_THRESHOLD_SECONDS",
    # Types: shared values and enums
    "Location",
    "Region",
    "PoiCategory",
    "SearchResultType",
    "DirectionsAvoid",
    "TransportType",
    "EtaTransportType",
    # Types: requests
    "GeocodeRequest",
    "ReverseGeocodeRequest",
    "SearchRequest",
    "SearchAutocompleteRequest",
    "DirectionsRequest",
    "EtaRequest",
    # Types: responses
    "AccessTokenResponse",
    "ErrorResponse",
    "Place",
    "PlaceResults",
    "StructuredAddress",
    "SearchResponse",
    "AutocompleteResult",
    "SearchAutocompleteResponse",
    "DirectionsRoute",
    "DirectionsStep",
    "DirectionsResponse",
    "Eta",
    "EtaResponse",
    # Exceptions
    "AppleMapsError",
    "ValidationError",
    "APIError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "DecodeError",
    "TokenStoreError",
]
