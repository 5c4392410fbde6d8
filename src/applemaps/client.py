"""Apple Maps Server API client: async and sync HTTP clients."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, TypeVar

import httpx
import pydantic

from applemaps.auth import (
    AccessToken,
    AsyncAutoRefresh,
    AsyncMemoryTokenStore,
    AsyncTokenStore,
    AutoRefresh,
    MemoryTokenStore,
    TokenStore,
)
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
)
from applemaps.requests import (
    DirectionsRequest,
    EtaRequest,
    GeocodeRequest,
    MapsRequest,
    ReverseGeocodeRequest,
    SearchAutocompleteRequest,
    SearchRequest,
)
from applemaps.types import (
    AccessTokenResponse,
    DirectionsResponse,
    ErrorResponse,
    EtaResponse,
    PlaceResults,
    SearchAutocompleteResponse,
    SearchResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://maps-api.apple.com"

V1_TOKEN = "/v1/token"
V1_GEOCODE = "/v1/geocode"
V1_REVERSE_GEOCODE = "/v1/reverseGeocode"
V1_SEARCH = "/v1/search"
V1_SEARCH_AUTOCOMPLETE = "/v1/searchAutocomplete"
V1_DIRECTIONS = "/v1/directions"
V1_ETAS = "/v1/etas"

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

SyncRefreshFn = Callable[["AppleMapsSyncClient"], AccessToken]
AsyncRefreshFn = Callable[["AppleMapsClient"], Awaitable[AccessToken]]


# ---------------------------------------------------------------------------
# Shared response handling
# ---------------------------------------------------------------------------

_STATUS_ERRORS: dict[int, type[APIError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    429: RateLimitError,
}


def _build_api_error(resp: httpx.Response) -> APIError:
    """Map a non-2xx response to an APIError, keeping the raw body if it doesn't decode."""
    try:
        payload: ErrorResponse | None = ErrorResponse.model_validate_json(resp.content)
    except pydantic.ValidationError:
        payload = None
    if resp.status_code >= 500:
        error_cls = ServerError
    else:
        error_cls = _STATUS_ERRORS.get(resp.status_code, APIError)
    return error_cls(resp.status_code, resp.content, resp.headers, payload)


def _handle_response(resp: httpx.Response, model: type[ModelT]) -> ModelT:
    """Raise on error statuses, otherwise decode the body into *model*."""
    logger.debug("%s response status %d", model.__name__, resp.status_code)
    if not resp.is_success:
        raise _build_api_error(resp)
    try:
        return model.model_validate_json(resp.content)
    except pydantic.ValidationError as exc:
        raise DecodeError(f"malformed {model.__name__} body: {exc}", body=resp.content) from exc


def _token_from_response(data: AccessTokenResponse) -> AccessToken:
    # The service answers with a lifetime; stores keep an absolute expiry.
    return AccessToken(value=data.access_token, expires_at=int(time.time()) + data.expires_in_seconds)


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Async client
# ---------------------------------------------------------------------------


class AppleMapsClient:
    """Async HTTP client for the Apple Maps Server API.

    Usage::

        async with AppleMapsClient(auth_token="your_auth_token") as client:
            places = await client.geocode(GeocodeRequest(query="1 Apple Park, Cupertino, CA"))

    Args:
        auth_token: The long-lived token from the developer portal. It is only
            sent to ``/v1/token`` to obtain access tokens.
        base_url: Service root, without the ``/v1`` prefix.
        timeout: Request timeout in seconds for the default HTTP client.
        http_client: A preconfigured ``httpx.AsyncClient``. The caller keeps
            ownership and must close it.
        token_store: Where access tokens are kept (default: in memory).
        auto_refresh: ``True`` for the built-in single-flight refresh,
            ``False`` to refresh manually, or a coroutine function taking the
            client and returning the :class:`AccessToken` to use.
    """

    def __init__(
        self,
        auth_token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        token_store: AsyncTokenStore | None = None,
        auto_refresh: bool | AsyncRefreshFn | None = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._token_store: AsyncTokenStore = token_store if token_store is not None else AsyncMemoryTokenStore()
        self._auto_refresh: AsyncRefreshFn | None
        if auto_refresh is True:
            self._auto_refresh = AsyncAutoRefresh()
        elif not auto_refresh:
            self._auto_refresh = None
        else:
            self._auto_refresh = auto_refresh
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r})"

    async def __aenter__(self) -> AppleMapsClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client, unless it was supplied by the caller."""
        if self._owns_client:
            await self._client.aclose()

    # --- Access tokens ---

    async def get_new_access_token(self) -> AccessToken:
        """Exchange the auth token for a new access token. Does not store it."""
        resp = await self._client.get(f"{self.base_url}{V1_TOKEN}", headers=_bearer(self._auth_token))
        token = _token_from_response(_handle_response(resp, AccessTokenResponse))
        logger.debug("fetched new access token, expires_at=%d", token.expires_at)
        return token

    async def get_access_token(self) -> AccessToken:
        """Return the token currently held by the token store."""
        try:
            return await self._token_store.get_access_token()
        except AppleMapsError:
            raise
        except Exception as exc:
            raise TokenStoreError(f"reading access token failed: {exc}") from exc

    async def set_access_token(self, token: AccessToken) -> None:
        """Replace the token held by the token store."""
        try:
            await self._token_store.set_access_token(token)
        except AppleMapsError:
            raise
        except Exception as exc:
            raise TokenStoreError(f"writing access token failed: {exc}") from exc

    async def ensure_fresh_token(self) -> AccessToken:
        """Return the token the next request will use, refreshing it if configured to."""
        if self._auto_refresh is None:
            return await self.get_access_token()
        return await self._auto_refresh(self)

    # --- Endpoints ---

    async def geocode(self, request: GeocodeRequest) -> PlaceResults:
        """Return the coordinates of an address."""
        return await self._get(V1_GEOCODE, PlaceResults, request)

    async def reverse_geocode(self, request: ReverseGeocodeRequest) -> PlaceResults:
        """Return the addresses at a coordinate."""
        return await self._get(V1_REVERSE_GEOCODE, PlaceResults, request)

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Find places matching a query."""
        return await self._get(V1_SEARCH, SearchResponse, request)

    async def search_autocomplete(self, request: SearchAutocompleteRequest) -> SearchAutocompleteResponse:
        """Return completions for a partial place query."""
        return await self._get(V1_SEARCH_AUTOCOMPLETE, SearchAutocompleteResponse, request)

    async def directions(self, request: DirectionsRequest) -> DirectionsResponse:
        """Return routes between an origin and a destination."""
        return await self._get(V1_DIRECTIONS, DirectionsResponse, request)

    async def eta(self, request: EtaRequest) -> EtaResponse:
        """Return travel times and distances to up to 10 destinations."""
        return await self._get(V1_ETAS, EtaResponse, request)

    # --- HTTP transport ---

    async def _get(self, path: str, model: type[ModelT], request: MapsRequest | None = None) -> ModelT:
        params = request.to_params() if request is not None else None
        token = await self.ensure_fresh_token()
        resp = await self._client.get(
            f"{self.base_url}{path}",
            params=params,
            headers=_bearer(token.value),
        )
        return _handle_response(resp, model)


# ---------------------------------------------------------------------------
# Sync client, sharing response handling with the async client.
# ---------------------------------------------------------------------------


class AppleMapsSyncClient:
    """Synchronous HTTP client for the Apple Maps Server API.

    Safe to share between threads: the underlying ``httpx.Client`` pools
    connections and token refresh is single-flight. Takes the same
    arguments as :class:`AppleMapsClient`, with synchronous collaborators.

    Usage::

        with AppleMapsSyncClient(auth_token="your_auth_token") as client:
            etas = client.eta(EtaRequest(origin=origin, destinations=[dest]))
    """

    def __init__(
        self,
        auth_token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        token_store: TokenStore | None = None,
        auto_refresh: bool | SyncRefreshFn | None = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._token_store: TokenStore = token_store if token_store is not None else MemoryTokenStore()
        self._auto_refresh: SyncRefreshFn | None
        if auto_refresh is True:
            self._auto_refresh = AutoRefresh()
        elif not auto_refresh:
            self._auto_refresh = None
        else:
            self._auto_refresh = auto_refresh
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.Client(timeout=timeout)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r})"

    def __enter__(self) -> AppleMapsSyncClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client, unless it was supplied by the caller."""
        if self._owns_client:
            self._client.close()

    # --- Access tokens ---

    def get_new_access_token(self) -> AccessToken:
        """Exchange the auth token for a new access token. Does not store it."""
        resp = self._client.get(f"{self.base_url}{V1_TOKEN}", headers=_bearer(self._auth_token))
        token = _token_from_response(_handle_response(resp, AccessTokenResponse))
        logger.debug("fetched new access token, expires_at=%d", token.expires_at)
        return token

    def get_access_token(self) -> AccessToken:
        """Return the token currently held by the token store."""
        try:
            return self._token_store.get_access_token()
        except AppleMapsError:
            raise
        except Exception as exc:
            raise TokenStoreError(f"reading access token failed: {exc}") from exc

    def set_access_token(self, token: AccessToken) -> None:
        """Replace the token held by the token store."""
        try:
            self._token_store.set_access_token(token)
        except AppleMapsError:
            raise
        except Exception as exc:
            raise TokenStoreError(f"writing access token failed: {exc}") from exc

    def ensure_fresh_token(self) -> AccessToken:
        """Return the token the next request will use, refreshing it if configured to."""
        if self._auto_refresh is None:
            return self.get_access_token()
        return self._auto_refresh(self)

    # --- Endpoints ---

    def geocode(self, request: GeocodeRequest) -> PlaceResults:
        """Return the coordinates of an address."""
        return self._get(V1_GEOCODE, PlaceResults, request)

    def reverse_geocode(self, request: ReverseGeocodeRequest) -> PlaceResults:
        """Return the addresses at a coordinate."""
        return self._get(V1_REVERSE_GEOCODE, PlaceResults, request)

    def search(self, request: SearchRequest) -> SearchResponse:
        """Find places matching a query."""
        return self._get(V1_SEARCH, SearchResponse, request)

    def search_autocomplete(self, request: SearchAutocompleteRequest) -> SearchAutocompleteResponse:
        """Return completions for a partial place query."""
        return self._get(V1_SEARCH_AUTOCOMPLETE, SearchAutocompleteResponse, request)

    def directions(self, request: DirectionsRequest) -> DirectionsResponse:
        """Return routes between an origin and a destination."""
        return self._get(V1_DIRECTIONS, DirectionsResponse, request)

    def eta(self, request: EtaRequest) -> EtaResponse:
        """Return travel times and distances to up to 10 destinations."""
        return self._get(V1_ETAS, EtaResponse, request)

    # --- HTTP transport ---

    def _get(self, path: str, model: type[ModelT], request: MapsRequest | None = None) -> ModelT:
        params = request.to_params() if request is not None else None
        token = self.ensure_fresh_token()
        resp = self._client.get(
            f"{self.base_url}{path}",
            params=params,
            headers=_bearer(token.value),
        )
        return _handle_response(resp, model)
