"""Hockey league REST API client."""

import logging
from typing import Any

import backoff
import requests

from hla.core.constants import DEFAULT_API_URL, PACKAGE_VERSION, APIConstants
from hla.exceptions import (
    AuthenticationError,
    DecodeError,
    HTTPStatusError,
    NetworkError,
    NotFoundError,
    PermissionError,
    RateLimitError,
)
from hla.models.auth import LoginRequest, LoginResponse

IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE", "PATCH"})
MATCH_PATH = "/match"


class LeagueAPIClient:
    """Blocking client for the league backend.

    Every call takes an optional bearer token; calls without one go out
    unauthenticated.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        """Initialize the API client.

        Args:
            base_url: Backend base URL (defaults to the local development server)
            timeout: Per-request timeout in seconds

        """
        self.logger = logging.getLogger(__name__)
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else float(APIConstants.REQUEST_TIMEOUT)
        self.session: requests.Session | None = None
        self.logger.debug(f"LeagueAPIClient configured for {self.base_url}")

    def __enter__(self) -> "LeagueAPIClient":
        """Enter context."""
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context."""
        self.close()

    def open(self) -> None:
        if self.session is None:
            self.logger.debug("Opening client session")
            self.session = requests.Session()

    def close(self) -> None:
        if self.session is not None:
            self.logger.debug("Closing client session")
            self.session.close()
            self.session = None

    @staticmethod
    def headers(token: str | None = None) -> dict[str, str]:
        """Get request headers."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"hla/{PACKAGE_VERSION}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @backoff.on_exception(
        backoff.expo,
        (requests.exceptions.ConnectionError, requests.exceptions.Timeout),
        max_tries=APIConstants.BACKOFF_MAX_TRIES,
        factor=APIConstants.BACKOFF_FACTOR,
        max_value=APIConstants.BACKOFF_MAX_VALUE,
    )
    def _send_with_retry(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        return self._send(method, url, **kwargs)

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if not self.session:
            raise RuntimeError("Client not initialized. Use context manager.")
        return self.session.request(method, url, timeout=self.timeout, **kwargs)

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        token: str | None = None,
        expect_json: bool = True,
    ) -> Any:
        """Make an API request and decode the response.

        Transport failures are retried for idempotent methods only; a
        repeated POST could create the row twice.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            params: Query parameters
            json_body: JSON body (``False`` is sent as a literal ``false``)
            token: Optional bearer token
            expect_json: Raise DecodeError when the body is not JSON

        Returns:
            Decoded JSON, raw text for non-JSON success bodies, or None when empty

        Raises:
            NetworkError: No response was received
            HTTPStatusError: Non-2xx status (or a subclass for 401/403/404/429)
            DecodeError: Body is not valid JSON where JSON is expected

        """
        method = method.upper()
        url = f"{self.base_url}{endpoint}"
        method_name = f"{method} {endpoint}"
        kwargs: dict[str, Any] = {"headers": self.headers(token), "params": params}
        if json_body is not None:
            kwargs["json"] = json_body

        self.logger.debug(f"Making request: {method_name} params={params}")
        send = self._send_with_retry if method in IDEMPOTENT_METHODS else self._send
        try:
            response = send(method, url, **kwargs)
        except requests.exceptions.Timeout as e:
            self.logger.warning(f"Timeout after {self.timeout}s in {method_name}")
            raise NetworkError(f"Request timed out after {self.timeout}s in {method_name}", url) from e
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Network failure in {method_name}: {e}")
            raise NetworkError(f"Could not reach API server in {method_name}", url) from e

        if not 200 <= response.status_code < 300:
            raise self._status_error(response, method_name)
        return self._decode(response, method_name, expect_json)

    def _status_error(self, response: requests.Response, method_name: str) -> HTTPStatusError:
        response_text = response.text
        retry_after = response.headers.get("Retry-After")

        # Map status codes to exceptions
        error_map = {
            401: lambda: AuthenticationError(f"Unauthorized access in {method_name}", response_text),
            403: lambda: PermissionError(f"Access forbidden in {method_name}", response_text),
            404: lambda: NotFoundError(f"Resource not found in {method_name}", response_text),
            429: lambda: RateLimitError(
                f"Rate limit exceeded in {method_name}",
                response_text,
                int(retry_after) if retry_after and retry_after.isdigit() else None,
            ),
        }

        self.logger.debug(f"{method_name} failed with status {response.status_code}")
        if response.status_code in error_map:
            return error_map[response.status_code]()
        if 500 <= response.status_code < 600:
            return HTTPStatusError(response.status_code, f"Server error in {method_name}", response_text)
        return HTTPStatusError(
            response.status_code,
            f"Unexpected response status {response.status_code} in {method_name}",
            response_text,
        )

    def _decode(self, response: requests.Response, method_name: str, expect_json: bool) -> Any:
        if not response.content:
            if expect_json:
                raise DecodeError(f"Empty response body in {method_name}")
            return None
        try:
            return response.json()
        except ValueError as e:
            if expect_json:
                raise DecodeError(f"Invalid JSON in {method_name}", response.text) from e
            return response.text

    # Resource operations

    def list_page(self, path: str, params: dict[str, Any], token: str | None = None) -> Any:
        """``GET /{entity}`` returning the raw paginated payload."""
        return self.request("GET", path, params=params, token=token)

    def create(self, path: str, body: dict[str, Any], token: str | None = None) -> int | None:
        """``POST /{entity}``; returns the new id when the backend reports one."""
        data = self.request("POST", path, json_body=body, token=token)
        if not isinstance(data, dict):
            raise DecodeError(f"Expected an object from POST {path}, got {type(data).__name__}")
        new_id = data.get("id")
        return int(new_id) if new_id is not None else None

    def update(self, path: str, entity_id: int, body: dict[str, Any], token: str | None = None) -> Any:
        return self.request("PUT", f"{path}/{entity_id}", json_body=body, token=token, expect_json=False)

    def delete(self, path: str, entity_id: int, token: str | None = None) -> Any:
        return self.request("DELETE", f"{path}/{entity_id}", token=token, expect_json=False)

    def patch_status(self, path: str, entity_id: int, value: bool, token: str | None = None) -> Any:
        """``PATCH /{entity}/{id}`` with a raw JSON boolean body."""
        return self.request("PATCH", f"{path}/{entity_id}", json_body=value, token=token, expect_json=False)

    # Match detail

    def match_stats(self, match_id: int, token: str | None = None) -> Any:
        """``GET /match/{id}/stats``: the match with its score totals."""
        return self.request("GET", f"{MATCH_PATH}/{match_id}/stats", token=token)

    def score_events(self, match_id: int, token: str | None = None) -> list[Any]:
        data = self.request("GET", f"{MATCH_PATH}/{match_id}/score-events", token=token)
        if not isinstance(data, list):
            raise DecodeError(f"Expected a list of score events for match {match_id}, got {type(data).__name__}")
        return data

    def create_score_event(self, match_id: int, body: dict[str, Any], token: str | None = None) -> int | None:
        return self.create(f"{MATCH_PATH}/{match_id}/score-events", body, token)

    def identify_goal(self, match_id: int, body: dict[str, Any], token: str | None = None) -> int | None:
        """Turn one unidentified goal of the scoring team into a score event."""
        return self.create(f"{MATCH_PATH}/{match_id}/identify-goal", body, token)

    def delete_score_event(self, match_id: int, event_id: int, token: str | None = None) -> Any:
        return self.delete(f"{MATCH_PATH}/{match_id}/score-events", event_id, token)

    # Authentication

    def login(self, email: str, password: str) -> LoginResponse:
        """Exchange credentials for an access token."""
        self.logger.info(f"Logging in as {email}")
        data = self.request("POST", "/auth/login", json_body=LoginRequest(email=email, password=password).model_dump())
        try:
            return LoginResponse.model_validate(data)
        except ValueError as e:
            raise DecodeError("Malformed login response") from e

    def logout(self, refresh_token: str, token: str | None = None) -> None:
        """Revoke the refresh token on the server."""
        self.request("POST", "/auth/logout", json_body={"refresh_token": refresh_token}, token=token, expect_json=False)
