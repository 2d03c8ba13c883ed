"""HTTP client for the backend REST collaborator."""

import logging
from typing import Any, Optional, TypeVar, Union

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from portfolio_client.core.exceptions import (
    NetworkError,
    UnauthorizedError,
    ServerError,
    DecodeError,
    InvalidResponseError,
)
from portfolio_client.repositories.protocols.credential_store import (
    CredentialStore,
    ACCESS_TOKEN_KEY,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgREST filters may repeat a column, so a list of pairs is accepted too
QueryParams = Union[dict[str, Any], list[tuple[str, Any]]]

REST_PREFIX = "rest/v1"
FUNCTIONS_PREFIX = "functions/v1"


class BackendClient:
    """
    REST client for the backend tables and edge functions.

    Every call carries the static API key and, when a session exists, the
    bearer token. Failures map onto the application error taxonomy:
    transport problems raise NetworkError, 401 raises UnauthorizedError, any
    other non-2xx raises ServerError and a body that does not match the
    expected shape raises DecodeError after logging the raw payload. Nothing
    is retried automatically.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        credentials: CredentialStore,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._api_key = api_key
        self._credentials = credentials
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            headers={"apikey": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # Transport

    def send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[QueryParams] = None,
        json: Any = None,
        authorized: bool = True,
        prefer_representation: bool = False,
    ) -> httpx.Response:
        """Send a request and map failures to application errors."""
        headers: dict[str, str] = {}
        if authorized:
            token = self._credentials.get(ACCESS_TOKEN_KEY)
            if token:
                headers["Authorization"] = f"Bearer {token}"
        if prefer_representation:
            headers["Prefer"] = "return=representation"

        try:
            response = self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(str(exc)) from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if response.status_code == 401:
            raise UnauthorizedError()
        if not response.is_success:
            raise ServerError(response.status_code, response.text)
        return response

    @staticmethod
    def decode(response: httpx.Response, type_: Any) -> Any:
        """Validate the response body against ``type_``."""
        try:
            return TypeAdapter(type_).validate_json(response.content)
        except PydanticValidationError as exc:
            logger.error(
                "Failed to decode %s response: %s\nRaw payload: %s",
                response.request.url.path,
                exc,
                response.text,
            )
            raise DecodeError(str(exc), payload=response.text) from exc

    # Table operations

    def select(
        self,
        table: str,
        model: type[T],
        params: Optional[QueryParams] = None,
    ) -> list[T]:
        """GET rows of ``table`` filtered by PostgREST query parameters."""
        items = params.items() if isinstance(params, dict) else (params or [])
        query = [("select", "*")] + [(key, value) for key, value in items if key != "select"]
        response = self.send("GET", f"{REST_PREFIX}/{table}", params=query)
        return self.decode(response, list[model])

    def insert(self, table: str, model: type[T], payload: dict[str, Any]) -> T:
        """POST one row and return it as stored."""
        response = self.send(
            "POST",
            f"{REST_PREFIX}/{table}",
            json=payload,
            prefer_representation=True,
        )
        rows = self.decode(response, list[model])
        if not rows:
            raise InvalidResponseError(f"Insert into {table} returned no rows")
        return rows[0]

    def update(
        self,
        table: str,
        model: type[T],
        row_id: str,
        payload: dict[str, Any],
    ) -> Optional[T]:
        """PATCH the row with ``row_id`` and return it, if still visible."""
        response = self.send(
            "PATCH",
            f"{REST_PREFIX}/{table}",
            params={"id": f"eq.{row_id}"},
            json=payload,
            prefer_representation=True,
        )
        rows = self.decode(response, list[model])
        return rows[0] if rows else None

    def delete(self, table: str, params: dict[str, Any]) -> int:
        """DELETE the rows of ``table`` matching ``params``; return how many went."""
        response = self.send(
            "DELETE",
            f"{REST_PREFIX}/{table}",
            params=params,
            prefer_representation=True,
        )
        if not response.content:
            return 0
        return len(self.decode(response, list[dict[str, Any]]))

    def delete_by_id(self, table: str, row_id: str) -> None:
        self.delete(table, {"id": f"eq.{row_id}"})

    # Edge functions

    def invoke_function(self, name: str, body: dict[str, Any], model: Any) -> Any:
        """POST to an edge function and decode its response."""
        response = self.send("POST", f"{FUNCTIONS_PREFIX}/{name}", json=body)
        return self.decode(response, model)
