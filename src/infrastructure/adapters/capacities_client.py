"""HTTP client for the Capacities API (httpx)."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx

from ...application.ports.capacities_api import (
    CapacitiesApiPort,
    SaveWeblinkRequest,
    SaveWeblinkResponse,
    SpaceInfo,
)
from ...domain.errors import (
    CapacitiesAPIError,
    CapacitiesNotConfiguredError,
    CapacitiesRateLimitError,
)
from ...domain.policy.sync_policy import DEFAULT_SYNC_POLICY, SyncPolicy
from ...domain.types import CapacitiesCredentials

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.capacities.io"

CredentialsProvider = Callable[[], CapacitiesCredentials]


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return None


class CapacitiesClient(CapacitiesApiPort):
    """
    Capacities API client.

    Credentials are fetched from `credentials` on every call, so updating the
    stored token or space ID takes effect without rebuilding the client.
    Request payloads are truncated to the API limits here, at the transport
    boundary.
    """

    def __init__(
        self,
        credentials: CredentialsProvider,
        base_url: str = API_BASE_URL,
        timeout_seconds: float = DEFAULT_SYNC_POLICY.request_timeout_seconds,
        policy: SyncPolicy = DEFAULT_SYNC_POLICY,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize Capacities client.

        Args:
            credentials: Callable returning the current CapacitiesCredentials
            base_url: API base URL
            timeout_seconds: Per-request timeout
            policy: Field length limits
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self._credentials = credentials
        self._policy = policy
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    def is_configured(self) -> bool:
        return self._credentials().is_complete()

    def _require_token(self) -> CapacitiesCredentials:
        credentials = self._credentials()
        if not credentials.api_token:
            raise CapacitiesNotConfiguredError("apiToken")
        return credentials

    def _require_space(self) -> CapacitiesCredentials:
        credentials = self._require_token()
        if not credentials.space_id:
            raise CapacitiesNotConfiguredError("spaceId")
        return credentials

    def _request(
        self,
        credentials: CapacitiesCredentials,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request and decode the JSON answer.

        Raises:
            CapacitiesRateLimitError: On HTTP 429
            CapacitiesAPIError: On any other non-2xx status, or status 0 on transport failure
        """
        headers = {
            "Authorization": f"Bearer {credentials.api_token}",
            "Content-Type": "application/json",
        }
        try:
            response = self._http.request(method, endpoint, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.warning(f"Capacities request {method} {endpoint} failed: {e}", extra={"endpoint": endpoint})
            raise CapacitiesAPIError(0, f"Capacities API request failed: {e}") from e

        if not response.is_success:
            message = (
                f"Capacities API error: {response.status_code} {response.reason_phrase} - {response.text}"
            )
            logger.warning(message, extra={"endpoint": endpoint, "status": response.status_code})
            if response.status_code == 429:
                raise CapacitiesRateLimitError(
                    message,
                    retry_after=_parse_retry_after(response.headers.get("Retry-After")),
                )
            raise CapacitiesAPIError(response.status_code, message)

        text = response.text
        if not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise CapacitiesAPIError(response.status_code, f"Capacities API returned invalid JSON: {e}") from e

        # Every endpoint answers with a JSON object
        if not isinstance(payload, dict):
            raise CapacitiesAPIError(
                response.status_code,
                f"Capacities API returned an unexpected response: {text[:200]}",
            )
        return payload

    def get_spaces(self) -> list[SpaceInfo]:
        credentials = self._require_token()
        payload = self._request(credentials, "GET", "/spaces")
        spaces = payload.get("spaces") or []
        if not isinstance(spaces, list):
            raise CapacitiesAPIError(200, f"Capacities API returned an unexpected spaces list: {spaces!r}")
        return [
            SpaceInfo(id=str(space["id"]), title=str(space.get("title") or ""), icon=space.get("icon"))
            for space in spaces
            if isinstance(space, dict) and space.get("id")
        ]

    def save_weblink(self, request: SaveWeblinkRequest) -> SaveWeblinkResponse:
        credentials = self._require_space()
        policy = self._policy

        body: dict[str, Any] = {"spaceId": credentials.space_id, "url": request.url}
        if request.title_overwrite:
            body["titleOverwrite"] = request.title_overwrite[: policy.max_title_length]
        if request.description_overwrite:
            body["descriptionOverwrite"] = request.description_overwrite[: policy.max_description_length]
        if request.tags:
            body["tags"] = list(request.tags[: policy.max_tags])
        if request.md_text:
            body["mdText"] = request.md_text[: policy.max_markdown_length]

        payload = self._request(credentials, "POST", "/save-weblink", body)
        logger.debug(f"Saved weblink {request.url}", extra={"object_id": payload.get("id")})
        tags = payload.get("tags")
        return SaveWeblinkResponse(
            space_id=str(payload.get("spaceId") or credentials.space_id),
            id=str(payload.get("id") or ""),
            structure_id=str(payload.get("structureId") or ""),
            title=str(payload.get("title") or ""),
            description=str(payload.get("description") or ""),
            tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        )

    def save_to_daily_note(self, md_text: str, no_timestamp: bool | None = None) -> None:
        credentials = self._require_space()
        body: dict[str, Any] = {
            "spaceId": credentials.space_id,
            "mdText": md_text[: self._policy.max_markdown_length],
        }
        if no_timestamp is not None:
            body["noTimeStamp"] = no_timestamp
        self._request(credentials, "POST", "/save-to-daily-note", body)

    def close(self) -> None:
        self._http.close()
