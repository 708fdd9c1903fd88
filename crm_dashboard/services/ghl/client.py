"""
GoHighLevel (LeadConnector) API client.
Low-level HTTP client for the upstream CRM endpoints the dashboard reads from.
Responses are returned as the upstream JSON; callers treat records as opaque.
"""

from datetime import datetime
from typing import Any

import httpx

from crm_dashboard.config import settings
from crm_dashboard.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class GHLSyncError(Exception):
    """Base class for errors surfaced by the ghl-sync adapter."""

    status_code: int = 500


class GHLCredentialsError(GHLSyncError):
    """API key or location id is not configured."""

    def __init__(self, message: str = "GHL credentials not configured"):
        super().__init__(message)


class GHLApiError(GHLSyncError):
    """Transport failure or non-success response from the upstream API."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.upstream_status = status_code
        self.response_data = response_data or {}


class GHLClient:
    """
    Client for the GoHighLevel REST API.

    Every request is scoped to the configured location and authenticated with
    the location API key. No retries: failures are reported once and the
    caller decides whether to fetch again.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport
        self._client = self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        """Create async HTTP client for the GHL API."""
        timeout = httpx.Timeout(settings.GHL_REQUEST_TIMEOUT)
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        return httpx.AsyncClient(timeout=timeout, limits=limits, transport=self._transport)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _credentials(self) -> tuple[str, str]:
        if not settings.ghl_configured():
            raise GHLCredentialsError()
        return settings.GHL_API_KEY, settings.GHL_LOCATION_ID

    def _get_headers(self, api_key: str) -> dict:
        """Get authorization headers for GHL API requests."""
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Version": settings.GHL_API_VERSION,
        }

    def _url(self, path: str) -> str:
        return f"{settings.GHL_API_BASE_URL.rstrip('/')}{path}"

    async def _get(self, path: str, operation: str, params: dict | None = None) -> dict:
        api_key, _ = self._credentials()
        try:
            response = await self._client.get(
                self._url(path), headers=self._get_headers(api_key), params=params
            )
        except httpx.RequestError as e:
            logger.error(f"GHL API {operation} request failed", error=str(e))
            raise GHLApiError(f"Could not reach GHL API: {e}", error_code="transport") from e

        return self._handle_api_response(response, operation)

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict:
        """
        Handle and validate a GHL API response.

        Args:
            response: HTTP response from the GHL API
            operation: Operation name for logging

        Returns:
            dict: Parsed response data

        Raises:
            GHLApiError: If the response is not a success or not JSON
        """
        logger.debug(
            f"GHL API {operation} response",
            status_code=response.status_code,
            response_size=len(response.text) if response.text else 0,
        )

        if response.is_success:
            try:
                data = response.json() if response.text else {}
            except ValueError as e:
                logger.error(f"Failed to parse GHL API {operation} response", error=str(e))
                raise GHLApiError(f"Invalid response format: {e}") from e

            if not isinstance(data, dict):
                logger.error(
                    f"GHL API {operation} returned a non-object body",
                    body_type=type(data).__name__,
                )
                raise GHLApiError(
                    "Invalid response format: expected a JSON object",
                    status_code=response.status_code,
                )
            return data

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            logger.error(
                f"GHL API {operation} failed with non-JSON response",
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise GHLApiError(
                f"GHL API error (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from None

        error_message = ""
        if isinstance(error_data, dict):
            message = error_data.get("message")
            # GHL returns either a string or a list of validation messages
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            error_message = message or error_data.get("error") or ""

        logger.error(
            f"GHL API {operation} failed",
            status_code=response.status_code,
            error_message=error_message,
        )

        raise GHLApiError(
            self._map_ghl_error(response.status_code, error_message),
            error_code=str(response.status_code),
            status_code=response.status_code,
            response_data=error_data if isinstance(error_data, dict) else {},
        )

    def _map_ghl_error(self, status_code: int, error_message: str) -> str:
        """Map GHL status codes to user-facing messages, preferring the upstream text."""
        if error_message:
            return error_message

        error_mappings = {
            400: "Invalid GHL request.",
            401: "GHL authorization failed. Check the API key.",
            403: "GHL access denied for this location.",
            404: "GHL resource not found.",
            422: "GHL rejected the request parameters.",
            429: "Too many GHL requests. Please try again later.",
        }
        if status_code >= 500:
            return "GHL service temporarily unavailable."
        return error_mappings.get(status_code, f"GHL API error (HTTP {status_code})")

    async def get_contacts(self, limit: int) -> dict[str, Any]:
        """List contacts for the location, newest first as the upstream orders them."""
        _, location_id = self._credentials()
        logger.info("Fetching GHL contacts", limit=limit)
        return await self._get(
            "/contacts/", "get_contacts", params={"locationId": location_id, "limit": limit}
        )

    async def get_appointments(self, start: datetime | str, end: datetime | str) -> dict[str, Any]:
        """List calendar events between two instants."""
        _, location_id = self._credentials()
        start_time = start.isoformat() if isinstance(start, datetime) else start
        end_time = end.isoformat() if isinstance(end, datetime) else end
        logger.info("Fetching GHL appointments", start_time=start_time, end_time=end_time)
        return await self._get(
            "/calendars/events",
            "get_appointments",
            params={"locationId": location_id, "startTime": start_time, "endTime": end_time},
        )

    async def get_pipelines(self) -> dict[str, Any]:
        _, location_id = self._credentials()
        logger.info("Fetching GHL pipelines")
        return await self._get(
            "/opportunities/pipelines", "get_pipelines", params={"locationId": location_id}
        )

    async def get_opportunities(self, limit: int) -> dict[str, Any]:
        _, location_id = self._credentials()
        logger.info("Fetching GHL opportunities", limit=limit)
        return await self._get(
            "/opportunities/search",
            "get_opportunities",
            params={"locationId": location_id, "limit": limit},
        )

    async def get_location(self) -> dict[str, Any]:
        """Fetch the configured location; used as the connection probe."""
        _, location_id = self._credentials()
        logger.info("Fetching GHL location", location_id=location_id)
        return await self._get(f"/locations/{location_id}", "get_location")

    async def health_check(self) -> dict[str, Any]:
        """
        Check upstream reachability without requiring credentials.

        Returns:
            Dict: Health status and configuration
        """
        health_data = {
            "healthy": True,
            "service": "ghl",
            "api_base_url": settings.GHL_API_BASE_URL,
            "credentials_configured": settings.ghl_configured(),
        }

        try:
            response = await self._client.head(settings.GHL_API_BASE_URL, timeout=5.0)
            health_data["api_connectivity"] = (
                "ok" if response.status_code < 500 else f"error_{response.status_code}"
            )
            health_data["healthy"] = response.status_code < 500
        except httpx.RequestError as e:
            health_data["api_connectivity"] = f"error_{type(e).__name__}"
            health_data["healthy"] = False

        return health_data


# Singleton instance for application use
ghl_client = GHLClient()
