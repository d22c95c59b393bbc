import asyncio
import time

import httpx
import structlog

from config.settings import GoogleAdsSettings
from core.infrastructure.http_client import http_request
from exceptions.custom_exceptions import (
    GoogleAPIException,
    GoogleAdsAuthException,
    GoogleAdsValidationException,
)

logger = structlog.get_logger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

# Refresh a minute early so in-flight calls never carry an expired token
TOKEN_EXPIRY_MARGIN_SECONDS = 60


class GoogleAdsClient:
    """Thin REST client for the Google Ads API bound to one set of credentials."""

    BASE_URL = "https://googleads.googleapis.com"

    def __init__(self, settings: GoogleAdsSettings) -> None:
        self.settings = settings
        self.customer_id = settings.customer_id
        self._access_token: str | None = None
        self._token_expiry: float = 0
        self._token_lock = asyncio.Lock()

    @property
    def api_root(self) -> str:
        return f"{self.BASE_URL}/{self.settings.api_version}"

    async def get(self, endpoint: str) -> dict:
        token = await self._get_access_token()
        response = await http_request(
            "GET",
            f"{self.api_root}/{endpoint}",
            headers=self._build_auth_headers(token),
            error_handler=_raise_google_error,
        )
        return response.json()

    async def search(self, query: str, customer_id: str | None = None) -> list:
        """Execute GAQL query via googleAds:search, following page tokens."""
        token = await self._get_access_token()
        url = f"{self.api_root}/customers/{customer_id or self.customer_id}/googleAds:search"

        results = []
        body = {"query": query}
        while True:
            response = await http_request(
                "POST",
                url,
                headers=self._build_auth_headers(token),
                json=body,
                error_handler=_raise_google_error,
                retry_delay_parser=_extract_retry_delay,
            )
            data = response.json()
            results.extend(data.get("results", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                return results
            body = {"query": query, "pageToken": page_token}

    async def mutate(
        self,
        service: str,
        operations: list[dict],
        customer_id: str | None = None,
    ) -> list[dict]:
        """POST operations to customers/{id}/{service}:mutate and return its results."""
        token = await self._get_access_token()
        url = f"{self.api_root}/customers/{customer_id or self.customer_id}/{service}:mutate"
        response = await http_request(
            "POST",
            url,
            headers=self._build_auth_headers(token),
            json={"operations": operations, "partialFailure": False},
            error_handler=_raise_google_error,
            retry_delay_parser=_extract_retry_delay,
        )
        results = response.json().get("results", [])
        logger.debug("Mutate succeeded", service=service, count=len(results))
        return results

    async def _get_access_token(self) -> str:
        async with self._token_lock:
            if self._access_token and time.time() < self._token_expiry:
                return self._access_token

            try:
                response = await http_request(
                    "POST",
                    GOOGLE_TOKEN_URL,
                    data={
                        "grant_type": "refresh_token",
                        "refresh_token": self.settings.refresh_token,
                        "client_id": self.settings.client_id,
                        "client_secret": self.settings.client_secret,
                    },
                )
            except httpx.HTTPStatusError as e:
                error_body = e.response.text
                logger.error(
                    "OAuth token refresh failed",
                    component="google-auth",
                    status=e.response.status_code,
                    error=error_body,
                )
                raise GoogleAdsAuthException(
                    message="Google OAuth token refresh failed. Check GOOGLE_ADS_REFRESH_TOKEN, CLIENT_ID, and CLIENT_SECRET in .env",
                    details={"status": e.response.status_code, "error": error_body},
                )

            token_data = response.json()
            self._access_token = token_data["access_token"]
            self._token_expiry = (
                time.time() + token_data.get("expires_in", 3600) - TOKEN_EXPIRY_MARGIN_SECONDS
            )
            logger.info("Google OAuth token refreshed", component="google-auth")
            return self._access_token

    def _build_auth_headers(self, access_token: str) -> dict:
        if not self.settings.developer_token or not access_token:
            raise GoogleAPIException(
                message="Missing Google Ads credentials",
                details={
                    "has_developer_token": bool(self.settings.developer_token),
                    "has_access_token": bool(access_token),
                },
            )
        headers = {
            "Authorization": f"Bearer {access_token}",
            "developer-token": self.settings.developer_token,
            "Content-Type": "application/json",
        }
        if self.settings.login_customer_id:
            headers["login-customer-id"] = self.settings.login_customer_id
        return headers


def _raise_google_error(response: httpx.Response) -> None:
    """Parse Google Ads API error response and raise structured exception."""
    error_message = f"Google Ads API failed: {response.status_code}"
    error_context = {"status_code": response.status_code}

    try:
        error_payload = response.json().get("error", {})
        if error_payload:
            error_message = error_payload.get("message", error_message)

            # First detail carries the GoogleAdsFailure
            details_list = error_payload.get("details", [])
            if details_list and isinstance(details_list, list):
                failure_info = details_list[0]
                errors = failure_info.get("errors", [])
                error_context["errors"] = errors
                if errors and errors[0].get("message"):
                    error_message = f"{error_message} ({errors[0]['message']})"
                if "requestId" in failure_info:
                    error_context["google_request_id"] = failure_info["requestId"]
    except (ValueError, AttributeError):
        error_context["response_text"] = response.text

    if response.status_code in (401, 403):
        raise GoogleAdsAuthException(
            message=f"Google Ads API authentication failed: {error_message}",
            details=error_context,
        )
    if response.status_code == 400:
        raise GoogleAdsValidationException(
            message=f"Google Ads API validation failed: {error_message}",
            details=error_context,
        )
    raise GoogleAPIException(
        message=f"{error_message}",
        details=error_context,
    )


def _extract_retry_delay(response: httpx.Response, default_delay: float) -> float:
    try:
        hint = (
            response.json()
            .get("error", {})
            .get("details", [{}])[0]
            .get("quotaErrorDetails", {})
            .get("retryDelay")
        )
        if hint:
            return float(hint.rstrip("s"))
    except (KeyError, ValueError, IndexError, AttributeError):
        pass
    return default_delay
