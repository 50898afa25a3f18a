"""
UPS OAuth 2.0 Token Manager

Acquires, caches and refreshes client-credentials bearer tokens for one
UPS carrier instance.

- The cache is an instance field; tokens are never shared across carriers
- A cached token is reused until refresh_buffer_seconds before it expires
- Refresh builds a new OAuthToken; the previous one is never mutated
- An asyncio.Lock serializes check-then-acquire so concurrent callers
  trigger at most one in-flight token request
- Every failure at this step surfaces as AuthError
"""
import asyncio
import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import httpx

from shiprates.core.exceptions import AuthError
from shiprates.core.utils import mask_secret, sanitize_for_logging, utcnow

logger = logging.getLogger(__name__)

OAUTH_TOKEN_PATH = "/security/v1/oauth/token"

DEFAULT_REFRESH_BUFFER_SECONDS = 60

# Used when the token endpoint omits expires_in
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


@dataclass(frozen=True)
class OAuthToken:
    """OAuth 2.0 access token as issued by the carrier."""
    access_token: str
    token_type: str
    expires_in: int  # seconds
    issued_at: datetime

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + timedelta(seconds=self.expires_in)

    def is_valid(self, now: datetime, refresh_buffer_seconds: float = 0) -> bool:
        """True while now + buffer is still before nominal expiry."""
        return now + timedelta(seconds=refresh_buffer_seconds) < self.expires_at


class UPSAuth:
    """
    Manages the UPS OAuth 2.0 token lifecycle.

    States: no token, or a cached OAuthToken.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_base_url: str,
        http_client: httpx.AsyncClient,
        timeout_seconds: float,
        refresh_buffer_seconds: float = DEFAULT_REFRESH_BUFFER_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self._http_client = http_client
        self._clock = clock
        self._token: Optional[OAuthToken] = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Optional[OAuthToken]:
        """The cached token, if any."""
        return self._token

    def is_token_valid(self) -> bool:
        """Check whether the cached token can be used without refreshing."""
        if self._token is None:
            return False
        return self._token.is_valid(self._clock(), self.refresh_buffer_seconds)

    async def get_access_token(self) -> str:
        """Get a valid access token, acquiring or refreshing as needed."""
        async with self._lock:
            if self._token is not None and self.is_token_valid():
                return self._token.access_token

            token = await self.acquire_token()
            return token.access_token

    async def acquire_token(self) -> OAuthToken:
        """
        Request a new token from the UPS OAuth endpoint.

        Replaces the cached token on success.

        Raises:
            AuthError: non-2xx response, timeout, transport failure or a
                token body that cannot be parsed
        """
        url = f"{self.api_base_url}{OAUTH_TOKEN_PATH}"

        # Basic auth header
        auth_string = f"{self._client_id}:{self._client_secret}"
        auth_header = base64.b64encode(auth_string.encode()).decode()

        try:
            response = await asyncio.wait_for(
                self._http_client.post(
                    url,
                    headers={
                        "Authorization": f"Basic {auth_header}",
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                    data={"grant_type": "client_credentials"},
                    timeout=self.timeout_seconds,
                ),
                timeout=self.timeout_seconds,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"UPS OAuth request timed out after {self.timeout_seconds}s")
            raise AuthError("Token request timed out") from e
        except httpx.RequestError as e:
            logger.error(f"UPS OAuth request failed: {e}")
            raise AuthError(f"Failed to acquire token: {e}") from e

        if not response.is_success:
            logger.error(
                f"UPS OAuth failed: {response.status_code} - {sanitize_for_logging(response.text)}"
            )
            raise AuthError(
                f"Token request failed: {response.status_code} {self._error_description(response)}".rstrip(),
                status_code=response.status_code,
            )

        token = self._parse_token(response)
        self._token = token

        logger.info(
            f"UPS OAuth token obtained for client {mask_secret(self._client_id)}, "
            f"expires in {token.expires_in}s"
        )
        return token

    def clear_token(self) -> None:
        """Drop the cached token so the next call re-acquires."""
        self._token = None

    def _parse_token(self, response: httpx.Response) -> OAuthToken:
        try:
            data = response.json()
            access_token = data["access_token"]
            if not isinstance(access_token, str) or not access_token:
                raise ValueError("access_token must be a non-empty string")
            expires_in = int(data.get("expires_in", DEFAULT_TOKEN_LIFETIME_SECONDS))
            token_type = str(data.get("token_type") or "Bearer")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"UPS OAuth returned a malformed token body: {e}")
            raise AuthError(
                "Malformed token response",
                status_code=response.status_code,
            ) from e

        return OAuthToken(
            access_token=access_token,
            token_type=token_type,
            expires_in=expires_in,
            issued_at=self._clock(),
        )

    @staticmethod
    def _error_description(response: httpx.Response) -> str:
        """Best-effort extraction of the OAuth error description."""
        try:
            data = response.json()
        except ValueError:
            return sanitize_for_logging(response.text, max_length=200)

        if isinstance(data, dict):
            for key in ("error_description", "error", "message"):
                if data.get(key):
                    return str(data[key])
            errors = data.get("response", {}).get("errors") if isinstance(data.get("response"), dict) else None
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                return str(errors[0].get("message", ""))
        return ""
