"""WHOOP mobile-backend API adapter.

Wraps the undocumented endpoints the WHOOP iOS app talks to. Handles the
Cognito password login, keeps the bearer token fresh, and re-authenticates
once when a data request comes back 401.
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Union
from urllib.parse import urlparse

import httpx

from whoop_cli.core.config import Settings, get_settings, local_timezone_name
from whoop_cli.observability import get_metrics_backend

logger = logging.getLogger(__name__)

TOKEN_REFRESH_MARGIN = timedelta(minutes=5)
BODY_EXCERPT_LIMIT = 300

DateLike = Union[date, str]


class WhoopAdapterError(Exception):
    """Base exception for WHOOP adapter errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body_excerpt: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_excerpt = body_excerpt


class AuthenticationError(WhoopAdapterError):
    """Login failed or returned no usable token."""

    pass


class ApiError(WhoopAdapterError):
    """Data request failed after the permitted re-authentication."""

    pass


@dataclass(frozen=True)
class TokenData:
    """Bearer token and its absolute expiry (UTC)."""

    access_token: str
    expires_at: datetime

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at - TOKEN_REFRESH_MARGIN


def body_excerpt(text: str) -> str:
    """Whitespace-collapsed first 300 characters of a response body."""
    compact = re.sub(r"\s+", " ", text.strip())
    return compact[:BODY_EXCERPT_LIMIT]


def _format_error(prefix: str, response: httpx.Response, excerpt: str) -> str:
    message = f"{prefix}: {response.status_code} {response.reason_phrase}"
    if excerpt:
        message += f" | body: {excerpt}"
    return message


def _format_date(day: DateLike) -> str:
    if isinstance(day, date):
        return day.strftime("%Y-%m-%d")
    return day


class WhoopAdapter:
    """Authenticated client for the WHOOP mobile API.

    One instance serves one account. The token is owned by the instance;
    concurrent callers that need a fresh token share a single login attempt.
    """

    PROVIDER = "whoop"
    LOGIN_PATH = "/auth-service/v3/whoop"

    def __init__(
        self,
        email: str,
        password: str,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            email: WHOOP account email.
            password: WHOOP account password.
            settings: Settings override (defaults to cached settings).
            transport: Optional httpx transport, used by tests.
        """
        self._email = email
        self._password = password
        self.settings = settings or get_settings()
        self.base_url = self.settings.whoop_api_base_url.rstrip("/")
        self._host = urlparse(self.base_url).netloc
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._token: Optional[TokenData] = None
        self._login_task: Optional[asyncio.Task] = None
        self._metrics = get_metrics_backend()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "WhoopAdapter":
        """Build an adapter from WHOOP_EMAIL / WHOOP_PASSWORD."""
        settings = settings or get_settings()
        email, password = settings.require_credentials()
        return cls(email, password, settings=settings)

    @property
    def token(self) -> Optional[TokenData]:
        """Current token, if logged in."""
        return self._token

    async def __aenter__(self) -> "WhoopAdapter":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.settings.whoop_http_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # ==================== Authentication ====================

    async def login(self) -> TokenData:
        """Log in, sharing one attempt between concurrent callers.

        Returns:
            The new token.

        Raises:
            AuthenticationError: If the login request fails.
        """
        if self._login_task is None:
            self._login_task = asyncio.ensure_future(self._run_login())
        # Shielded: a cancelled waiter must not cancel the shared attempt
        return await asyncio.shield(self._login_task)

    async def _run_login(self) -> TokenData:
        try:
            return await self._perform_login()
        finally:
            self._login_task = None

    async def _perform_login(self) -> TokenData:
        client = await self._get_client()
        start_time = time.perf_counter()
        status_code = 0
        try:
            response = await client.post(
                f"{self.base_url}{self.LOGIN_PATH}",
                headers={
                    "Host": self._host,
                    "Accept": "*/*",
                    "Content-Type": "application/x-amz-json-1.1",
                    "X-Amz-Target": "AWSCognitoIdentityProviderService.InitiateAuth",
                },
                json={
                    "AuthParameters": {
                        "USERNAME": self._email,
                        "PASSWORD": self._password,
                    },
                    "ClientId": self.settings.whoop_client_id,
                    "AuthFlow": "USER_PASSWORD_AUTH",
                },
            )
            status_code = response.status_code
        finally:
            self._observe_api_call("login", status_code, start_time)

        if not response.is_success:
            excerpt = body_excerpt(response.text)
            logger.error(f"WHOOP login failed with status {response.status_code}")
            raise AuthenticationError(
                _format_error("Login failed", response, excerpt),
                status_code=response.status_code,
                body_excerpt=excerpt,
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        auth = data.get("AuthenticationResult") if isinstance(data, dict) else None
        access_token = auth.get("AccessToken") if isinstance(auth, dict) else None
        expires_in = auth.get("ExpiresIn") if isinstance(auth, dict) else None
        if (
            not isinstance(access_token, str)
            or not access_token
            or isinstance(expires_in, bool)
            or not isinstance(expires_in, (int, float))
        ):
            raise AuthenticationError(
                "Login failed: authentication token not present in response",
                status_code=response.status_code,
            )

        self._token = TokenData(
            access_token=access_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
        logger.info(f"Logged in to WHOOP, token valid until {self._token.expires_at.isoformat()}")
        return self._token

    async def ensure_valid_token(self) -> None:
        """Log in when there is no token or it expires within 5 minutes."""
        if self._token is None or not self._token.is_usable():
            await self.login()

    # ==================== Requests ====================

    async def _get_headers(self) -> dict[str, str]:
        await self.ensure_valid_token()
        if self._token is None:
            raise AuthenticationError("No access token available")

        return {
            "Host": self._host,
            "Authorization": f"Bearer {self._token.access_token}",
            "Accept": "*/*",
            "User-Agent": "iOS",
            "Content-Type": "application/json",
            "X-WHOOP-Device-Platform": "iOS",
            "X-WHOOP-Time-Zone": local_timezone_name(self.settings),
            "Locale": self.settings.whoop_locale,
            "Currency": self.settings.whoop_currency,
        }

    async def get(self, path: str) -> Any:
        """Authorized GET returning the decoded JSON body.

        A 401 triggers one re-login (skipped when a concurrent caller already
        rotated the token) and one retry.

        Raises:
            ApiError: On any other failure or a second failed attempt.
        """
        client = await self._get_client()
        operation = path.split("?", 1)[0]
        retried = False

        while True:
            headers = await self._get_headers()
            request_token = headers["Authorization"][len("Bearer "):]

            start_time = time.perf_counter()
            status_code = 0
            try:
                response = await client.get(f"{self.base_url}{path}", headers=headers)
                status_code = response.status_code
            finally:
                self._observe_api_call(operation, status_code, start_time)

            if response.is_success:
                try:
                    return response.json()
                except ValueError as e:
                    raise ApiError(
                        f"Whoop API error: {response.status_code} response body is not valid JSON",
                        status_code=response.status_code,
                        body_excerpt=body_excerpt(response.text),
                    ) from e

            if response.status_code == 401 and not retried:
                retried = True
                if self._token is not None and self._token.access_token == request_token:
                    logger.info(f"Token rejected on {operation}, logging in again")
                    await self.login()
                else:
                    logger.debug(f"Token already rotated, retrying {operation}")
                continue

            excerpt = body_excerpt(response.text)
            logger.error(f"WHOOP API request {operation} failed with status {response.status_code}")
            raise ApiError(
                _format_error("Whoop API error", response, excerpt),
                status_code=response.status_code,
                body_excerpt=excerpt,
            )

    # ==================== Endpoints ====================

    async def get_home(self, day: DateLike) -> Any:
        """Home overview for a day."""
        return await self.get(f"/home-service/v1/home?date={_format_date(day)}")

    async def get_sleep(self, day: DateLike) -> Any:
        """Sleep deep dive."""
        return await self.get(f"/home-service/v1/deep-dive/sleep?date={_format_date(day)}")

    async def get_sleep_last_night(self, day: DateLike) -> Any:
        """Last-night sleep detail (stages, bed/wake times)."""
        return await self.get(
            f"/home-service/v1/deep-dive/sleep/last-night?date={_format_date(day)}"
        )

    async def get_strain(self, day: DateLike) -> Any:
        """Strain deep dive (activities)."""
        return await self.get(f"/home-service/v1/deep-dive/strain?date={_format_date(day)}")

    async def get_healthspan(self, day: DateLike) -> Any:
        """Healthspan (WHOOP age, pace of aging)."""
        return await self.get(f"/healthspan-service/v1/healthspan/bff?date={_format_date(day)}")

    def _observe_api_call(self, operation: str, status_code: int, start_time: float) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        self._metrics.observe_external_api(self.PROVIDER, operation, status_code, duration_ms)
