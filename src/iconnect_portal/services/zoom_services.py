"""Zoom server-to-server OAuth client.

The access token is memoised in a ZoomTokenCache owned by the client
instance. The application creates one client at startup and hands it to
routes through ``app.state``; nothing here is a module-level singleton.
"""
import logging
import time
from typing import Callable
import requests
from iconnect_portal import config

_logger = logging.getLogger(__name__)

ZOOM_OAUTH_URL = "https://zoom.us/oauth/token"
ZOOM_API_BASE = "https://api.zoom.us/v2"


class ZoomConfigurationError(RuntimeError):
    pass


class ZoomAPIError(RuntimeError):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


class ZoomTokenCache:
    """Holds one (token, expires_at) pair and refreshes it shortly before expiry."""

    def __init__(self, fetch_token: Callable[[], tuple[str, int]],
                 clock: Callable[[], float] = time.time,
                 refresh_margin: int = config.ZOOM_TOKEN_REFRESH_MARGIN):
        self._fetch_token = fetch_token
        self._clock = clock
        self._refresh_margin = refresh_margin
        self.token = None
        self.expires_at = 0.0

    def get_token(self) -> str:
        if self.token and self._clock() < self.expires_at - self._refresh_margin:
            return self.token

        token, expires_in = self._fetch_token()
        self.token = token
        self.expires_at = self._clock() + expires_in
        return token


class ZoomClient:

    def __init__(self, account_id, client_id, client_secret, session=None, clock=time.time):
        self.account_id = account_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.http = session or requests.Session()
        self.token_cache = ZoomTokenCache(self._request_token, clock=clock)

    @classmethod
    def from_config(cls):
        return cls(config.ZOOM_ACCOUNT_ID, config.ZOOM_CLIENT_ID, config.ZOOM_CLIENT_SECRET)

    @property
    def configured(self) -> bool:
        return bool(self.account_id and self.client_id and self.client_secret)

    def _request_token(self):
        if not self.configured:
            raise ZoomConfigurationError("Zoom credentials not configured")

        response = self.http.post(
            ZOOM_OAUTH_URL,
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "account_credentials", "account_id": self.account_id},
            timeout=10,
        )
        if not response.ok:
            _logger.error(f"Zoom token error: {response.status_code} - {response.text}")
            raise ZoomAPIError(f"Failed to get Zoom access token: {response.status_code}",
                               response.status_code)

        data = response.json()
        return data["access_token"], int(data.get("expires_in", 3600))

    def _get(self, path, params=None):
        response = self.http.get(
            f"{ZOOM_API_BASE}{path}",
            headers={"Authorization": f"Bearer {self.token_cache.get_token()}"},
            params=params,
            timeout=10,
        )
        if not response.ok:
            _logger.error(f"Zoom API error on {path}: {response.status_code} - {response.text}")
            raise ZoomAPIError(f"Zoom API request failed: {response.status_code}", response.status_code)
        return response.json()

    def list_users(self) -> list:
        return self._get("/users", params={"status": "active"}).get("users", [])

    def list_registrants(self, zoom_webinar_id) -> list:
        data = self._get(
            f"/webinars/{zoom_webinar_id}/registrants",
            params={"page_size": 300, "status": "approved"},
        )
        return data.get("registrants", [])
