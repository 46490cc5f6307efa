"""Microsoft Graph wrapper for the app registrations behind AKS service principals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import structlog
from azure.core.credentials import TokenCredential

log = structlog.get_logger()

GRAPH_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"

DEFAULT_PASSWORD_DURATION = timedelta(days=730)


@dataclass
class AppRegistration:
    """An Azure AD application and, once generated, one of its client secrets."""

    app_id: str
    object_id: str
    display_name: str | None = None
    password: str | None = None


class GraphClient:
    """Minimal Microsoft Graph client for creating apps and rotating their passwords."""

    def __init__(self, credential: TokenCredential, http_client: httpx.Client | None = None) -> None:
        self._credential = credential
        self._http = http_client

    def _get_http_client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(base_url=GRAPH_URL, timeout=60.0)
        return self._http

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        token = self._credential.get_token(GRAPH_SCOPE).token
        response = self._get_http_client().request(
            method,
            path,
            json=json,
            headers={"Authorization": f"Bearer {token}"},
        )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            log.error("graph_request_failed", method=method, path=path, status=response.status_code)
            raise
        if not response.content:
            return {}
        return response.json()

    def create_app(self, display_name: str, password_duration: timedelta | None = None) -> AppRegistration:
        """Register a new application, create its service principal, and give it a password."""
        log.info("creating_app_registration", display_name=display_name)
        app = self._request("POST", "/applications", json={"displayName": display_name})
        self._request("POST", "/servicePrincipals", json={"appId": app["appId"]})
        registration = AppRegistration(app_id=app["appId"], object_id=app["id"], display_name=display_name)
        self.add_password(registration, duration=password_duration)
        return registration

    def get_app(self, app_id: str) -> AppRegistration:
        app = self._request("GET", f"/applications(appId='{app_id}')")
        return AppRegistration(app_id=app["appId"], object_id=app["id"], display_name=app.get("displayName"))

    def add_password(
        self,
        app: AppRegistration,
        name: str | None = None,
        duration: timedelta | None = None,
    ) -> str:
        """Add a client secret to an application and return it.

        The secret is also stored on ``app.password``. Defaults to a two-year lifetime.
        """
        end = datetime.now(tz=UTC) + (duration or DEFAULT_PASSWORD_DURATION)
        credential: dict[str, Any] = {"endDateTime": end.isoformat()}
        if name:
            credential["displayName"] = name
        result = self._request(
            "POST",
            f"/applications/{app.object_id}/addPassword",
            json={"passwordCredential": credential},
        )
        app.password = result["secretText"]
        log.info("app_password_added", app_id=app.app_id, expires=end.isoformat())
        return app.password
