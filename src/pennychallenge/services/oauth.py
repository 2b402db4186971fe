from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import requests
from pydantic import ValidationError

from pennychallenge.config import AppSettings
from pennychallenge.domain.models import Credential
from pennychallenge.errors import AuthError, DecodeError, NetworkError

from .token_store import TokenStore

logger = logging.getLogger(__name__)


class MonzoOAuthClient:
    """Talks to the Monzo OAuth2 token endpoint. Never touches storage."""

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        base_url: str = "https://api.monzo.com",
        auth_base_url: str = "https://auth.monzo.com",
        redirect_uri: str = "http://localhost",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not client_id:
            msg = "client_id must be provided"
            raise ValueError(msg)
        if not client_secret:
            msg = "client_secret must be provided"
            raise ValueError(msg)

        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.auth_base_url = auth_base_url.rstrip("/")
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: AppSettings, *, session: requests.Session | None = None) -> MonzoOAuthClient:
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            base_url=settings.api_base_url,
            auth_base_url=settings.auth_base_url,
            redirect_uri=settings.redirect_uri,
            session=session,
        )

    def authorization_url(self) -> str:
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": "code",
            }
        )
        return f"{self.auth_base_url}/?{query}"

    def exchange_code(self, code: str) -> Credential:
        if not code:
            msg = "authorization code must be provided"
            raise ValueError(msg)
        return self._request_token(
            {
                "grant_type": "authorization_code",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "code": code,
            }
        )

    def refresh(self, refresh_token: str) -> Credential:
        return self._request_token(
            {
                "grant_type": "refresh_token",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
            }
        )

    def _request_token(self, form: dict[str, str]) -> Credential:
        url = f"{self.base_url}/oauth2/token"
        grant_type = form["grant_type"]
        try:
            response = self._session.request("POST", url, data=form, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"Token request ({grant_type}) failed") from exc

        if response.status_code != requests.codes.ok:
            raise AuthError(
                f"{response.status_code} status code when requesting token ({grant_type})",
                status_code=response.status_code,
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise DecodeError("Token endpoint returned invalid JSON", payload=response.text) from exc

        try:
            return Credential.model_validate(payload)
        except ValidationError as exc:
            # The payload holds secrets; keep it out of the error.
            raise DecodeError("Token endpoint returned unexpected payload") from exc


class TokenRefresher:
    """Exchanges the stored refresh token and persists the new pair before handing it out."""

    def __init__(self, *, oauth: MonzoOAuthClient, store: TokenStore) -> None:
        self.oauth = oauth
        self.store = store

    def refresh(self, current: Credential | None = None) -> Credential:
        credential = current if current is not None else self.store.load()
        refreshed = self.oauth.refresh(credential.refresh_token)
        self.store.save(refreshed)
        logger.info("Refreshed and stored access token")
        return refreshed


__all__ = ["MonzoOAuthClient", "TokenRefresher"]
