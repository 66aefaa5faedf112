"""HTTP client for the hosted auth API.

Stateless: every call takes the tokens it needs and returns parsed models.
Persisting a session is the job of ``SessionProvider``.
"""
import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from fastbreak.errors import AuthenticationError
from fastbreak.schemas.auth import AuthSession, Identity

logger = logging.getLogger(__name__)


class AuthClient:
    """Wraps ``/auth/v1`` endpoints of the hosted project."""

    def __init__(self, base_url: str, api_key: str, http_client: Optional[httpx.Client] = None) -> None:
        self._base = f"{base_url.rstrip('/')}/auth/v1"
        self._api_key = api_key
        self._http = http_client or httpx.Client()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
        access_token: Optional[str] = None,
    ) -> dict[str, Any]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {access_token or self._api_key}",
        }
        try:
            response = self._http.request(
                method, f"{self._base}{path}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning("Auth request %s %s failed: %s", method, path, exc)
            raise AuthenticationError("Authentication service is unavailable") from exc
        if response.status_code >= 400:
            raise AuthenticationError(_error_message(response), upstream_status=response.status_code)
        if not response.content:
            return {}
        return response.json()

    def get_user(self, access_token: str) -> Identity:
        return Identity.model_validate(self._request("GET", "/user", access_token=access_token))

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        body = self._request(
            "POST", "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return AuthSession.model_validate(body)

    def sign_up(
        self,
        email: str,
        password: str,
        data: Optional[dict[str, Any]] = None,
        redirect_to: Optional[str] = None,
    ) -> Optional[AuthSession]:
        """Register a user.

        Returns a session when the project auto-confirms, otherwise None and
        the user has to follow the confirmation e-mail first.
        """
        params = {"redirect_to": redirect_to} if redirect_to else None
        body = self._request(
            "POST", "/signup",
            params=params,
            json={"email": email, "password": password, "data": data or {}},
        )
        if body.get("access_token"):
            return AuthSession.model_validate(body)
        return None

    def authorize_url(self, provider: str, redirect_to: str, code_challenge: str) -> str:
        query = urlencode({
            "provider": provider,
            "redirect_to": redirect_to,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
        })
        return f"{self._base}/authorize?{query}"

    def exchange_code_for_session(self, auth_code: str, code_verifier: str) -> AuthSession:
        body = self._request(
            "POST", "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": auth_code, "code_verifier": code_verifier},
        )
        return AuthSession.model_validate(body)

    def refresh_session(self, refresh_token: str) -> AuthSession:
        body = self._request(
            "POST", "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return AuthSession.model_validate(body)

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", access_token=access_token)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Authentication failed ({response.status_code})"
    for key in ("error_description", "msg", "message", "error"):
        if isinstance(body, dict) and body.get(key):
            return str(body[key])
    return f"Authentication failed ({response.status_code})"
