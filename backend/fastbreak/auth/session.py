"""Session provider and the storages it keeps tokens in.

One ``SessionProvider`` serves every execution context; what differs is the
storage it is handed:

- ``RequestCookieStorage``: reads the incoming request's cookies, ignores
  writes (route guard, read-only handlers).
- ``ResponseCookieStorage``: reads the request, writes ``Set-Cookie`` headers
  on a given response (sign-in, callback, sign-out, mutations).
- ``MemoryStorage``: an in-process dict (scripts, tests).
"""
import base64
import hashlib
import logging
import secrets
from abc import ABC, abstractmethod
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from fastbreak.auth.client import AuthClient
from fastbreak.errors import AuthenticationError
from fastbreak.schemas.auth import AuthSession, Identity

logger = logging.getLogger(__name__)

_UNRESOLVED = object()


class SessionStorage(ABC):
    """Key/value home for session tokens."""

    writable = False

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryStorage(SessionStorage):
    writable = True

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class RequestCookieStorage(SessionStorage):
    def __init__(self, request: Request) -> None:
        self._cookies = request.cookies

    def get(self, key: str) -> Optional[str]:
        return self._cookies.get(key)

    def set(self, key: str, value: str) -> None:
        logger.debug("Ignoring write of %s in a read-only session context", key)

    def remove(self, key: str) -> None:
        logger.debug("Ignoring removal of %s in a read-only session context", key)


class ResponseCookieStorage(RequestCookieStorage):
    writable = True

    def __init__(
        self,
        request: Request,
        response: Response,
        *,
        max_age: Optional[int] = None,
        secure: bool = False,
    ) -> None:
        super().__init__(request)
        self._response = response
        self._max_age = max_age
        self._secure = secure
        # Values written during this request win over the incoming cookies
        self._pending: dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self._pending:
            return self._pending[key]
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        self._response.set_cookie(
            key,
            value,
            max_age=self._max_age,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )
        self._pending[key] = value

    def remove(self, key: str) -> None:
        self._response.delete_cookie(key, path="/")
        self._pending[key] = None


def _code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class SessionProvider:
    """Resolves and manages the caller's session through a ``SessionStorage``."""

    def __init__(self, client: AuthClient, storage: SessionStorage, cookie_prefix: str = "sb") -> None:
        self._client = client
        self._storage = storage
        self.access_key = f"{cookie_prefix}-access-token"
        self.refresh_key = f"{cookie_prefix}-refresh-token"
        self.verifier_key = f"{cookie_prefix}-code-verifier"
        self._user = _UNRESOLVED

    @property
    def access_token(self) -> Optional[str]:
        return self._storage.get(self.access_key)

    def _persist(self, session: AuthSession) -> None:
        self._user = session.user if session.user is not None else _UNRESOLVED
        self._storage.set(self.access_key, session.access_token)
        if session.refresh_token:
            self._storage.set(self.refresh_key, session.refresh_token)

    def _clear(self) -> None:
        self._user = None
        self._storage.remove(self.access_key)
        self._storage.remove(self.refresh_key)

    def get_current_user(self) -> Optional[Identity]:
        """Return the signed-in identity, or None when there is none or it cannot be resolved.

        The answer is cached for the lifetime of the provider (one request).
        """
        if self._user is _UNRESOLVED:
            self._user = self._resolve_user()
        return self._user

    def _resolve_user(self) -> Optional[Identity]:
        token = self.access_token
        if not token:
            return None
        try:
            return self._client.get_user(token)
        except AuthenticationError as exc:
            refresh_token = self._storage.get(self.refresh_key)
            if exc.upstream_status in (401, 403) and refresh_token:
                return self._refresh(refresh_token)
            logger.warning("Could not resolve session user: %s", exc.message)
            return None

    def _refresh(self, refresh_token: str) -> Optional[Identity]:
        try:
            session = self._client.refresh_session(refresh_token)
            user = session.user or self._client.get_user(session.access_token)
        except AuthenticationError as exc:
            logger.warning("Session refresh failed: %s", exc.message)
            self._clear()
            return None
        self._persist(session)
        logger.debug("Refreshed session for user %s", user.id)
        return user

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        session = self._client.sign_in_with_password(email, password)
        self._persist(session)
        logger.info("Password sign-in for user %s", session.user.id if session.user else "?")
        return session

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        redirect_to: Optional[str] = None,
    ) -> Optional[AuthSession]:
        data = {"full_name": full_name} if full_name else None
        session = self._client.sign_up(email, password, data=data, redirect_to=redirect_to)
        if session is not None:
            self._persist(session)
        return session

    def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        """Start a PKCE OAuth flow and return the provider redirect URL."""
        verifier = secrets.token_urlsafe(48)
        self._storage.set(self.verifier_key, verifier)
        return self._client.authorize_url(provider, redirect_to, _code_challenge(verifier))

    def exchange_code_for_session(self, code: str) -> AuthSession:
        verifier = self._storage.get(self.verifier_key)
        if not verifier:
            raise AuthenticationError("No pending sign-in for this authorization code")
        session = self._client.exchange_code_for_session(code, verifier)
        self._storage.remove(self.verifier_key)
        self._persist(session)
        logger.info("OAuth sign-in for user %s", session.user.id if session.user else "?")
        return session

    def sign_out(self) -> None:
        token = self.access_token
        try:
            if token:
                self._client.sign_out(token)
        finally:
            self._clear()
