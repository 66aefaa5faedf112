"""Request-scoped dependencies: auth client, session provider, identity, store, guard."""
import logging
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from fastbreak.auth.client import AuthClient
from fastbreak.auth.guard import GuardDecision, GuardRedirect, evaluate
from fastbreak.auth.session import ResponseCookieStorage, SessionProvider
from fastbreak.config import settings
from fastbreak.database import get_db
from fastbreak.schemas.auth import Identity
from fastbreak.stores.interfaces import EventStore
from fastbreak.stores.postgrest import PostgrestEventStore
from fastbreak.stores.sql_store import SqlEventStore

logger = logging.getLogger(__name__)


@lru_cache
def get_http_client() -> httpx.Client:
    """Shared connection pool for calls to the hosted project."""
    return httpx.Client()


def get_auth_client() -> AuthClient:
    return AuthClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, get_http_client())


def cookie_session(request: Request, response: Response, client: AuthClient) -> SessionProvider:
    """Session provider that writes its cookies onto ``response``."""
    storage = ResponseCookieStorage(
        request,
        response,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        secure=settings.AUTH_COOKIE_SECURE,
    )
    return SessionProvider(client, storage, cookie_prefix=settings.AUTH_COOKIE_PREFIX)


def get_session_provider(
    request: Request,
    response: Response,
    client: AuthClient = Depends(get_auth_client),
) -> SessionProvider:
    return cookie_session(request, response, client)


def get_optional_identity(
    sessions: SessionProvider = Depends(get_session_provider),
) -> Optional[Identity]:
    return sessions.get_current_user()


def get_event_store(
    db: Session = Depends(get_db),
    sessions: SessionProvider = Depends(get_session_provider),
) -> EventStore:
    if settings.STORE_BACKEND == "hosted":
        return PostgrestEventStore(
            get_http_client(),
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
            access_token=sessions.access_token,
        )
    return SqlEventStore(db)


def route_guard(
    request: Request,
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> None:
    """Redirect page requests that the current session may not see."""
    decision = evaluate(request.url.path, identity is not None)
    if decision is GuardDecision.redirect_to_landing:
        logger.debug("Guard: anonymous request to %s sent to landing", request.url.path)
        raise GuardRedirect(settings.LANDING_PATH)
    if decision is GuardDecision.redirect_to_dashboard:
        raise GuardRedirect(settings.DASHBOARD_PATH)
