"""Page routes: sign-in flows and the dashboard document.

Every route here runs behind ``route_guard``. Pages answer with JSON or a
303 redirect; rendering is left to the client.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from fastbreak.auth.client import AuthClient
from fastbreak.auth.session import SessionProvider
from fastbreak.config import settings
from fastbreak.dependencies import (
    cookie_session,
    get_auth_client,
    get_event_store,
    get_optional_identity,
    get_session_provider,
    route_guard,
)
from fastbreak.errors import AuthenticationError, ValidationError
from fastbreak.schemas.auth import AuthOptionsOut, Identity, PasswordSignIn, SignUpRequest
from fastbreak.schemas.event import DashboardEventOut, DashboardOut
from fastbreak.services.query_composer import list_events
from fastbreak.sports import sport_options
from fastbreak.stores.interfaces import EventStore
from fastbreak.timezones import is_valid_timezone, to_local

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(route_guard)])

CALLBACK_PATH = "/auth/callback"


def _redirect(location: Optional[str] = None) -> Response:
    response = Response(status_code=status.HTTP_303_SEE_OTHER)
    if location:
        response.headers["location"] = location
    return response


def _callback_url() -> str:
    return f"{settings.SITE_URL.rstrip('/')}{CALLBACK_PATH}"


@router.get("/")
def landing():
    return {
        "name": "Fastbreak Events",
        "login": settings.LOGIN_PATH,
        "signup": "/signup",
    }


@router.get("/login", response_model=None)
def login_options(
    request: Request,
    provider: Optional[str] = Query(None, description="Start an OAuth sign-in with this provider"),
    client: AuthClient = Depends(get_auth_client),
):
    """Describe the sign-in methods, or redirect to an OAuth provider."""
    if provider is None:
        return AuthOptionsOut(oauth_providers=settings.oauth_providers)
    if provider not in settings.oauth_providers:
        raise HTTPException(status_code=400, detail=f"Unsupported sign-in provider '{provider}'")

    response = _redirect()
    sessions = cookie_session(request, response, client)
    response.headers["location"] = sessions.sign_in_with_oauth(provider, _callback_url())
    return response


@router.post("/login")
def login(request: Request, payload: PasswordSignIn, client: AuthClient = Depends(get_auth_client)):
    """Password sign-in; sets session cookies and goes to the dashboard."""
    response = _redirect(settings.DASHBOARD_PATH)
    cookie_session(request, response, client).sign_in_with_password(payload.email, payload.password)
    return response


@router.get("/signup", response_model=AuthOptionsOut)
def signup_options():
    return AuthOptionsOut(oauth_providers=settings.oauth_providers)


@router.post("/signup")
def signup(request: Request, payload: SignUpRequest, client: AuthClient = Depends(get_auth_client)):
    """Register; auto-confirmed projects land on the dashboard, others on login."""
    response = _redirect()
    session = cookie_session(request, response, client).sign_up(
        payload.email, payload.password, full_name=payload.full_name
    )
    if session is None:
        logger.info("Sign-up for %s awaits e-mail confirmation", payload.email)
    response.headers["location"] = settings.DASHBOARD_PATH if session else settings.LOGIN_PATH
    return response


@router.get(CALLBACK_PATH)
def auth_callback(
    request: Request,
    code: Optional[str] = Query(None),
    client: AuthClient = Depends(get_auth_client),
):
    """Exchange a one-time OAuth code for a session, then always go to the dashboard."""
    response = _redirect(settings.DASHBOARD_PATH)
    if code:
        try:
            cookie_session(request, response, client).exchange_code_for_session(code)
        except AuthenticationError as exc:
            logger.warning("OAuth code exchange failed: %s", exc.message)
    return response


@router.post("/logout")
def logout(request: Request, client: AuthClient = Depends(get_auth_client)):
    response = _redirect(settings.LANDING_PATH)
    try:
        cookie_session(request, response, client).sign_out()
    except AuthenticationError as exc:
        # Local cookies are already cleared
        logger.warning("Remote sign-out failed: %s", exc.message)
    return response


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    search: str = Query(""),
    sport: str = Query(""),
    tz: Optional[str] = Query(None, description="IANA zone for local_date"),
    identity: Optional[Identity] = Depends(get_optional_identity),
    store: EventStore = Depends(get_event_store),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """Greeting, sport filter choices and the filtered event list."""
    if tz is not None and not is_valid_timezone(tz):
        raise ValidationError([f"tz: Unknown timezone '{tz}'"])

    listing = list_events(store, sessions, search, sport, require_auth=settings.READS_REQUIRE_AUTH)
    rows = []
    for row in listing.events:
        item = DashboardEventOut.model_validate(row)
        item.is_owner = item.user_id == listing.current_user_id
        if tz:
            item.local_date = to_local(item.date, tz)
        rows.append(item)

    return DashboardOut(
        display_name=identity.display_name if identity else "User",
        current_user_id=listing.current_user_id,
        search=search,
        sport=sport,
        sports=sport_options(),
        events=rows,
    )
