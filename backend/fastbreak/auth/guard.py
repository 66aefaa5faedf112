"""Route guard: decides allow / redirect for page requests from session state.

The decision is a pure function of the path and whether an identity
resolved; it never touches event data.
"""
import enum
import logging

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/", "/login", "/signup", "/auth/callback"})
AUTH_ONLY_PATHS = frozenset({"/login", "/signup"})


class GuardDecision(str, enum.Enum):
    allow = "allow"
    redirect_to_landing = "redirect_to_landing"
    redirect_to_dashboard = "redirect_to_dashboard"


class GuardRedirect(Exception):
    """Raised by the guard dependency; rendered as a redirect response."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


def _normalize(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path.rstrip("/")
    return path


def evaluate(
    path: str,
    authenticated: bool,
    public_paths: frozenset[str] = PUBLIC_PATHS,
    auth_only_paths: frozenset[str] = AUTH_ONLY_PATHS,
) -> GuardDecision:
    path = _normalize(path)
    if not authenticated and path not in public_paths:
        return GuardDecision.redirect_to_landing
    if authenticated and path in auth_only_paths:
        return GuardDecision.redirect_to_dashboard
    return GuardDecision.allow
