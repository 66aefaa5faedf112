"""Pytest fixtures: SQLite database and an in-memory hosted auth service."""
import uuid
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from fastbreak.database import Base, get_db, register_sqlite_functions
from fastbreak.dependencies import get_auth_client
from fastbreak.errors import AuthenticationError
from fastbreak.main import app
from fastbreak.schemas.auth import AuthSession, Identity

# Import all models so they register with Base.metadata
from fastbreak.models.event import Event  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
ACCESS_COOKIE = "sb-access-token"


class FakeAuthClient:
    """Stand-in for AuthClient: access tokens map straight to identities."""

    def __init__(self):
        self.tokens: dict[str, Identity] = {}
        self.accounts: dict[str, tuple[str, Identity]] = {}
        self.codes: dict[str, Identity] = {}
        self.refresh_tokens: dict[str, Identity] = {}
        self.signed_out: list[str] = []

    def add_user(self, email: str, password: str = "secret123", full_name: str | None = None) -> Identity:
        identity = Identity(
            id=str(uuid.uuid4()),
            email=email,
            user_metadata={"full_name": full_name} if full_name else {},
        )
        self.accounts[email] = (password, identity)
        return identity

    def issue_token(self, identity: Identity) -> str:
        token = f"access-{uuid.uuid4()}"
        self.tokens[token] = identity
        return token

    def issue_refresh_token(self, identity: Identity) -> str:
        token = f"refresh-{uuid.uuid4()}"
        self.refresh_tokens[token] = identity
        return token

    def _session(self, identity: Identity) -> AuthSession:
        return AuthSession(
            access_token=self.issue_token(identity),
            refresh_token=self.issue_refresh_token(identity),
            expires_in=3600,
            user=identity,
        )

    def get_user(self, access_token: str) -> Identity:
        if access_token not in self.tokens:
            raise AuthenticationError("invalid JWT", upstream_status=401)
        return self.tokens[access_token]

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthenticationError("Invalid login credentials", upstream_status=400)
        return self._session(account[1])

    def sign_up(self, email, password, data=None, redirect_to=None):
        if email in self.accounts:
            raise AuthenticationError("User already registered", upstream_status=422)
        self.add_user(email, password, (data or {}).get("full_name"))
        return None

    def authorize_url(self, provider: str, redirect_to: str, code_challenge: str) -> str:
        return (
            f"https://auth.test/authorize?provider={provider}"
            f"&redirect_to={redirect_to}&code_challenge={code_challenge}"
        )

    def exchange_code_for_session(self, auth_code: str, code_verifier: str) -> AuthSession:
        identity = self.codes.pop(auth_code, None)
        if identity is None:
            raise AuthenticationError("invalid flow state", upstream_status=400)
        return self._session(identity)

    def refresh_session(self, refresh_token: str) -> AuthSession:
        # Refresh tokens are single-use
        identity = self.refresh_tokens.pop(refresh_token, None)
        if identity is None:
            raise AuthenticationError("refresh_token_not_found", upstream_status=400)
        return self._session(identity)

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)
        self.tokens.pop(access_token, None)


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency; Unicode-aware lower()
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()
        register_sqlite_functions(dbapi_conn)

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def auth():
    return FakeAuthClient()


@pytest.fixture(scope="function")
def client(db_engine, auth):
    """FastAPI TestClient with the database and auth client overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_auth_client] = lambda: auth
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def alice(auth) -> Identity:
    return auth.add_user("alice@example.com", full_name="Alice Adams")


@pytest.fixture
def bob(auth) -> Identity:
    return auth.add_user("bob@example.com")


@pytest.fixture
def sign_in(client, auth):
    """Return a helper that makes ``client`` act as the given identity (None signs out)."""

    def _sign_in(identity: Identity | None) -> None:
        if identity is None:
            client.cookies.delete(ACCESS_COOKIE)
        else:
            client.cookies.set(ACCESS_COOKIE, auth.issue_token(identity))

    return _sign_in
