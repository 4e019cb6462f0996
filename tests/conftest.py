import httpx
import pytest

from realty.app.app import RealtyApp
from realty.app.env_loader import Settings
from realty.store.persistent import InMemoryStore

from tests._factories import (
    BASE_URL,
    FakeBackend,
    PrincipalFactory,
    PropertyRecordFactory,
    RecordingNotifier,
)


class AccidentalNetworkAccessError(Exception):
    """Raised when a unit test accidentally tries to reach a real server."""

    pass


def _refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture(autouse=True)
def prevent_real_network_access(monkeypatch):
    """Fail fast if a test builds a client without an in-process transport.

    Every test talks either to the FakeBackend or to a refusing transport;
    anything that reaches httpx's default transport is a test bug.
    """

    async def _raise(*args, **kwargs):
        raise AccidentalNetworkAccessError(
            "Unit test attempted a real network request! Build the app with "
            "`transport=` (see the online_app / offline_app fixtures)."
        )

    monkeypatch.setattr(
        "httpx.AsyncHTTPTransport.handle_async_request", _raise
    )
    yield


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, timeout=5.0)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def online_transport(fake_backend: FakeBackend) -> httpx.AsyncBaseTransport:
    return httpx.ASGITransport(app=fake_backend.app)


@pytest.fixture
def offline_transport() -> httpx.AsyncBaseTransport:
    return httpx.MockTransport(_refuse_connection)


@pytest.fixture
def online_app(settings, store, notifier, online_transport) -> RealtyApp:
    return RealtyApp.build(
        settings=settings, store=store, notifier=notifier, transport=online_transport
    )


@pytest.fixture
def offline_app(settings, store, notifier, offline_transport) -> RealtyApp:
    return RealtyApp.build(
        settings=settings, store=store, notifier=notifier, transport=offline_transport
    )


@pytest.fixture(scope="session")
def principal_factory() -> PrincipalFactory:
    return PrincipalFactory()


@pytest.fixture
def property_factory() -> PropertyRecordFactory:
    return PropertyRecordFactory()
