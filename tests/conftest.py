"""Global pytest fixtures for the portal onboarding service."""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any, Callable

import pytest
from flask import Flask

# Ensure the ``backend`` package is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "backend"))

from portal import create_app  # noqa: E402
from portal.core.extensions import REGISTRY_KEY  # noqa: E402
from portal.services._shared.ports import (  # noqa: E402
    CollectingNotifier,
    InMemorySessionStore,
    ManualScheduler,
    RecordingNavigator,
    StubPaymentProcessor,
    StubPortalBackend,
)
from portal.services.onboarding.flow import OnboardingFlow  # noqa: E402
from portal.services.onboarding.registry import FlowRegistry  # noqa: E402
from portal.services.session.service import SessionContext  # noqa: E402

from tests.factories.onboarding import ProductRecordFactory  # noqa: E402


@pytest.fixture(scope="session")
def app() -> Generator[Flask, None, None]:
    """Create and configure a Flask application for tests.

    Returns
    -------
    Generator[Flask, None, None]
        Configured Flask application instance.
    """

    os.environ.setdefault("APP_ENV", "testing")
    application = create_app("testing")
    with application.app_context():
        yield application


@pytest.fixture()
def client(app: Flask) -> Generator[Any, None, None]:
    """Return a Flask test client."""

    return app.test_client()


# --------------------------------------------------------------------------- #
# Onboarding collaborators
# --------------------------------------------------------------------------- #


@pytest.fixture()
def backend() -> StubPortalBackend:
    """Scriptable upstream with product ``5`` in the catalog."""

    product = ProductRecordFactory(ProductId=5, PricePerUserMonthly="499")
    return StubPortalBackend(products=[product])


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def processor() -> StubPaymentProcessor:
    return StubPaymentProcessor()


@pytest.fixture()
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture()
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture()
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def session_context(session_store: InMemorySessionStore) -> SessionContext:
    return SessionContext(session_store)


@pytest.fixture()
def flow(
    backend: StubPortalBackend,
    scheduler: ManualScheduler,
    processor: StubPaymentProcessor,
    notifier: CollectingNotifier,
    navigator: RecordingNavigator,
    session_context: SessionContext,
) -> OnboardingFlow:
    """An onboarding flow wired to in-memory collaborators, catalog loaded."""

    flow = OnboardingFlow(
        flow_id="flow-1",
        backend=backend,
        session=session_context,
        notifier=notifier,
        navigator=navigator,
        scheduler=scheduler,
        processor=processor,
        poll_interval=60.0,
        redirect_delay=3.0,
    )
    flow.load_catalog()
    return flow


@pytest.fixture()
def session_stores() -> dict[str, InMemorySessionStore]:
    """Session stores of the swapped registry, keyed by session id."""

    return {}


@pytest.fixture()
def registry(
    app: Flask,
    session_stores: dict[str, InMemorySessionStore],
    backend: StubPortalBackend,
    scheduler: ManualScheduler,
    processor: StubPaymentProcessor,
) -> Generator[FlowRegistry, None, None]:
    """Swap the app's flow registry for one backed by in-memory collaborators."""

    replacement = FlowRegistry(
        backend=backend,
        scheduler=scheduler,
        processor=processor,
        session_store_factory=lambda sid: session_stores.setdefault(sid, InMemorySessionStore()),
        poll_interval=60.0,
        redirect_delay=3.0,
    )
    original = app.extensions[REGISTRY_KEY]
    app.extensions[REGISTRY_KEY] = replacement
    try:
        yield replacement
    finally:
        replacement.close_all()
        app.extensions[REGISTRY_KEY] = original


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory
