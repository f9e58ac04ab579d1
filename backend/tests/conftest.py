import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from frutico.core.context import AppContext
from frutico.database import build_engine, build_session_factory
from frutico.main import app
from frutico.models.base import BaseModel
from frutico.utils.background_tasks import TaskRegistry

from webhook_helpers import FakeMailer, make_settings


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    BaseModel.metadata.create_all(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def alerts():
    return []


def install_context(session_factory, mailer, alerts, **settings_overrides) -> AppContext:
    ctx = AppContext(
        settings=make_settings(**settings_overrides),
        engine=None,
        session_factory=session_factory,
        mailer=mailer,
        tasks=TaskRegistry(alert_hook=alerts.append),
    )
    app.state.context = ctx
    return ctx


@pytest.fixture
def context(session_factory, mailer, alerts):
    ctx = install_context(session_factory, mailer, alerts)
    yield ctx
    app.state.context = None
