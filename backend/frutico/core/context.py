"""Process-scoped collaborators created once at startup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..database import build_engine, build_session_factory
from ..services.ticket_fulfillment import Mailer
from ..utils.background_tasks import FailedTask, TaskRegistry
from ..utils.email import SmtpMailer
from .config import Settings

logger = logging.getLogger(__name__)


def log_fulfillment_alert(failure: FailedTask) -> None:
    """Default alert sink: an ERROR line that log-based alerting can match."""
    logger.error(
        "ALERT ticket not delivered task=%s context=%s error=%s",
        failure.name,
        failure.context,
        failure.error,
    )


@dataclass
class AppContext:
    settings: Settings
    engine: Optional[Engine]
    session_factory: sessionmaker
    mailer: Mailer
    tasks: TaskRegistry

    async def aclose(self) -> None:
        """Drain in-flight tasks, then release the connection pool."""
        await self.tasks.drain(timeout=self.settings.FULFILLMENT_DRAIN_TIMEOUT)
        if self.engine is not None:
            self.engine.dispose()


def build_context(settings: Settings) -> AppContext:
    engine = build_engine(settings.SQLALCHEMY_DATABASE_URL)
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        mailer=SmtpMailer(settings),
        tasks=TaskRegistry(alert_hook=log_fulfillment_alert),
    )
