"""Run side effects whose store failure must not fail the caller."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError

from authcore.services._shared.errors import StoreUnavailableError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def best_effort(action: Callable[[], T], *, event: str, **context: object) -> T | None:
    """
    Run ``action`` and drop store failures.

    Only :class:`StoreUnavailableError` and SQLAlchemy errors are swallowed;
    they are logged at WARNING with ``event`` and ``context``. Every other
    exception propagates.

    :param action: Zero-argument callable performing the side effect.
    :param event: Structured event name for the log record.
    :returns: The action's result, or ``None`` when the store failed.
    """
    try:
        return action()
    except (StoreUnavailableError, SQLAlchemyError) as exc:
        logger.warning(
            "Best-effort side effect failed: %s",
            type(exc).__name__,
            extra={"event": event, **context},
        )
        return None
