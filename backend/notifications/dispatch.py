"""Queue notification tasks once the surrounding transaction commits."""

from __future__ import annotations

import logging

from django.db import transaction

logger = logging.getLogger(__name__)


def _enqueue(task, args: tuple, kwargs: dict) -> None:
    try:
        task.delay(*args, **kwargs)
    except Exception:
        logger.info(
            "notifications: could not queue %s",
            getattr(task, "name", task),
            exc_info=True,
        )


def queue_after_commit(task, *args, **kwargs) -> None:
    """Run ``task.delay(*args, **kwargs)`` after the current transaction commits.

    Outside a transaction the task is queued immediately. Enqueue failures are
    logged and never reach the caller.
    """
    transaction.on_commit(lambda: _enqueue(task, args, kwargs), robust=True)
