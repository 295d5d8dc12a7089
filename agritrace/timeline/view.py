"""Batch view — loads a batch and its timeline as independent failure domains.

A failure to load the batch blocks the whole view (not-found or
unavailable state).  A failure to load the history after the batch has
loaded degrades the view instead: the batch is kept and the timeline is
marked unavailable.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from agritrace.core.errors import (
    GatewayUnavailable,
    NotFound,
    ValidationError,
)
from agritrace.core.service import BatchTraceabilityService
from agritrace.models.batch import Batch
from agritrace.timeline.presenter import TimelineEntry, present

logger = logging.getLogger(__name__)


class BatchViewState(str, Enum):
    """What the batch page can show."""

    LOADED = "loaded"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


class BatchView(BaseModel):
    """Everything needed to render one batch page."""

    model_config = ConfigDict(frozen=True)

    requested_id: str
    state: BatchViewState
    batch: Batch | None = None
    timeline: list[TimelineEntry] = []
    history_available: bool = False
    error: str | None = None

    @property
    def latest(self) -> TimelineEntry | None:
        return self.timeline[-1] if self.timeline else None


async def load_batch_view(service: BatchTraceabilityService, batch_id: Any) -> BatchView:
    """Load the batch, then its history, without letting the second discard the first."""
    requested = str(batch_id)
    try:
        batch = await service.get_batch(batch_id)
    except (ValidationError, NotFound) as exc:
        return BatchView(requested_id=requested, state=BatchViewState.NOT_FOUND, error=str(exc))
    except GatewayUnavailable as exc:
        return BatchView(requested_id=requested, state=BatchViewState.UNAVAILABLE, error=str(exc))
    except Exception as exc:
        logger.warning("Batch #%s could not be loaded: %s", requested, exc)
        return BatchView(requested_id=requested, state=BatchViewState.UNAVAILABLE, error=str(exc))

    try:
        events = await service.get_history(batch.batch_id)
    except Exception as exc:
        logger.warning("History unavailable for batch #%d: %s", batch.batch_id, exc)
        return BatchView(
            requested_id=requested,
            state=BatchViewState.LOADED,
            batch=batch,
            history_available=False,
            error=str(exc),
        )

    return BatchView(
        requested_id=requested,
        state=BatchViewState.LOADED,
        batch=batch,
        timeline=present(events),
        history_available=True,
    )
