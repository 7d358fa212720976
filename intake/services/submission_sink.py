"""Storage/transport boundary for submitted encounters."""

import logging
from collections import deque
from collections.abc import Awaitable
from typing import Protocol

from intake.config import OUTBOX_MAX_ITEMS
from intake.models.submission import SubmissionPayload

logger = logging.getLogger(__name__)


class SubmissionSink(Protocol):
    """Receives one payload per successful submit.

    ``deliver`` may return None or an awaitable; acknowledgement and retries
    are the sink's business.
    """

    def deliver(self, payload: SubmissionPayload) -> Awaitable[None] | None: ...


class OutboxSink:
    """Keeps the most recent payloads in memory for the downstream transport."""

    def __init__(self, max_items: int = OUTBOX_MAX_ITEMS) -> None:
        self._items: deque[SubmissionPayload] = deque(maxlen=max_items)

    def deliver(self, payload: SubmissionPayload) -> None:
        self._items.append(payload)
        signed = sum(1 for s in payload.signatures().values() if s.status == "signed")
        logger.info(
            "Encounter %s queued for delivery (GCS %d, %d/3 signatures)",
            payload.encounter_id,
            payload.glasgow_total,
            signed,
        )

    @property
    def items(self) -> tuple[SubmissionPayload, ...]:
        return tuple(self._items)

    def get(self, encounter_id: str) -> SubmissionPayload | None:
        for payload in reversed(self._items):
            if payload.encounter_id == encounter_id:
                return payload
        return None

    def __len__(self) -> int:
        return len(self._items)


outbox = OutboxSink()
