import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import datetime

from intake.errors import GlasgowMismatchError, SubmissionRejected
from intake.models.signature import Signer
from intake.models.submission import SubmissionPayload
from intake.services.elapsed_timer import utc_now
from intake.services.encounter_session import EncounterSession
from intake.services.glasgow import glasgow_total
from intake.services.submission_sink import SubmissionSink

logger = logging.getLogger(__name__)


class SubmissionAssembler:
    """Builds the submission payload and hands it to the sink.

    Never retries and never persists. An invalid record aborts before any
    payload exists.
    """

    def __init__(
        self,
        sink: SubmissionSink | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._sink = sink
        self._clock = clock
        self._pending: set[asyncio.Future] = set()

    def assemble(self, session: EncounterSession) -> SubmissionPayload:
        result = session.validate()
        if not result.ok:
            logger.info(
                "Submission for encounter %s rejected: %s",
                session.id,
                ", ".join(sorted(result.errors)),
            )
            raise SubmissionRejected(result.errors)

        record = result.record
        recomputed = glasgow_total(record.glasgow_eye, record.glasgow_verbal, record.glasgow_motor)
        if session.glasgow_total != recomputed:
            raise GlasgowMismatchError(session.glasgow_total, recomputed)

        return SubmissionPayload(
            encounter_id=session.id,
            record=record,
            glasgow_total=recomputed,
            paramedic_signature=session.signature(Signer.PARAMEDIC).export_artifact(),
            physician_signature=session.signature(Signer.PHYSICIAN).export_artifact(),
            patient_signature=session.signature(Signer.PATIENT).export_artifact(),
            elapsed=session.elapsed,
            submitted_at=self._clock(),
        )

    def submit(self, session: EncounterSession) -> SubmissionPayload:
        payload = self.assemble(session)
        self._hand_off(payload)
        return payload

    def _hand_off(self, payload: SubmissionPayload) -> None:
        if self._sink is None:
            logger.warning("No submission sink configured; encounter %s not delivered", payload.encounter_id)
            return
        result = self._sink.deliver(payload)
        if inspect.isawaitable(result):
            # Fire and forget: keep a reference until the sink finishes.
            future = asyncio.ensure_future(result)
            self._pending.add(future)
            future.add_done_callback(self._delivery_done)

    def _delivery_done(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Submission sink failed: %s", exc)
