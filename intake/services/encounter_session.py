import logging
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from intake.config import ELAPSED_TICK_SECONDS
from intake.errors import EncounterClosedError
from intake.models.encounter import GLASGOW_SUB_SCORES, ValidationResult
from intake.models.session import EncounterState
from intake.models.signature import Signer
from intake.services.elapsed_timer import ElapsedTimeTracker, utc_now
from intake.services.fleet_registry import FleetRegistry, fleet_registry
from intake.services.glasgow import classify_glasgow, glasgow_total
from intake.services.signature_pad import SignatureSession
from intake.services.validator import GLASGOW_FIELDS, normalize_fields, validate_encounter

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, dict], None]


def live_glasgow_total(values: Mapping[str, Any]) -> int | None:
    """Total of the current sub-scores, or None while any of them is invalid."""
    scores = []
    for field in GLASGOW_FIELDS:
        try:
            scores.append(GLASGOW_SUB_SCORES[field](values.get(field)))
        except PydanticCustomError:
            return None
    return glasgow_total(*scores)


class EncounterSession:
    """Form state for one encounter, from open to submit or teardown.

    Every edit revalidates the full record; writes to a Glasgow sub-score
    recompute the total in the same call.
    """

    def __init__(
        self,
        encounter_id: str | None = None,
        *,
        fleet: FleetRegistry | None = None,
        clock: Callable[[], datetime] = utc_now,
        tick_interval: float = ELAPSED_TICK_SECONDS,
        on_event: EventCallback | None = None,
    ) -> None:
        self.id = encounter_id or str(uuid.uuid4())
        self.fleet = fleet or fleet_registry
        self.opened_at = clock()
        self._on_event = on_event
        self._values: dict[str, Any] = {
            "timestamp": self.opened_at,
            "glasgow_eye": 1,
            "glasgow_verbal": 1,
            "glasgow_motor": 1,
        }
        self.tracker = ElapsedTimeTracker(
            self.opened_at,
            interval=tick_interval,
            clock=clock,
            on_tick=self._on_tick,
        )
        self.signatures = {signer: SignatureSession(signer) for signer in Signer}
        self.closed = False
        self._glasgow_total = live_glasgow_total(self._values)
        self.validation = self.validate()

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def glasgow_total(self) -> int | None:
        return self._glasgow_total

    @property
    def elapsed(self) -> str:
        return self.tracker.current()

    def validate(self) -> ValidationResult:
        return validate_encounter(self._values, fleet=self.fleet.plates)

    def set_field(self, name: str, value: Any) -> ValidationResult:
        return self.update({name: value})

    def update(self, changes: Mapping[str, Any]) -> ValidationResult:
        """Apply field edits and return the fresh validation result."""
        self._ensure_open()
        normalized = normalize_fields(changes)
        self._values.update(normalized)
        if any(field in normalized for field in GLASGOW_FIELDS):
            self._glasgow_total = live_glasgow_total(self._values)
        self.validation = self.validate()
        self._emit({
            "type": "fields_updated",
            "fields": sorted(to_camel(f) for f in normalized),
            "glasgow_total": self._glasgow_total,
            "errors": {to_camel(k): v.model_dump(mode="json") for k, v in self.validation.errors.items()},
        })
        return self.validation

    def signature(self, signer: Signer | str) -> SignatureSession:
        return self.signatures[Signer(signer)]

    def add_stroke(self, signer: Signer | str, points: Iterable[Sequence[float]]) -> SignatureSession:
        self._ensure_open()
        pad = self.signature(signer)
        pad.add_stroke(points)
        self._emit_signature(pad)
        return pad

    def clear_signature(self, signer: Signer | str) -> SignatureSession:
        self._ensure_open()
        pad = self.signature(signer)
        pad.clear()
        self._emit_signature(pad)
        return pad

    def open(self) -> None:
        self._ensure_open()
        self.tracker.start()
        logger.info("Encounter %s opened", self.id)

    def close(self) -> bool:
        """Tear down the encounter and release its tick source."""
        if self.closed:
            return False
        self.closed = True
        self.tracker.cancel()
        logger.info("Encounter %s closed after %s", self.id, self.tracker.current())
        return True

    def state(self) -> EncounterState:
        total = self._glasgow_total
        return EncounterState(
            id=self.id,
            opened_at=self.opened_at,
            elapsed=self.elapsed,
            values={to_camel(k): v for k, v in self._values.items()},
            glasgow_total=total,
            glasgow_severity=classify_glasgow(total) if total is not None else None,
            errors={to_camel(k): v for k, v in self.validation.errors.items()},
            submittable=self.validation.ok,
            signatures=[pad.status() for pad in self.signatures.values()],
        )

    def _ensure_open(self) -> None:
        if self.closed:
            raise EncounterClosedError(f"Encounter {self.id} is closed")

    def _on_tick(self, value: str) -> None:
        self._emit({"type": "elapsed", "elapsed": value})

    def _emit_signature(self, pad: SignatureSession) -> None:
        self._emit({"type": "signature_updated", **pad.status().model_dump(mode="json", by_alias=True)})

    def _emit(self, event: dict) -> None:
        if self._on_event is not None:
            self._on_event(self.id, event)
