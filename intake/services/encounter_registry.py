import logging

from intake.config import ELAPSED_TICK_SECONDS
from intake.errors import EncounterNotFoundError
from intake.services.encounter_session import EncounterSession
from intake.services.event_bus import EncounterEventBus, event_bus
from intake.services.fleet_registry import FleetRegistry, fleet_registry

logger = logging.getLogger(__name__)


class EncounterRegistry:
    """Open encounters of this process, keyed by id."""

    def __init__(
        self,
        bus: EncounterEventBus = event_bus,
        fleet: FleetRegistry = fleet_registry,
        tick_interval: float | None = None,
    ) -> None:
        self._bus = bus
        self._fleet = fleet
        self.tick_interval = tick_interval
        self._sessions: dict[str, EncounterSession] = {}

    def open(self) -> EncounterSession:
        """Create an encounter and start its elapsed-time tracker.

        Must be called from within the running event loop.
        """
        session = EncounterSession(
            fleet=self._fleet,
            tick_interval=self.tick_interval or ELAPSED_TICK_SECONDS,
            on_event=self._bus.publish,
        )
        session.open()
        self._sessions[session.id] = session
        return session

    def get(self, encounter_id: str) -> EncounterSession:
        try:
            return self._sessions[encounter_id]
        except KeyError:
            raise EncounterNotFoundError(encounter_id) from None

    def close(self, encounter_id: str) -> EncounterSession:
        session = self._sessions.pop(encounter_id, None)
        if session is None:
            raise EncounterNotFoundError(encounter_id)
        session.close()
        return session

    def close_all(self) -> None:
        for encounter_id in list(self._sessions):
            self.close(encounter_id)
        logger.info("All open encounters closed")

    def __contains__(self, encounter_id: object) -> bool:
        return encounter_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


registry = EncounterRegistry()
