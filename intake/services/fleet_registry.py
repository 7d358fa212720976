from collections.abc import Iterable

from intake.config import FLEET_PLATES


class FleetRegistry:
    """Known vehicle plates, resolved once and treated as static."""

    def __init__(self, plates: Iterable[str] = FLEET_PLATES) -> None:
        self._plates = tuple(dict.fromkeys(p.strip() for p in plates if p and p.strip()))
        if not self._plates:
            raise ValueError("Fleet registry needs at least one vehicle plate")

    @property
    def plates(self) -> tuple[str, ...]:
        return self._plates

    def __contains__(self, plate: object) -> bool:
        return plate in self._plates

    def __len__(self) -> int:
        return len(self._plates)


fleet_registry = FleetRegistry()
