"""Domain exceptions raised by the intake services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from intake.models.encounter import FieldError


class UnknownFieldError(KeyError):
    """A field name that the encounter schema does not declare.

    Raised for programmer misuse only, never for user input. Setting the
    derived ``glasgow_total`` also lands here.
    """

    def __init__(self, name: str, reason: str = "unknown encounter field") -> None:
        super().__init__(name)
        self.name = name
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.reason}: {self.name!r}"


class EncounterNotFoundError(LookupError):
    def __init__(self, encounter_id: str) -> None:
        super().__init__(f"Encounter {encounter_id} not found")
        self.encounter_id = encounter_id


class EncounterClosedError(RuntimeError):
    """The encounter was torn down and no longer accepts edits."""


class SubmissionRejected(Exception):
    """Submit aborted because the record failed validation."""

    def __init__(self, errors: dict[str, FieldError]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(f"Submission rejected, invalid fields: {fields}")
        self.errors = errors


class GlasgowMismatchError(RuntimeError):
    """The recomputed Glasgow total disagrees with the live value."""

    def __init__(self, live: int | None, recomputed: int) -> None:
        super().__init__(f"Live Glasgow total {live} does not match recomputed {recomputed}")
        self.live = live
        self.recomputed = recomputed
