from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from intake.models.encounter import FieldError
from intake.models.signature import SignatureStatus


class EncounterState(BaseModel):
    """Live view of an open encounter: raw values plus validation feedback."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    opened_at: datetime
    elapsed: str
    values: dict[str, Any]
    glasgow_total: int | None = None
    glasgow_severity: str | None = None
    errors: dict[str, FieldError] = {}
    submittable: bool
    signatures: list[SignatureStatus]


class FieldsUpdate(BaseModel):
    fields: dict[str, Any]


class OptionItem(BaseModel):
    value: str | int
    label: str


class FormOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id_types: list[OptionItem]
    service_types: list[OptionItem]
    vehicle_plates: list[str]
    glasgow_eye: list[OptionItem]
    glasgow_verbal: list[OptionItem]
    glasgow_motor: list[OptionItem]
