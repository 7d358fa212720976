"""Encounter record schema.

Every field of the intake form is declared here together with the
before-validator that turns raw form input into its typed value. Validators
raise ``PydanticCustomError`` whose type is one of the ``ErrorCode`` values,
so a pydantic ``ValidationError`` already speaks the domain taxonomy.
"""

import re
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    ValidationInfo,
    computed_field,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from intake.config import FLEET_PLATES
from intake.services.glasgow import (
    GLASGOW_EYE_RANGE,
    GLASGOW_MOTOR_RANGE,
    GLASGOW_VERBAL_RANGE,
    glasgow_total,
)


class ErrorCode(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_ENUM_VALUE = "InvalidEnumValue"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_TYPE = "InvalidType"


class IdType(str, Enum):
    NATIONAL_ID = "CC"   # Cédula de ciudadanía
    FOREIGN_ID = "CE"    # Cédula de extranjería
    MINOR_ID = "TI"      # Tarjeta de identidad
    PASSPORT = "PP"


class ServiceType(str, Enum):
    EMERGENCY = "emergency"
    TRANSFER = "transfer"
    CONSULTATION = "consultation"


ID_TYPE_LABELS = {
    IdType.NATIONAL_ID: "National ID",
    IdType.FOREIGN_ID: "Foreign resident ID",
    IdType.MINOR_ID: "Minor ID",
    IdType.PASSPORT: "Passport",
}

SERVICE_TYPE_LABELS = {
    ServiceType.EMERGENCY: "Emergency",
    ServiceType.TRANSFER: "Transfer",
    ServiceType.CONSULTATION: "Consultation",
}

_DIGITS = re.compile(r"[0-9]+")


def _missing(label: str) -> PydanticCustomError:
    return PydanticCustomError(ErrorCode.MISSING_FIELD.value, "{label} is required", {"label": label})


def _invalid_type(label: str, expected: str) -> PydanticCustomError:
    return PydanticCustomError(
        ErrorCode.INVALID_TYPE.value,
        "{label} must be {expected}",
        {"label": label, "expected": expected},
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required_text(label: str) -> Callable[[Any], str]:
    def validate(value: Any) -> str:
        if _is_blank(value):
            raise _missing(label)
        if not isinstance(value, str):
            raise _invalid_type(label, "text")
        return value.strip()

    return validate


def _optional_text(label: str) -> Callable[[Any], str | None]:
    def validate(value: Any) -> str | None:
        if _is_blank(value):
            return None
        if not isinstance(value, str):
            raise _invalid_type(label, "text")
        return value

    return validate


def _optional_digits(label: str) -> Callable[[Any], str | None]:
    def validate(value: Any) -> str | None:
        if _is_blank(value):
            return None
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return str(value)
        if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
            return value.strip()
        raise _invalid_type(label, "a whole number")

    return validate


def _optional_decimal(label: str) -> Callable[[Any], Decimal | None]:
    def validate(value: Any) -> Decimal | None:
        if _is_blank(value):
            return None
        if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
            raise _invalid_type(label, "a decimal number")
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise _invalid_type(label, "a decimal number") from None
        if not number.is_finite():
            raise _invalid_type(label, "a decimal number")
        return number

    return validate


def _choice(label: str, enum_cls: type[Enum], aliases: dict[str, Enum] | None = None) -> Callable[[Any], Enum]:
    aliases = aliases or {}

    def validate(value: Any) -> Enum:
        if isinstance(value, enum_cls):
            return value
        if _is_blank(value):
            raise _missing(label)
        if isinstance(value, str):
            key = value.strip()
            try:
                return enum_cls(key)
            except ValueError:
                if key.lower() in aliases:
                    return aliases[key.lower()]
        raise PydanticCustomError(
            ErrorCode.INVALID_ENUM_VALUE.value,
            "{label} must be one of: {allowed}",
            {"label": label, "allowed": ", ".join(str(m.value) for m in enum_cls)},
        )

    return validate


def _sub_score(label: str, bounds: tuple[int, int]) -> Callable[[Any], int]:
    low, high = bounds

    def validate(value: Any) -> int:
        if _is_blank(value):
            raise _missing(label)
        if isinstance(value, bool):
            raise _invalid_type(label, "a whole number")
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise _invalid_type(label, "a whole number") from None
        elif isinstance(value, float):
            if not value.is_integer():
                raise _invalid_type(label, "a whole number")
            value = int(value)
        elif not isinstance(value, int):
            raise _invalid_type(label, "a whole number")
        if not low <= value <= high:
            raise PydanticCustomError(
                ErrorCode.OUT_OF_RANGE.value,
                "{label} must be between {low} and {high}",
                {"label": label, "low": low, "high": high},
            )
        return value

    return validate


GLASGOW_SUB_SCORES: dict[str, Callable[[Any], int]] = {
    "glasgow_eye": _sub_score("Glasgow eye response", GLASGOW_EYE_RANGE),
    "glasgow_verbal": _sub_score("Glasgow verbal response", GLASGOW_VERBAL_RANGE),
    "glasgow_motor": _sub_score("Glasgow motor response", GLASGOW_MOTOR_RANGE),
}


def _timestamp(value: Any) -> datetime:
    if _is_blank(value):
        raise _missing("Date and time")
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            pass
    raise _invalid_type("Date and time", "an ISO-8601 date-time")


def _fleet_plate(value: Any, info: ValidationInfo) -> str:
    plate = _required_text("Vehicle plate")(value)
    fleet: Iterable[str] | None = (info.context or {}).get("fleet")
    if fleet is None:
        fleet = FLEET_PLATES
    if plate not in fleet:
        raise PydanticCustomError(
            ErrorCode.INVALID_ENUM_VALUE.value,
            "Vehicle plate {plate} is not in the fleet",
            {"plate": plate},
        )
    return plate


_ID_TYPE_ALIASES = {
    "national-id": IdType.NATIONAL_ID,
    "foreign-id": IdType.FOREIGN_ID,
    "minor-id": IdType.MINOR_ID,
    "passport": IdType.PASSPORT,
}

class EncounterRecord(BaseModel):
    """A fully validated ambulance encounter.

    Built only through ``validate_encounter``; ``glasgow_total`` is computed
    from the three sub-scores on every access and cannot be set.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    timestamp: Annotated[datetime, BeforeValidator(_timestamp)]

    # Service
    attention_id: Annotated[str, BeforeValidator(_required_text("Attention ID"))]
    ambulance_id: Annotated[str, BeforeValidator(_required_text("Ambulance ID"))]
    vehicle_plate: Annotated[str, BeforeValidator(_fleet_plate)]

    # Patient
    patient_name: Annotated[str, BeforeValidator(_required_text("Patient name"))]
    id_type: Annotated[IdType, BeforeValidator(_choice("ID type", IdType, _ID_TYPE_ALIASES))]
    patient_id: Annotated[str, BeforeValidator(_required_text("Patient ID"))]
    service_type: Annotated[ServiceType, BeforeValidator(_choice("Service type", ServiceType))]
    service_address: Annotated[str, BeforeValidator(_required_text("Service address"))]
    location_detail: Annotated[str, BeforeValidator(_required_text("Location detail"))]
    destination_facility: Annotated[str, BeforeValidator(_required_text("Destination facility"))]

    # Narrative
    medical_history: Annotated[str | None, BeforeValidator(_optional_text("Medical history"))] = None
    physical_exam: Annotated[str | None, BeforeValidator(_optional_text("Physical exam"))] = None
    procedures_performed: Annotated[str | None, BeforeValidator(_optional_text("Procedures performed"))] = None

    # Vitals
    heart_rate: Annotated[str | None, BeforeValidator(_optional_digits("Heart rate"))] = None
    respiratory_rate: Annotated[str | None, BeforeValidator(_optional_digits("Respiratory rate"))] = None
    spo2: Annotated[str | None, BeforeValidator(_optional_digits("SpO2"))] = None
    blood_pressure: Annotated[str | None, BeforeValidator(_optional_text("Blood pressure"))] = None
    temperature: Annotated[Decimal | None, BeforeValidator(_optional_decimal("Temperature"))] = None

    # Glasgow coma scale
    glasgow_eye: Annotated[int, BeforeValidator(GLASGOW_SUB_SCORES["glasgow_eye"])]
    glasgow_verbal: Annotated[int, BeforeValidator(GLASGOW_SUB_SCORES["glasgow_verbal"])]
    glasgow_motor: Annotated[int, BeforeValidator(GLASGOW_SUB_SCORES["glasgow_motor"])]

    @computed_field(alias="glasgowTotal")  # type: ignore[prop-decorator]
    @property
    def glasgow_total(self) -> int:
        return glasgow_total(self.glasgow_eye, self.glasgow_verbal, self.glasgow_motor)


class FieldError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating a candidate record: a record or field errors."""

    model_config = ConfigDict(frozen=True)

    record: EncounterRecord | None = None
    errors: dict[str, FieldError] = {}

    @property
    def ok(self) -> bool:
        return self.record is not None and not self.errors
