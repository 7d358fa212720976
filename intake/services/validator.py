import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from intake.errors import UnknownFieldError
from intake.models.encounter import EncounterRecord, ErrorCode, FieldError, ValidationResult

logger = logging.getLogger(__name__)

FIELD_NAMES: tuple[str, ...] = tuple(EncounterRecord.model_fields)
REQUIRED_FIELDS: frozenset[str] = frozenset(
    name for name, info in EncounterRecord.model_fields.items() if info.is_required()
)
GLASGOW_FIELDS = ("glasgow_eye", "glasgow_verbal", "glasgow_motor")
DERIVED_FIELDS = ("glasgow_total",)

_NAME_LOOKUP: dict[str, str] = {}
for _name in FIELD_NAMES:
    _NAME_LOOKUP[_name] = _name
    _NAME_LOOKUP[to_camel(_name)] = _name

_DERIVED_LOOKUP = {alias for name in DERIVED_FIELDS for alias in (name, to_camel(name))}

_TAXONOMY = {code.value for code in ErrorCode}


def normalize_field_name(name: str) -> str:
    """Map a camelCase or snake_case field name to the record attribute."""
    if name in _DERIVED_LOOKUP:
        raise UnknownFieldError(name, "derived field cannot be set")
    try:
        return _NAME_LOOKUP[name]
    except (KeyError, TypeError):
        raise UnknownFieldError(name) from None


def normalize_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise TypeError(f"Encounter input must be a mapping, got {type(raw).__name__}")
    return {normalize_field_name(key): value for key, value in raw.items()}


def _field_error(error: dict) -> FieldError:
    error_type = error["type"]
    if error_type in _TAXONOMY:
        code = ErrorCode(error_type)
    elif error_type == "missing":
        code = ErrorCode.MISSING_FIELD
    else:
        code = ErrorCode.INVALID_TYPE
    message = error["msg"] if error_type != "missing" else "This field is required"
    return FieldError(code=code, message=message)


def validate_encounter(raw: Mapping[str, Any], *, fleet: Iterable[str] | None = None) -> ValidationResult:
    """Validate a full or partial encounter.

    Returns the typed record when every field passes, otherwise a mapping of
    field name to its first error. User input never raises; unknown field
    names raise ``UnknownFieldError``.
    """
    data = normalize_fields(raw)
    context = {"fleet": frozenset(fleet)} if fleet is not None else None
    try:
        record = EncounterRecord.model_validate(data, context=context)
    except ValidationError as exc:
        errors: dict[str, FieldError] = {}
        for error in exc.errors():
            loc = str(error["loc"][0]) if error["loc"] else "__root__"
            field = _NAME_LOOKUP.get(loc, loc)
            errors.setdefault(field, _field_error(error))
        logger.debug("Encounter validation failed for fields: %s", ", ".join(sorted(errors)))
        return ValidationResult(errors=errors)
    return ValidationResult(record=record)
