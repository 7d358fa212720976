from fastapi import APIRouter

from intake.models.encounter import ID_TYPE_LABELS, SERVICE_TYPE_LABELS
from intake.models.session import FormOptions, OptionItem
from intake.services.fleet_registry import fleet_registry
from intake.services.glasgow import EYE_RESPONSES, MOTOR_RESPONSES, VERBAL_RESPONSES

router = APIRouter(prefix="/api/options", tags=["options"])


def _scale(responses: dict[int, str]) -> list[OptionItem]:
    return [OptionItem(value=score, label=f"{score} - {label}") for score, label in responses.items()]


@router.get("", response_model=FormOptions)
async def get_form_options():
    """Static option catalogs for the intake form selects."""
    return FormOptions(
        id_types=[OptionItem(value=k.value, label=v) for k, v in ID_TYPE_LABELS.items()],
        service_types=[OptionItem(value=k.value, label=v) for k, v in SERVICE_TYPE_LABELS.items()],
        vehicle_plates=list(fleet_registry.plates),
        glasgow_eye=_scale(EYE_RESPONSES),
        glasgow_verbal=_scale(VERBAL_RESPONSES),
        glasgow_motor=_scale(MOTOR_RESPONSES),
    )
