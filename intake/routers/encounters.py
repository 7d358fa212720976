import logging

from fastapi import APIRouter, HTTPException
from pydantic.alias_generators import to_camel

from intake.errors import EncounterClosedError, EncounterNotFoundError, SubmissionRejected, UnknownFieldError
from intake.models.session import EncounterState, FieldsUpdate
from intake.models.signature import SignatureResult, SignatureStatus, Signer, StrokeCreate
from intake.models.submission import SubmissionPayload
from intake.services.encounter_registry import registry
from intake.services.encounter_session import EncounterSession
from intake.services.event_bus import event_bus
from intake.services.submission import SubmissionAssembler
from intake.services.submission_sink import outbox

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/encounters", tags=["encounters"])

assembler = SubmissionAssembler(outbox)


def _get_session(encounter_id: str) -> EncounterSession:
    try:
        return registry.get(encounter_id)
    except EncounterNotFoundError:
        raise HTTPException(status_code=404, detail="Encounter not found") from None


@router.post("", response_model=EncounterState)
async def open_encounter():
    """Open a new encounter and start its elapsed-time counter."""
    session = registry.open()
    return session.state()


@router.get("/{encounter_id}", response_model=EncounterState)
async def get_encounter(encounter_id: str):
    return _get_session(encounter_id).state()


@router.patch("/{encounter_id}/fields", response_model=EncounterState)
async def update_fields(encounter_id: str, body: FieldsUpdate):
    """Apply field edits. The response carries the live validation feedback."""
    session = _get_session(encounter_id)
    try:
        session.update(body.fields)
    except UnknownFieldError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
    except EncounterClosedError:
        raise HTTPException(status_code=409, detail="Encounter is closed") from None
    return session.state()


@router.post("/{encounter_id}/signatures/{signer}", response_model=SignatureStatus)
async def add_signature_stroke(encounter_id: str, signer: Signer, body: StrokeCreate):
    session = _get_session(encounter_id)
    pad = session.add_stroke(signer, body.points)
    return pad.status()


@router.get("/{encounter_id}/signatures/{signer}", response_model=SignatureResult)
async def export_signature(encounter_id: str, signer: Signer):
    return _get_session(encounter_id).signature(signer).export_artifact()


@router.delete("/{encounter_id}/signatures/{signer}", response_model=SignatureStatus)
async def clear_signature(encounter_id: str, signer: Signer):
    session = _get_session(encounter_id)
    pad = session.clear_signature(signer)
    return pad.status()


@router.post("/{encounter_id}/submit", response_model=SubmissionPayload)
async def submit_encounter(encounter_id: str):
    """Validate, assemble and hand off the encounter, then close it."""
    session = _get_session(encounter_id)
    try:
        payload = assembler.submit(session)
    except SubmissionRejected as exc:
        errors = {to_camel(k): v.model_dump(mode="json") for k, v in exc.errors.items()}
        raise HTTPException(
            status_code=422,
            detail={"message": "Encounter has invalid fields", "errors": errors},
        ) from None

    event_bus.publish(encounter_id, {
        "type": "submitted",
        "glasgow_total": payload.glasgow_total,
        "elapsed": payload.elapsed,
    })
    registry.close(encounter_id)
    return payload


@router.delete("/{encounter_id}")
async def close_encounter(encounter_id: str):
    """Tear down an encounter without submitting it."""
    try:
        session = registry.close(encounter_id)
    except EncounterNotFoundError:
        raise HTTPException(status_code=404, detail="Encounter not found") from None
    event_bus.publish(encounter_id, {"type": "closed", "elapsed": session.elapsed})
    return {"id": encounter_id, "closed": True, "elapsed": session.elapsed}
