from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from intake.models.encounter import EncounterRecord
from intake.models.signature import SignatureResult, Signer


class SubmissionPayload(BaseModel):
    """Immutable hand-off: validated record, Glasgow total and three signatures."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    encounter_id: str
    record: EncounterRecord
    glasgow_total: int
    paramedic_signature: SignatureResult
    physician_signature: SignatureResult
    patient_signature: SignatureResult
    elapsed: str
    submitted_at: datetime

    @model_validator(mode="after")
    def _total_matches_record(self):
        if self.glasgow_total != self.record.glasgow_total:
            raise ValueError("glasgow_total must equal the sum of the record's sub-scores")
        return self

    def signatures(self) -> dict[Signer, SignatureResult]:
        return {
            Signer.PARAMEDIC: self.paramedic_signature,
            Signer.PHYSICIAN: self.physician_signature,
            Signer.PATIENT: self.patient_signature,
        }
