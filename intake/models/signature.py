from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Signer(str, Enum):
    PARAMEDIC = "paramedic"
    PHYSICIAN = "physician"
    PATIENT = "patient"


class SignatureState(str, Enum):
    EMPTY = "empty"
    DRAWN = "drawn"


class SignatureArtifact(BaseModel):
    """PNG raster of a captured signature, encoded as a data URL."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    signer: Signer
    status: Literal["signed"] = "signed"
    media_type: str = "image/png"
    width: int
    height: int
    stroke_count: int
    data_url: str


class NoSignature(BaseModel):
    """An unsigned slot. Not an error: the signer may not be present."""

    model_config = ConfigDict(frozen=True)

    signer: Signer
    status: Literal["unsigned"] = "unsigned"


SignatureResult = Annotated[SignatureArtifact | NoSignature, Field(discriminator="status")]


class StrokeCreate(BaseModel):
    points: list[tuple[float, float]] = Field(min_length=1)


class SignatureStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    signer: Signer
    state: SignatureState
    stroke_count: int
