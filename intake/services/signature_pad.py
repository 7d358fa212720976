import base64
import io
import logging
from collections.abc import Iterable, Sequence

from PIL import Image, ImageDraw

from intake.config import SIGNATURE_CANVAS_HEIGHT, SIGNATURE_CANVAS_WIDTH, SIGNATURE_PEN_WIDTH
from intake.models.signature import (
    NoSignature,
    SignatureArtifact,
    SignatureState,
    SignatureStatus,
    Signer,
)

logger = logging.getLogger(__name__)

Point = tuple[float, float]


class SignatureSession:
    """Capture state for one signer: EMPTY -> DRAWN -> EMPTY on clear."""

    def __init__(
        self,
        signer: Signer,
        *,
        width: int = SIGNATURE_CANVAS_WIDTH,
        height: int = SIGNATURE_CANVAS_HEIGHT,
        pen_width: int = SIGNATURE_PEN_WIDTH,
    ) -> None:
        self.signer = signer
        self.width = width
        self.height = height
        self.pen_width = pen_width
        self._strokes: list[list[Point]] = []

    @property
    def state(self) -> SignatureState:
        return SignatureState.DRAWN if self._strokes else SignatureState.EMPTY

    @property
    def strokes(self) -> list[list[Point]]:
        return [list(stroke) for stroke in self._strokes]

    def is_empty(self) -> bool:
        return not self._strokes

    def add_stroke(self, points: Iterable[Sequence[float]]) -> None:
        stroke = [(float(x), float(y)) for x, y in points]
        if not stroke:
            raise ValueError("A stroke needs at least one point")
        self._strokes.append(stroke)

    def clear(self) -> None:
        if self._strokes:
            logger.debug("Clearing %s signature (%d strokes)", self.signer.value, len(self._strokes))
        self._strokes = []

    def status(self) -> SignatureStatus:
        return SignatureStatus(signer=self.signer, state=self.state, stroke_count=len(self._strokes))

    def export_artifact(self) -> SignatureArtifact | NoSignature:
        if not self._strokes:
            return NoSignature(signer=self.signer)
        return SignatureArtifact(
            signer=self.signer,
            width=self.width,
            height=self.height,
            stroke_count=len(self._strokes),
            data_url=_to_data_url(self._render()),
        )

    def _render(self) -> Image.Image:
        image = Image.new("RGBA", (self.width, self.height), (255, 255, 255, 0))
        draw = ImageDraw.Draw(image)
        radius = max(self.pen_width / 2, 1)
        for stroke in self._strokes:
            if len(stroke) == 1:
                x, y = stroke[0]
                draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill="black")
            else:
                draw.line(stroke, fill="black", width=self.pen_width, joint="curve")
        return image


def _to_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
