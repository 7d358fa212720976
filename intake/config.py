import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Fleet registry: comma-separated plates of the vehicles in service
_DEFAULT_FLEET = ",".join(f"AMB-{n:03d}" for n in range(1, 11))
FLEET_PLATES = tuple(
    plate.strip()
    for plate in os.getenv("FLEET_PLATES", _DEFAULT_FLEET).split(",")
    if plate.strip()
)

# Elapsed-time counter cadence
ELAPSED_TICK_SECONDS = float(os.getenv("ELAPSED_TICK_SECONDS", "1"))

# Signature pad raster
SIGNATURE_CANVAS_WIDTH = int(os.getenv("SIGNATURE_CANVAS_WIDTH", "600"))
SIGNATURE_CANVAS_HEIGHT = int(os.getenv("SIGNATURE_CANVAS_HEIGHT", "160"))
SIGNATURE_PEN_WIDTH = int(os.getenv("SIGNATURE_PEN_WIDTH", "2"))

# How many delivered submissions the in-memory outbox keeps around
OUTBOX_MAX_ITEMS = int(os.getenv("OUTBOX_MAX_ITEMS", "100"))

# Per-subscriber backlog of the live event stream; a stalled client drops events past this
EVENT_QUEUE_MAX_SIZE = int(os.getenv("EVENT_QUEUE_MAX_SIZE", "256"))
