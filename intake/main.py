import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from intake.config import LOG_LEVEL
from intake.routers import encounters, options, stream
from intake.services.encounter_registry import registry

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting ambulance intake...")
    yield
    registry.close_all()
    logger.info("Ambulance intake shut down")


app = FastAPI(
    title="Ambulance Intake",
    description="Pre-hospital encounter intake: validation, Glasgow scoring, signatures",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(options.router)
app.include_router(encounters.router)
app.include_router(stream.router)
