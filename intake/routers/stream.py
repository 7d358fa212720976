import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from intake.services.encounter_registry import registry
from intake.services.event_bus import event_bus

logger = logging.getLogger(__name__)
router = APIRouter()

# Events after which the encounter is gone and the stream ends
TERMINAL_EVENTS = {"submitted", "closed"}


@router.websocket("/ws/encounters/{encounter_id}")
async def encounter_stream(websocket: WebSocket, encounter_id: str):
    """Live feed for one encounter: elapsed ticks, field and signature updates."""
    await websocket.accept()
    if encounter_id not in registry:
        await websocket.send_json(
            {"type": "error", "message": f"Encounter {encounter_id} not found"}
        )
        await websocket.close()
        return

    queue = event_bus.subscribe(encounter_id)
    state = registry.get(encounter_id).state()
    logger.info("Stream client connected to encounter %s", encounter_id)

    try:
        await websocket.send_json(
            {"type": "snapshot", "state": state.model_dump(mode="json", by_alias=True)}
        )
        while True:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=10.0)
            except asyncio.TimeoutError:
                event = {"type": "ping"}

            try:
                await websocket.send_json(event)
            except Exception:
                logger.debug("Failed to send event to stream client")
                break
            if event["type"] in TERMINAL_EVENTS:
                await websocket.close()
                break
    except WebSocketDisconnect:
        logger.info("Stream client disconnected from encounter %s", encounter_id)
    except asyncio.CancelledError:
        pass
    finally:
        event_bus.unsubscribe(encounter_id, queue)
