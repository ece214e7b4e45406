import json

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from serenity.auth.dependencies import require_user_id
from serenity.services.events import get_change_feed

router = APIRouter()


@router.get("")
async def stream_events(user_id: str = Depends(require_user_id)):
    """Server-Sent Events: one `data:` line per library change for this user."""

    async def _stream():
        yield ": connected\n\n"
        async for event in get_change_feed().listen(user_id):
            yield f"event: {event['type']}\ndata: {json.dumps(event)}\n\n"

    return StreamingResponse(
        _stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
