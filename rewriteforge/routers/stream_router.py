# routers/stream_router.py

"""
Streaming Rewrite API Routes (text/event-stream)
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from rewriteforge.core.dependencies import ServiceContainer, get_services
from rewriteforge.core.exceptions import ValidationError
from rewriteforge.models.rewrite import Backend, Granularity, StreamRequest, Style
from rewriteforge.models.stream import StreamingOptions
from rewriteforge.services.streaming_service import sse_frames
from rewriteforge.utils.validate import parse_delay, validate_request, validate_stream_options

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rewrite", tags=["Streaming"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _streaming_options(request: StreamRequest, default_delay: int, max_delay: int) -> StreamingOptions:
    delay = request.delay if request.delay is not None else default_delay
    validate_stream_options(request.granularity, delay, max_delay).raise_if_invalid()

    return StreamingOptions(
        granularity=Granularity(request.granularity or Granularity.WORD.value),
        delay=parse_delay(delay),
        include_metadata=bool(request.include_metadata)
    )


@router.post("/stream")
async def stream_rewrite(request: StreamRequest, services: ServiceContainer = Depends(get_services)):
    """Stream a rewrite from any backend"""
    settings = services.settings
    validate_request(request.llm, request.text, request.style, settings.max_text_length).raise_if_invalid()
    options = _streaming_options(request, settings.stream_default_delay_ms, settings.stream_max_delay_ms)

    style = Style(request.style or settings.default_style)
    backend = Backend(request.llm or settings.default_backend)
    logger.info(f"POST /rewrite/stream - backend={backend.value}, granularity={options.granularity.value}")

    events = services.streaming.stream(request.text, style, backend, options)
    return StreamingResponse(sse_frames(events), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/stream/mock")
async def stream_mock_rewrite(request: StreamRequest, services: ServiceContainer = Depends(get_services)):
    """Stream a rewrite from the local mock backend with a simulated warm-up"""
    settings = services.settings
    if not isinstance(request.text, str) or not request.text.strip():
        raise ValidationError("Text is required and must be a non-empty string")
    validate_request(None, request.text, request.style, settings.max_text_length).raise_if_invalid()
    options = _streaming_options(request, settings.stream_mock_delay_ms, settings.stream_max_delay_ms)

    style = Style(request.style or settings.default_style)
    logger.info(f"POST /rewrite/stream/mock - granularity={options.granularity.value}")

    events = services.streaming.stream(
        request.text, style, Backend.LOCALMOC, options, warmup_ms=settings.mock_warmup_ms
    )
    return StreamingResponse(sse_frames(events), media_type="text/event-stream", headers=SSE_HEADERS)
