# services/streaming_service.py

"""
Streaming service - turns a rewrite into an ordered stream of events
"""

import asyncio
import logging
import re
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, List

from rewriteforge.backends.base import RewriteBackend
from rewriteforge.core.exceptions import RewriteError
from rewriteforge.models.rewrite import Backend, Granularity, Style
from rewriteforge.models.stream import StreamEvent, StreamEventType, StreamingOptions
from rewriteforge.services.cache_service import make_cache_key
from rewriteforge.services.rewrite_service import RewriteService

logger = logging.getLogger(__name__)

SENTENCE_BREAK = re.compile(r"[.!?]+")


def split_text(text: str, granularity: Granularity) -> List[str]:
    """Split resolved text into chunks; empty and whitespace-only pieces are dropped"""
    granularity = Granularity(granularity)
    if granularity == Granularity.WORD:
        return text.split()
    if granularity == Granularity.CHARACTER:
        return [char for char in text if char.strip()]
    return [sentence for sentence in SENTENCE_BREAK.split(text) if sentence.strip()]


def _event(event_type: StreamEventType, data: Dict[str, Any]) -> StreamEvent:
    return StreamEvent(type=event_type, data=data)


async def sse_frames(events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    """Render events as text/event-stream frames"""
    async with aclosing(events):
        async for event in events:
            yield event.to_sse()


class StreamingService:
    """
    Drives one streaming channel per call to `stream`.

    Providers that stream natively are relayed delta by delta, or replayed
    character by character from their cache. Other backends are resolved in
    full and replayed in chunks of the requested granularity. The channel
    always ends with exactly one `complete` or `error` event. A consumer that
    stops iterating closes the generator and no further work happens.
    """

    def __init__(self, rewrite_service: RewriteService, cached_replay_delay_ms: int = 10):
        self.rewrite_service = rewrite_service
        self.cached_replay_delay_ms = cached_replay_delay_ms

    async def stream(
            self,
            text: str,
            style: Style,
            backend: Backend,
            options: StreamingOptions,
            warmup_ms: int = 0
    ) -> AsyncIterator[StreamEvent]:
        try:
            style = Style(style)
            backend = Backend(backend)
            adapter = self.rewrite_service.get_backend(backend)
            logger.info(
                f"Streaming started: backend={backend.value}, style={style.value}, "
                f"granularity={options.granularity.value}, delay={options.delay}ms"
            )

            if options.include_metadata:
                yield _event(StreamEventType.METADATA, {
                    "original": text,
                    "style": style.value,
                    "llm": backend.value,
                    "granularity": options.granularity.value
                })

            yield _event(StreamEventType.PROGRESS, {"status": "started", "progress": 0})

            if warmup_ms > 0:
                await asyncio.sleep(warmup_ms / 1000)

            if adapter.supports_streaming:
                events = self._relay_upstream(adapter, text, style)
            else:
                events = self._replay_resolved(adapter, text, style, options)

            async with aclosing(events):
                async for event in events:
                    yield event

            logger.info(f"Streaming completed: backend={backend.value}")

        except Exception as e:
            message = e.message if isinstance(e, RewriteError) else (str(e) or "Streaming failed")
            logger.error(f"Streaming error: {message}", exc_info=not isinstance(e, RewriteError))
            yield _event(StreamEventType.ERROR, {"message": message, "original": text})

    async def _relay_upstream(
            self,
            adapter: RewriteBackend,
            text: str,
            style: Style
    ) -> AsyncIterator[StreamEvent]:
        adapter.ensure_configured()
        key = make_cache_key(text, style.value)

        cached = adapter.cache.get(key)
        if cached is not None:
            for position, char in enumerate(cached):
                if position and self.cached_replay_delay_ms > 0:
                    await asyncio.sleep(self.cached_replay_delay_ms / 1000)
                yield _event(StreamEventType.CONTENT, {"chunk": char, "isPartial": True, "isCached": True})

            yield _event(StreamEventType.COMPLETE, {
                "original": text,
                "rewritten": cached,
                "style": style.value,
                "llm": adapter.name,
                "isCached": True
            })
            return

        parts: List[str] = []
        async with aclosing(adapter.stream_resolve(text, style.value)) as deltas:
            async for delta in deltas:
                if not delta:
                    continue
                parts.append(delta)
                yield _event(StreamEventType.CONTENT, {"chunk": delta, "isPartial": True})

        rewritten = "".join(parts).strip() or adapter.empty_response
        adapter.cache.set(key, rewritten)

        yield _event(StreamEventType.COMPLETE, {
            "original": text,
            "rewritten": rewritten,
            "style": style.value,
            "llm": adapter.name
        })

    async def _replay_resolved(
            self,
            adapter: RewriteBackend,
            text: str,
            style: Style,
            options: StreamingOptions
    ) -> AsyncIterator[StreamEvent]:
        rewritten = await adapter.resolve(text, style.value)
        chunks = split_text(rewritten, options.granularity)
        total = len(chunks)
        step = max(1, total // 10)

        for index, chunk in enumerate(chunks):
            if index and options.delay > 0:
                await asyncio.sleep(options.delay / 1000)

            yield _event(StreamEventType.CONTENT, {
                "chunk": chunk,
                "index": index,
                "total": total,
                "progress": round(index / total * 100)
            })

            done = index + 1
            if done % step == 0 or done % 5 == 0:
                yield _event(StreamEventType.PROGRESS, {
                    "status": "processing",
                    "progress": round(done / total * 100),
                    "currentChunk": done,
                    "totalChunks": total
                })

        yield _event(StreamEventType.COMPLETE, {
            "original": text,
            "rewritten": rewritten,
            "style": style.value,
            "llm": adapter.name,
            "totalChunks": total
        })
