# models/stream.py

"""
Streaming event models
"""

import time
from pydantic import BaseModel, Field
from typing import Any, Dict
from enum import Enum

from rewriteforge.models.rewrite import Granularity


class StreamEventType(str, Enum):
    METADATA = "metadata"
    PROGRESS = "progress"
    CONTENT = "content"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_EVENTS = frozenset({StreamEventType.COMPLETE, StreamEventType.ERROR})


def now_ms() -> int:
    return int(time.time() * 1000)


class StreamEvent(BaseModel):
    type: StreamEventType
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: int = Field(default_factory=now_ms)

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_sse(self) -> str:
        """Render as one text/event-stream frame"""
        return f"data: {self.model_dump_json()}\n\n"


class StreamingOptions(BaseModel):
    granularity: Granularity = Granularity.WORD
    delay: int = Field(50, ge=0, description="Delay between chunks in milliseconds")
    include_metadata: bool = True
