# models/rewrite.py

"""
Rewrite-related data models
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from enum import Enum


class Style(str, Enum):
    FORMAL = "formal"
    PIRATE = "pirate"
    HAIKU = "haiku"


class Backend(str, Enum):
    LOCALMOC = "localmoc"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class Granularity(str, Enum):
    WORD = "word"
    CHARACTER = "character"
    SENTENCE = "sentence"


# Request bodies accept any JSON value; utils.validate produces the 400 messages.
class RewriteRequest(BaseModel):
    text: Any = Field(None, description="Text to rewrite (max 5000 characters)")
    style: Optional[str] = Field(None, description="Target style (formal/pirate/haiku)")
    llm: Optional[str] = Field(None, description="Backend (localmoc/openai/anthropic)")


class RewriteResponse(BaseModel):
    original: str
    rewritten: str
    style: Style
    llm: Backend


class StreamRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Any = Field(None, description="Text to rewrite (max 5000 characters)")
    style: Optional[str] = Field(None, description="Target style (formal/pirate/haiku)")
    llm: Optional[str] = Field(None, description="Backend (localmoc/openai/anthropic)")
    granularity: Optional[str] = Field("word", description="Chunking unit (word/character/sentence)")
    delay: Any = Field(None, description="Delay between chunks in milliseconds (0-5000)")
    include_metadata: bool = Field(True, alias="includeMetadata", description="Emit a metadata event first")
