from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ZeroValueModel(BaseModel):
    """
    Decodes the way the upstream API's typed clients do: a null object or a
    null scalar field becomes the zero value instead of a validation error.
    """

    @model_validator(mode="before")
    @classmethod
    def _null_object(cls, data: Any) -> Any:
        return {} if data is None else data


class ChatMessage(ZeroValueModel):
    # Roles are forwarded as-is, no Literal here
    role: str = ""
    content: str = ""

    @field_validator("role", "content", mode="before")
    @classmethod
    def _null_str(cls, v: Any) -> Any:
        return "" if v is None else v


class ChatRequest(ZeroValueModel):
    # A missing list is forwarded as null, not []
    messages: Optional[List[ChatMessage]] = None


class ChatResponseMessage(ZeroValueModel):
    index: int = 0
    role: str = ""
    content: str = ""
    finish_reason: str = ""

    @field_validator("role", "content", "finish_reason", mode="before")
    @classmethod
    def _null_str(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("index", mode="before")
    @classmethod
    def _null_int(cls, v: Any) -> Any:
        return 0 if v is None else v


class Choice(ZeroValueModel):
    message: ChatResponseMessage = Field(default_factory=ChatResponseMessage)


class ChatResponse(ZeroValueModel):
    choices: Optional[List[Choice]] = None
