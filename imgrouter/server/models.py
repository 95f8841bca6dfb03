"""Pydantic request models for the OpenAI-compatible API."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str
    content: Union[str, List[Dict[str, Any]], None] = None


class ChatCompletionRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: List[ChatMessage] = []
    stream: Optional[bool] = None
    size: Optional[str] = None
    response_format: Union[str, Dict[str, Any], None] = None
