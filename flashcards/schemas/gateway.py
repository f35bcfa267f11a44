"""
Chat-completion gateway request/response schemas.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class ModelParams(BaseModel):
    """Generation parameters forwarded verbatim to the gateway."""
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, gt=0)
    top_p: Optional[float] = Field(None, ge=0, le=1)
    presence_penalty: Optional[float] = Field(None, ge=-2, le=2)
    frequency_penalty: Optional[float] = Field(None, ge=-2, le=2)


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class JsonSchemaSpec(BaseModel):
    name: str
    schema_: Dict[str, Any] = Field(..., alias="schema")

    class Config:
        populate_by_name = True


class ResponseFormat(BaseModel):
    """Structured-output declaration: responses must be JSON matching ``json_schema``."""
    type: Literal["json_schema"] = "json_schema"
    json_schema: JsonSchemaSpec


class ChatResult(BaseModel):
    """Outcome of a successful gateway call."""
    raw_text: str
    raw_response: Any = None
    parsed_json: Any = None
