"""Conversation and tool-calling data models."""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .movie import MovieSummary


class Role(str, Enum):
    """Conversation turn role."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolInvocationRequest(BaseModel):
    """A single capability call requested by the LLM."""

    id: str = Field(default="call_0", description="Provider call id")
    name: str = Field(..., description="Capability name")
    arguments: Union[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Raw arguments as sent by the provider"
    )


class ToolInvocationResult(BaseModel):
    """Outcome of executing a requested capability."""

    request: ToolInvocationRequest
    payload: Any = Field(..., description="JSON-serializable result handed back to the LLM")
    movies: List[MovieSummary] = Field(
        default_factory=list, description="Structured movies surfaced to the caller"
    )


class ConversationTurn(BaseModel):
    """One turn of a conversation."""

    role: Role
    content: Optional[str] = None
    tool_call: Optional[ToolInvocationRequest] = Field(
        None, description="Tool call requested by an assistant turn"
    )
    tool_call_id: Optional[str] = Field(None, description="Call answered by a tool turn")
    name: Optional[str] = Field(None, description="Capability name of a tool turn")


class ToolSchema(BaseModel):
    """Declared callable capability offered to the LLM."""

    name: str
    description: str
    parameters: Dict[str, Any]


class LLMReply(BaseModel):
    """Result of one chat-completion call: text, a tool call, or both."""

    text: Optional[str] = None
    tool_call: Optional[ToolInvocationRequest] = None

    @property
    def wants_tool(self) -> bool:
        """Check whether the LLM asked for a capability call."""
        return self.tool_call is not None


class ChatRequest(BaseModel):
    """Incoming chat request."""

    message: str = Field(default="", description="New user message")
    context: List[ConversationTurn] = Field(
        default_factory=list, description="Recent turns echoed back by the caller"
    )


class ChatResult(BaseModel):
    """Complete answer to a chat request."""

    response: str = Field(..., description="Final natural-language answer")
    movies: List[MovieSummary] = Field(default_factory=list, description="Movies surfaced")
    tool_name: Optional[str] = Field(None, description="Capability executed, if any")
