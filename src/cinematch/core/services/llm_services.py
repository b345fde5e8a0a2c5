"""LLM service implementations."""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ...config.models import Config
from ...infrastructure.logging import LoggerMixin
from ...utils import LLMServiceError
from ..interfaces import ILLMService
from ..models import ConversationTurn, LLMReply, Role, ToolInvocationRequest, ToolSchema
from .tools import parse_tool_arguments


class BaseLLMService(ILLMService, LoggerMixin, ABC):
    """Base LLM service with common functionality."""

    def __init__(self, config: Config):
        """Initialize LLM service.

        Args:
            config: Application configuration.
        """
        self._config = config
        self._llm_config = config.llm
        self._client: Any = None

    async def complete(
        self,
        turns: List[ConversationTurn],
        tools: Optional[List[ToolSchema]] = None,
    ) -> LLMReply:
        """Run one chat-completion call.

        Args:
            turns: Ordered conversation, system turn first.
            tools: Capabilities the model may call. None forces a text answer.

        Returns:
            Reply carrying text, at most one tool call, or both.

        Raises:
            LLMServiceError: If the provider request fails or the reply is malformed.
        """
        try:
            reply = await self._make_llm_request(turns, tools)
        except LLMServiceError:
            raise
        except Exception as e:
            error_msg = f"{self.provider_name} request failed: {e}"
            self.logger.error(error_msg)
            raise LLMServiceError(error_msg) from e

        if reply.text is None and reply.tool_call is None:
            raise LLMServiceError(f"{self.provider_name} returned an empty reply")
        return reply

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name."""
        pass

    @abstractmethod
    async def _make_llm_request(
        self, turns: List[ConversationTurn], tools: Optional[List[ToolSchema]]
    ) -> LLMReply:
        """Make request to LLM service.

        Args:
            turns: Conversation turns.
            tools: Offered capabilities, or None.

        Returns:
            Parsed reply.
        """
        pass

    def _first_tool_call(
        self, calls: List[ToolInvocationRequest]
    ) -> Optional[ToolInvocationRequest]:
        """Keep only the first requested tool call."""
        if not calls:
            return None
        if len(calls) > 1:
            ignored = ", ".join(call.name for call in calls[1:])
            self.logger.warning(
                f"{self.provider_name} requested several tools, ignoring: {ignored}"
            )
        return calls[0]


class OpenAILLMService(BaseLLMService):
    """OpenAI LLM service implementation."""

    provider_name = "OpenAI"

    async def _make_llm_request(
        self, turns: List[ConversationTurn], tools: Optional[List[ToolSchema]]
    ) -> LLMReply:
        """Make request to OpenAI API.

        Args:
            turns: Conversation turns.
            tools: Offered capabilities, or None.

        Returns:
            Parsed reply.
        """
        client = self._get_client()

        request: Dict[str, Any] = {
            "model": self._llm_config.model,
            "messages": self.to_openai_messages(turns),
            "max_tokens": self._llm_config.max_tokens,
            "temperature": self._llm_config.temperature,
            "timeout": self._llm_config.timeout,
        }
        if tools:
            request["tools"] = self.to_openai_tools(tools)
            request["tool_choice"] = "auto"

        response = await client.chat.completions.create(**request)
        if not response.choices:
            raise LLMServiceError("OpenAI API returned no choices")

        message = response.choices[0].message
        calls = [
            ToolInvocationRequest(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "",
            )
            for call in (message.tool_calls or [])
        ]
        return LLMReply(text=message.content or None, tool_call=self._first_tool_call(calls))

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                import openai
            except ImportError:
                raise LLMServiceError(
                    "OpenAI package not installed. Install with: pip install openai"
                )
            self._client = openai.AsyncOpenAI(
                api_key=self._llm_config.api_key, timeout=self._llm_config.timeout
            )
        return self._client

    @staticmethod
    def to_openai_tools(tools: List[ToolSchema]) -> List[Dict[str, Any]]:
        """Convert capability schemas to OpenAI function tools."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in tools
        ]

    @staticmethod
    def to_openai_messages(turns: List[ConversationTurn]) -> List[Dict[str, Any]]:
        """Convert conversation turns to OpenAI chat messages."""
        messages: List[Dict[str, Any]] = []
        for turn in turns:
            if turn.role == Role.TOOL:
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": turn.tool_call_id,
                        "content": turn.content or "",
                    }
                )
            elif turn.role == Role.ASSISTANT and turn.tool_call is not None:
                call = turn.tool_call
                arguments = (
                    call.arguments
                    if isinstance(call.arguments, str)
                    else json.dumps(call.arguments)
                )
                messages.append(
                    {
                        "role": "assistant",
                        "content": turn.content,
                        "tool_calls": [
                            {
                                "id": call.id,
                                "type": "function",
                                "function": {"name": call.name, "arguments": arguments},
                            }
                        ],
                    }
                )
            else:
                messages.append({"role": turn.role.value, "content": turn.content or ""})
        return messages


class AnthropicLLMService(BaseLLMService):
    """Anthropic (Claude) LLM service implementation."""

    provider_name = "Anthropic"

    async def _make_llm_request(
        self, turns: List[ConversationTurn], tools: Optional[List[ToolSchema]]
    ) -> LLMReply:
        """Make request to Anthropic API.

        Args:
            turns: Conversation turns.
            tools: Offered capabilities, or None.

        Returns:
            Parsed reply.
        """
        client = self._get_client()

        request: Dict[str, Any] = {
            "model": self._llm_config.model,
            "max_tokens": self._llm_config.max_tokens,
            "temperature": self._llm_config.temperature,
            "system": self.system_prompt(turns),
            "messages": self.to_anthropic_messages(turns, native_tools=bool(tools)),
            "timeout": self._llm_config.timeout,
        }
        if tools:
            request["tools"] = self.to_anthropic_tools(tools)
            request["tool_choice"] = {"type": "auto"}

        response = await client.messages.create(**request)

        texts = []
        calls = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                calls.append(
                    ToolInvocationRequest(id=block.id, name=block.name, arguments=block.input)
                )

        text = "\n".join(t for t in texts if t).strip()
        return LLMReply(text=text or None, tool_call=self._first_tool_call(calls))

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                import anthropic
            except ImportError:
                raise LLMServiceError(
                    "Anthropic package not installed. Install with: pip install anthropic"
                )
            self._client = anthropic.AsyncAnthropic(
                api_key=self._llm_config.api_key, timeout=self._llm_config.timeout
            )
        return self._client

    @staticmethod
    def system_prompt(turns: List[ConversationTurn]) -> str:
        """Collect system turns into Anthropic's separate system prompt."""
        return "\n\n".join(t.content for t in turns if t.role == Role.SYSTEM and t.content)

    @staticmethod
    def to_anthropic_tools(tools: List[ToolSchema]) -> List[Dict[str, Any]]:
        """Convert capability schemas to Anthropic tools."""
        return [
            {"name": tool.name, "description": tool.description, "input_schema": tool.parameters}
            for tool in tools
        ]

    @staticmethod
    def to_anthropic_messages(
        turns: List[ConversationTurn], native_tools: bool = True
    ) -> List[Dict[str, Any]]:
        """Convert conversation turns to Anthropic messages.

        Without native tools, earlier tool calls and results are rendered as
        plain text so the request carries no tool blocks.

        Args:
            turns: Conversation turns.
            native_tools: Whether tool schemas are offered in this request.

        Returns:
            Anthropic messages, starting with a user message.
        """
        messages: List[Dict[str, Any]] = []
        for turn in turns:
            if turn.role == Role.SYSTEM:
                continue

            if turn.role == Role.TOOL:
                if native_tools:
                    content: Any = [
                        {
                            "type": "tool_result",
                            "tool_use_id": turn.tool_call_id,
                            "content": turn.content or "",
                        }
                    ]
                else:
                    content = f"Result of {turn.name}:\n{turn.content or ''}"
                messages.append({"role": "user", "content": content})

            elif turn.role == Role.ASSISTANT and turn.tool_call is not None:
                call = turn.tool_call
                arguments = parse_tool_arguments(call)
                if native_tools:
                    blocks: List[Dict[str, Any]] = []
                    if turn.content:
                        blocks.append({"type": "text", "text": turn.content})
                    blocks.append(
                        {"type": "tool_use", "id": call.id, "name": call.name, "input": arguments}
                    )
                    messages.append({"role": "assistant", "content": blocks})
                else:
                    note = f"[Called {call.name} with {json.dumps(arguments)}]"
                    text = f"{turn.content}\n{note}" if turn.content else note
                    messages.append({"role": "assistant", "content": text})

            elif turn.content:
                messages.append({"role": turn.role.value, "content": turn.content})

        # Conversations must open with the user
        while messages and messages[0]["role"] != "user":
            messages.pop(0)
        return messages
