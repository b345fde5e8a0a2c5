"""Test provider message conversion and reply parsing."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from cinematch.core.models import ConversationTurn, Role, ToolInvocationRequest
from cinematch.core.services import AnthropicLLMService, OpenAILLMService
from cinematch.core.services.tools import CHAT_TOOLS
from cinematch.utils import LLMServiceError


@pytest.fixture
def tool_conversation():
    """Conversation after one search_movies round."""
    call = ToolInvocationRequest(id="call_1", name="search_movies", arguments={"genres": ["Drama"]})
    return [
        ConversationTurn(role=Role.SYSTEM, content="You are CineMatch."),
        ConversationTurn(role=Role.USER, content="Some dramas please"),
        ConversationTurn(role=Role.ASSISTANT, content=None, tool_call=call),
        ConversationTurn(
            role=Role.TOOL, content='[{"id": "m06"}]', tool_call_id="call_1", name="search_movies"
        ),
    ]


def openai_response(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def openai_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def openai_tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


class TestOpenAIConversion:
    """Test OpenAI message and tool conversion."""

    def test_tools(self):
        """Test function tool declarations."""
        tools = OpenAILLMService.to_openai_tools(CHAT_TOOLS)

        assert [t["function"]["name"] for t in tools] == ["search_movies", "get_movie_info"]
        assert all(t["type"] == "function" for t in tools)
        assert tools[1]["function"]["parameters"]["required"] == ["title"]

    def test_messages(self, tool_conversation):
        """Test assistant tool calls and tool results."""
        messages = OpenAILLMService.to_openai_messages(tool_conversation)

        assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool"]
        call = messages[2]["tool_calls"][0]
        assert call["id"] == "call_1"
        assert json.loads(call["function"]["arguments"]) == {"genres": ["Drama"]}
        assert messages[3]["tool_call_id"] == "call_1"


class TestOpenAIRequests:
    """Test OpenAI requests against a fake client."""

    @pytest.mark.asyncio
    async def test_tool_call_reply(self, config, tool_conversation):
        """Test that only the first of several tool calls is kept."""
        service = OpenAILLMService(config)
        create = AsyncMock(
            return_value=openai_response(
                tool_calls=[
                    openai_tool_call("a", "search_movies", '{"genres": ["Drama"]}'),
                    openai_tool_call("b", "get_movie_info", '{"title": "Zodiac"}'),
                ]
            )
        )
        service._client = openai_client(create)

        reply = await service.complete(tool_conversation[:2], CHAT_TOOLS)

        assert reply.tool_call.id == "a"
        assert reply.tool_call.name == "search_movies"
        kwargs = create.call_args.kwargs
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_text_reply_without_tools(self, config, tool_conversation):
        """Test that no tools are offered on the final round."""
        service = OpenAILLMService(config)
        create = AsyncMock(return_value=openai_response(content="Watch The Notebook."))
        service._client = openai_client(create)

        reply = await service.complete(tool_conversation, None)

        assert reply.text == "Watch The Notebook."
        assert reply.tool_call is None
        assert "tools" not in create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_provider_exception(self, config, tool_conversation):
        """Test that SDK errors become LLMServiceError."""
        service = OpenAILLMService(config)
        create = AsyncMock(side_effect=RuntimeError("429"))
        service._client = openai_client(create)

        with pytest.raises(LLMServiceError):
            await service.complete(tool_conversation[:2])

    @pytest.mark.asyncio
    async def test_empty_reply(self, config, tool_conversation):
        """Test that a reply with neither text nor tool call is rejected."""
        service = OpenAILLMService(config)
        create = AsyncMock(return_value=openai_response(content=""))
        service._client = openai_client(create)

        with pytest.raises(LLMServiceError):
            await service.complete(tool_conversation[:2])


class TestAnthropicConversion:
    """Test Anthropic message and tool conversion."""

    def test_tools(self):
        """Test tool declarations with input schemas."""
        tools = AnthropicLLMService.to_anthropic_tools(CHAT_TOOLS)

        assert tools[0]["name"] == "search_movies"
        assert tools[0]["input_schema"]["type"] == "object"

    def test_system_prompt(self, tool_conversation):
        """Test that system turns move to the system prompt."""
        assert AnthropicLLMService.system_prompt(tool_conversation) == "You are CineMatch."

    def test_native_tool_blocks(self, tool_conversation):
        """Test tool_use and tool_result blocks."""
        messages = AnthropicLLMService.to_anthropic_messages(tool_conversation)

        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        tool_use = messages[1]["content"][-1]
        assert tool_use["type"] == "tool_use"
        assert tool_use["input"] == {"genres": ["Drama"]}
        assert messages[2]["content"][0]["tool_use_id"] == "call_1"

    def test_plain_text_without_tools(self, tool_conversation):
        """Test that tool history is rendered as text when no tools are offered."""
        messages = AnthropicLLMService.to_anthropic_messages(tool_conversation, native_tools=False)

        assert all(isinstance(m["content"], str) for m in messages)
        assert "search_movies" in messages[1]["content"]
        assert messages[2]["content"].startswith("Result of search_movies")

    def test_leading_assistant_dropped(self):
        """Test that the conversation opens with the user."""
        turns = [
            ConversationTurn(role=Role.ASSISTANT, content="Welcome back"),
            ConversationTurn(role=Role.USER, content="hi"),
        ]

        messages = AnthropicLLMService.to_anthropic_messages(turns)

        assert messages == [{"role": "user", "content": "hi"}]


class TestAnthropicRequests:
    """Test Anthropic requests against a fake client."""

    @pytest.mark.asyncio
    async def test_tool_use_reply(self, config, tool_conversation):
        """Test parsing text and tool_use blocks."""
        service = AnthropicLLMService(config)
        create = AsyncMock(
            return_value=SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="Let me look."),
                    SimpleNamespace(
                        type="tool_use", id="tu_1", name="get_movie_info", input={"title": "Zodiac"}
                    ),
                ]
            )
        )
        service._client = SimpleNamespace(messages=SimpleNamespace(create=create))

        reply = await service.complete(tool_conversation[:2], CHAT_TOOLS)

        assert reply.text == "Let me look."
        assert reply.tool_call.arguments == {"title": "Zodiac"}
        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "You are CineMatch."
        assert kwargs["tool_choice"] == {"type": "auto"}
