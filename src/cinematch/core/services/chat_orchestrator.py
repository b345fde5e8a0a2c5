"""Conversational recommender orchestration."""

import asyncio
import json
from typing import List, Optional

from ...config.models import Config
from ...infrastructure.logging import LoggerMixin
from ...utils import LLMServiceError, UpstreamError, ValidationError
from ..interfaces import ICatalogService, IChatOrchestrator, ILLMService, IUserStore
from ..models import (
    ChatRequest,
    ChatResult,
    ConversationTurn,
    LLMReply,
    Role,
    ToolInvocationRequest,
    ToolInvocationResult,
    ToolSchema,
    UserProfile,
)
from .criteria_compiler import TOOL_SEARCH_CAP, compile_criteria
from .tools import (
    CHAT_TOOLS,
    GET_MOVIE_INFO,
    SEARCH_MOVIES,
    GetMovieInfoArgs,
    SearchMoviesArgs,
    validate_tool_arguments,
)

SYSTEM_PROMPT = """You are {name}, an AI-powered movie recommendation assistant. \
You help users find movies based on their preferences, mood, and natural language queries.

Key capabilities:
- Recommend movies based on genre, mood, actors, directors, or plot similarities
- Suggest movies similar to specific films
- Provide movie information and explanations
- Answer questions about movies, plots, and film history

Always respond in a helpful, conversational tone. \
When recommending movies, provide brief explanations for your suggestions."""

QA_PROMPT = """You are a movie expert assistant. \
Answer questions about movies, plots, actors, directors, and film history.
Be informative and engaging. If you don't know something, say so rather than making things up."""

CONTEXT_ROLES = (Role.USER, Role.ASSISTANT)


class ChatOrchestrator(IChatOrchestrator, LoggerMixin):
    """Runs a chat request through the LLM with at most one catalog tool call."""

    def __init__(
        self,
        config: Config,
        llm_service: ILLMService,
        catalog_service: ICatalogService,
        user_store: IUserStore,
    ):
        """Initialize chat orchestrator.

        Args:
            config: Application configuration.
            llm_service: LLM boundary.
            catalog_service: Catalog used to execute tool calls.
            user_store: User store for preference hints.
        """
        self._config = config
        self._llm_service = llm_service
        self._catalog_service = catalog_service
        self._user_store = user_store

    async def chat(self, request: ChatRequest, user_id: Optional[str] = None) -> ChatResult:
        """Answer a chat message, calling at most one catalog tool.

        Args:
            request: Message plus recent turns echoed by the caller.
            user_id: Identified caller, if any.

        Returns:
            Final answer and the movies surfaced by the tool call.

        Raises:
            ValidationError: If the message or tool arguments are invalid.
            UpstreamError: If an LLM call or the store fails.
        """
        message = (request.message or "").strip()
        if not message:
            raise ValidationError("Message is required")

        user = await self._load_user(user_id)
        turns = self.compose_turns(message, request.context, user)

        first = await self._call_llm(turns, CHAT_TOOLS)
        if not first.wants_tool:
            if not first.text:
                raise LLMServiceError("LLM returned neither text nor a tool call")
            return ChatResult(response=first.text)

        call = first.tool_call
        self.logger.info(f"LLM requested tool {call.name}")
        result = await self.execute_tool(call)

        turns.append(ConversationTurn(role=Role.ASSISTANT, content=first.text, tool_call=call))
        turns.append(
            ConversationTurn(
                role=Role.TOOL,
                content=json.dumps(result.payload),
                tool_call_id=call.id,
                name=call.name,
            )
        )

        final = await self._call_llm(turns, None)
        if final.wants_tool:
            self.logger.warning(
                f"Ignoring tool call {final.tool_call.name} requested after the tool round"
            )
        if not final.text:
            raise LLMServiceError("LLM returned no answer after the tool round")

        return ChatResult(response=final.text, movies=result.movies, tool_name=call.name)

    async def ask(self, question: str) -> str:
        """Answer a single movie question without tools.

        Args:
            question: Free-form question.

        Returns:
            Answer text.

        Raises:
            ValidationError: If the question is empty.
            UpstreamError: If the LLM call fails.
        """
        question = (question or "").strip()
        if not question:
            raise ValidationError("Question is required")

        turns = [
            ConversationTurn(role=Role.SYSTEM, content=QA_PROMPT),
            ConversationTurn(role=Role.USER, content=question),
        ]
        reply = await self._call_llm(turns, None)
        if not reply.text:
            raise LLMServiceError("LLM returned no answer")
        return reply.text

    def compose_turns(
        self,
        message: str,
        context: List[ConversationTurn],
        user: Optional[UserProfile] = None,
    ) -> List[ConversationTurn]:
        """Build the conversation sent on the first LLM call.

        Args:
            message: New user message.
            context: Turns echoed back by the caller.
            user: Identified caller, if any.

        Returns:
            System turn, trailing context window and the new user turn.
        """
        turns = [ConversationTurn(role=Role.SYSTEM, content=self.system_prompt(user))]

        usable = [t for t in context if t.role in CONTEXT_ROLES and t.content]
        window = self._config.chat.context_window
        for turn in usable[-window:]:
            turns.append(ConversationTurn(role=turn.role, content=turn.content))

        turns.append(ConversationTurn(role=Role.USER, content=message))
        return turns

    def system_prompt(self, user: Optional[UserProfile] = None) -> str:
        """Render the assistant persona with an optional genre preference hint."""
        prompt = SYSTEM_PROMPT.format(name=self._config.chat.assistant_name)
        if user is not None and user.preferences.genres:
            prompt += f"\n\nUser preferences: Genres: {', '.join(user.preferences.genres)}"
        return prompt

    async def execute_tool(self, call: ToolInvocationRequest) -> ToolInvocationResult:
        """Execute one requested capability against the catalog.

        Args:
            call: Tool call requested by the LLM.

        Returns:
            Payload for the LLM and the movies surfaced to the caller.

        Raises:
            ValidationError: If the arguments are malformed.
            LLMServiceError: If the LLM asked for an unknown capability.
        """
        if call.name == SEARCH_MOVIES:
            args = validate_tool_arguments(call, SearchMoviesArgs)
            criteria = compile_criteria(
                args.to_filter_input(),
                cap=TOOL_SEARCH_CAP,
                default_limit=self._config.recommendations.tool_search_limit,
            )
            movies = await self._catalog_service.search(criteria)
            self.logger.debug(f"search_movies returned {len(movies)} movies")
            return ToolInvocationResult(
                request=call,
                payload=[movie.model_dump(mode="json") for movie in movies],
                movies=movies,
            )

        if call.name == GET_MOVIE_INFO:
            args = validate_tool_arguments(call, GetMovieInfoArgs)
            lookup = await self._catalog_service.lookup_by_title(args.title)
            if not lookup.found:
                return ToolInvocationResult(request=call, payload={"error": lookup.error})
            return ToolInvocationResult(
                request=call,
                payload=lookup.movie.model_dump(mode="json"),
                movies=[lookup.movie],
            )

        raise LLMServiceError(f"LLM requested unknown tool: {call.name}")

    async def _call_llm(
        self, turns: List[ConversationTurn], tools: Optional[List[ToolSchema]]
    ) -> LLMReply:
        timeout = self._config.llm.timeout
        try:
            return await asyncio.wait_for(self._llm_service.complete(turns, tools), timeout)
        except asyncio.TimeoutError as e:
            error_msg = f"LLM call timed out after {timeout}s"
            self.logger.error(error_msg)
            raise LLMServiceError(error_msg) from e
        except UpstreamError:
            raise
        except Exception as e:
            error_msg = f"LLM call failed: {e}"
            self.logger.error(error_msg)
            raise LLMServiceError(error_msg) from e

    async def _load_user(self, user_id: Optional[str]) -> Optional[UserProfile]:
        if not user_id:
            return None
        user = await self._user_store.get(user_id)
        if user is None:
            self.logger.warning(f"Identified user {user_id} has no stored profile")
        return user
