"""Chat orchestrator interface."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import ChatRequest, ChatResult


class IChatOrchestrator(ABC):
    """Interface for the conversational recommender."""

    @abstractmethod
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
        pass

    @abstractmethod
    async def ask(self, question: str) -> str:
        """Answer a single movie question without tools.

        Raises:
            ValidationError: If the question is empty.
            UpstreamError: If the LLM call fails.
        """
        pass
