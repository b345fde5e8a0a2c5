"""LLM service interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import ConversationTurn, LLMReply, ToolSchema


class ILLMService(ABC):
    """Interface for chat-completion providers."""

    @abstractmethod
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
        pass
