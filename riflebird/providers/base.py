from abc import ABC, abstractmethod
from typing import Optional, Sequence

from riflebird.agent.structs import ChatReply, Message


class BaseProvider(ABC):
    """
    The Abstract Base Class (Contract) for all LLM Providers.
    """

    @abstractmethod
    async def create_chat_completion(
        self,
        messages: Sequence[Message],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ChatReply:
        """
        Send the whole conversation and return exactly one reply.

        Raises:
            ProviderError: or one of its subclasses, after retries.
        """
        pass
