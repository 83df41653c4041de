"""
LLM Service
OpenAI chat completions for single-turn prompts
"""

import logging
from typing import Dict, List, Optional
from enum import Enum

from openai import AsyncOpenAI
from openai import OpenAIError

from app.core.exceptions import ChatProviderError

logger = logging.getLogger(__name__)


class ConversationRole(Enum):
    """Conversation message roles"""
    USER = "user"


class Message:
    """Chat message structure"""
    def __init__(self, role: ConversationRole, content: str):
        self.role = role.value
        self.content = content

    def to_dict(self) -> Dict[str, str]:
        return {
            "role": self.role,
            "content": self.content
        }


class LLMService:
    """
    OpenAI-powered chat completion service.

    Each call is independent: no conversation history is kept between prompts.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-3.5-turbo",
        client: Optional[AsyncOpenAI] = None
    ):
        """
        Initialize OpenAI LLM Service

        Args:
            api_key: OpenAI API key
            model: Chat model to use
            client: Pre-built client, mainly for tests
        """
        if client is None and not api_key:
            raise ValueError("OpenAI API key is required. Set the API_KEY environment variable.")

        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)
        logger.info(f"OpenAI LLM service initialized with model: {self.model}")

    async def chat(self, messages: List[Message]) -> str:
        """
        Send chat messages and return the first completion's text

        Raises:
            ChatProviderError: the provider call failed or returned no choices
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[msg.to_dict() for msg in messages],
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise ChatProviderError(f"Failed to get LLM response: {e}") from e

        if not response.choices:
            raise ChatProviderError("OpenAI returned no completion choices")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(f"LLM response generated (tokens used: {usage.total_tokens})")
        return response.choices[0].message.content

    async def complete(self, prompt: str) -> str:
        """Forward one user prompt and return the reply verbatim"""
        return await self.chat([Message(ConversationRole.USER, prompt)])

    async def close(self):
        await self.client.close()
