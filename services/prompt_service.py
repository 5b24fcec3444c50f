"""
Prompt composition for the upstream chat endpoint.
The upstream accepts a single prompt string, so the OpenAI message list is
folded into one.
"""
from typing import Sequence
from models.api_models import ChatMessage
from utils.exceptions import EmptyConversationError


class PromptService:
    """Service for building upstream prompts."""

    HEADER_TEMPLATE = "#[{role}]\n{content}\n\n"

    @staticmethod
    def compose(messages: Sequence[ChatMessage]) -> str:
        """
        Fold a conversation into one prompt.

        A single message is sent as-is (untrimmed). Longer conversations are
        rendered as `#[role]` blocks with trimmed role and content, in order.
        reasoning_content is never sent upstream.

        Raises:
            EmptyConversationError: if there are no messages
        """
        if not messages:
            raise EmptyConversationError()

        if len(messages) == 1:
            return messages[0].content or ""

        return "".join(
            PromptService.HEADER_TEMPLATE.format(
                role=message.role.strip(),
                content=(message.content or "").strip(),
            )
            for message in messages
        )
