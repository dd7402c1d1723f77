"""
Claude API Client

Thin async client that sends the insight prompt to Claude and returns the
reply in the envelope the reconciler consumes. Includes retry with
exponential backoff and token usage tracking.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import anthropic

from insight_engine.output.parser import ModelReply

from .prompt import PromptBundle

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage for cost calculation."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def estimated_cost(self) -> float:
        """Estimate cost based on Claude Sonnet 4 pricing."""
        # Sonnet 4 pricing: $3/1M input, $15/1M output
        input_cost = (self.input_tokens / 1_000_000) * 3.0
        output_cost = (self.output_tokens / 1_000_000) * 15.0
        return input_cost + output_cost


class ClaudeClient:
    """
    Async client for Claude API.

    Features:
    - Token usage tracking
    - Retry with exponential backoff
    - Failures returned as ModelReply(succeeded=False), never raised
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 4000
    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to env var)
            model: Model to use (defaults to Sonnet 4)
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or self.DEFAULT_MODEL
        self.async_client = anthropic.AsyncAnthropic(api_key=self.api_key)

        # Track cumulative usage
        self.total_usage = TokenUsage()
        self.call_count = 0

    async def complete(
        self,
        bundle: PromptBundle,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ) -> ModelReply:
        """
        Send the insight prompt to Claude.

        Args:
            bundle: Prompt bundle from build_prompt
            max_tokens: Maximum output tokens
            temperature: Sampling temperature

        Returns:
            ModelReply with the message text, or the failure reason
        """
        try:
            response = await self.async_client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=bundle.system,
                messages=[{"role": "user", "content": bundle.prompt}],
            )

            content = ""
            for block in response.content:
                if hasattr(block, "text"):
                    content += block.text

            usage = TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
            self.total_usage.input_tokens += usage.input_tokens
            self.total_usage.output_tokens += usage.output_tokens
            self.call_count += 1

            logger.info(
                f"Claude call: {usage.input_tokens} in, {usage.output_tokens} out, "
                f"${usage.estimated_cost:.4f}"
            )

            return ModelReply(succeeded=True, message_text=content)

        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            return ModelReply(succeeded=False, error_message=str(e))

    async def complete_with_retry(
        self,
        bundle: PromptBundle,
        max_retries: int = 3,
        **kwargs,
    ) -> ModelReply:
        """
        Complete with retry logic for transient failures.

        Args:
            bundle: Prompt bundle from build_prompt
            max_retries: Maximum retry attempts
            **kwargs: Additional arguments for complete()

        Returns:
            ModelReply
        """
        last_error = None

        for attempt in range(max_retries):
            reply = await self.complete(bundle, **kwargs)

            if reply.succeeded:
                return reply

            last_error = reply.error_message
            if attempt == max_retries - 1:
                break

            wait_time = 2 ** attempt  # Exponential backoff
            logger.warning(
                f"Claude call failed (attempt {attempt + 1}/{max_retries}), "
                f"retrying in {wait_time}s: {reply.error_message}"
            )
            await asyncio.sleep(wait_time)

        return ModelReply(
            succeeded=False,
            error_message=f"Max retries exceeded. Last error: {last_error}",
        )

    def get_usage_summary(self) -> Dict[str, Any]:
        """Get summary of all API usage."""
        return {
            "total_calls": self.call_count,
            "input_tokens": self.total_usage.input_tokens,
            "output_tokens": self.total_usage.output_tokens,
            "total_tokens": self.total_usage.total_tokens,
            "estimated_cost": self.total_usage.estimated_cost,
        }
