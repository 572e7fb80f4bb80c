"""
Claude API Client for Keyword Analysis

Provides a small client for interacting with Claude API,
including token tracking, strict-JSON completions and a connectivity ping.

No retries: a failed call is reported once and the caller decides whether
it is fatal.
"""

import os
import re
import json
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass

import anthropic

logger = logging.getLogger(__name__)


class LLMResponseError(Exception):
    """Raised when a completion fails or does not contain the expected JSON."""
    def __init__(self, message: str, content: Optional[str] = None):
        super().__init__(message)
        self.content = content


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


@dataclass
class AnalysisResponse:
    """Response from a Claude completion."""
    content: str
    usage: TokenUsage
    model: str
    stop_reason: str
    success: bool = True
    error: Optional[str] = None


def parse_json_object(content: str) -> Dict[str, Any]:
    """
    Extract a JSON object from model output.

    Accepts a bare object, a fenced ```json block, or an object embedded in
    surrounding prose.

    Raises:
        LLMResponseError: If no JSON object can be parsed
    """
    text = (content or "").strip()
    candidates = [text]

    fenced = re.search(r'```(?:json)?\s*(\{.*?\})\s*```', text, re.DOTALL)
    if fenced:
        candidates.append(fenced.group(1))

    braces = re.search(r'\{[\s\S]*\}', text)
    if braces:
        candidates.append(braces.group())

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise LLMResponseError("Model response is not a JSON object", content=content)


class ClaudeClient:
    """
    Async client for Claude API.

    Features:
    - Token usage tracking
    - Strict-JSON mode (assistant turn prefilled with "{")
    - Per-call timeout
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    FAST_MODEL = "claude-3-5-haiku-20241022"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        fast_model: Optional[str] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to env var)
            model: Model for analysis calls (defaults to Sonnet 4)
            fast_model: Cheaper model for short free-text calls
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or self.DEFAULT_MODEL
        self.fast_model = fast_model or self.FAST_MODEL
        self.async_client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=timeout)

        # Track cumulative usage
        self.total_usage = TokenUsage()
        self.call_count = 0

    async def analyze(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> AnalysisResponse:
        """
        Send a prompt to Claude.

        Args:
            prompt: User prompt
            system: System prompt
            max_tokens: Maximum output tokens
            temperature: Sampling temperature
            json_mode: Prefill the reply with "{" so the model answers in JSON
            model: Override the default model

        Returns:
            AnalysisResponse with content and usage
        """
        model = model or self.model
        try:
            messages = [{"role": "user", "content": prompt}]
            if json_mode:
                messages.append({"role": "assistant", "content": "{"})

            kwargs = {
                "model": model,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "messages": messages,
            }

            if system:
                kwargs["system"] = system

            response = await self.async_client.messages.create(**kwargs)

            # Extract content
            content = ""
            for block in response.content:
                if hasattr(block, "text"):
                    content += block.text
            if json_mode:
                content = "{" + content

            # Track usage
            usage = TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
            self.total_usage.input_tokens += usage.input_tokens
            self.total_usage.output_tokens += usage.output_tokens
            self.call_count += 1

            logger.debug(
                f"Claude call: {usage.input_tokens} in, {usage.output_tokens} out, "
                f"${usage.estimated_cost:.4f}"
            )

            return AnalysisResponse(
                content=content,
                usage=usage,
                model=model,
                stop_reason=response.stop_reason,
            )

        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            return AnalysisResponse(
                content="",
                usage=TokenUsage(),
                model=model,
                stop_reason="error",
                success=False,
                error=str(e),
            )

    async def complete_text(self, prompt: str, **kwargs) -> str:
        """
        Free-text completion.

        Raises:
            LLMResponseError: If the call fails or returns nothing
        """
        response = await self.analyze(prompt, **kwargs)
        if not response.success:
            raise LLMResponseError(f"Claude call failed: {response.error}")
        text = response.content.strip()
        if not text:
            raise LLMResponseError("Claude returned an empty response")
        return text

    async def complete_json(self, prompt: str, **kwargs) -> Dict[str, Any]:
        """
        Strict-JSON completion.

        Raises:
            LLMResponseError: If the call fails or the reply is not a JSON object
        """
        kwargs.setdefault("json_mode", True)
        response = await self.analyze(prompt, **kwargs)
        if not response.success:
            raise LLMResponseError(f"Claude call failed: {response.error}")
        return parse_json_object(response.content)

    async def ping(self) -> bool:
        """Check the API is reachable with a minimal request."""
        response = await self.analyze(
            "Test", max_tokens=2, temperature=0.0, model=self.fast_model
        )
        if response.success:
            logger.info("Claude connection test successful")
        else:
            logger.error(f"Claude connection test failed: {response.error}")
        return response.success

    def get_usage_summary(self) -> Dict[str, Any]:
        """Get summary of all API usage."""
        return {
            "total_calls": self.call_count,
            "input_tokens": self.total_usage.input_tokens,
            "output_tokens": self.total_usage.output_tokens,
            "total_tokens": self.total_usage.total_tokens,
            "estimated_cost": self.total_usage.estimated_cost,
        }
