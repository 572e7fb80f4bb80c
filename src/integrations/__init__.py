"""
External API Integrations

Clients for third-party APIs used by the insight endpoints:
- Prompt visibility: real AI-assistant prompts for a concept (key gated)
"""

from .prompt_visibility import PromptVisibilityClient, PromptVisibilityError

__all__ = [
    "PromptVisibilityClient",
    "PromptVisibilityError",
]
