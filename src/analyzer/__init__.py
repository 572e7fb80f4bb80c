"""
Keyword Opportunity Engine - AI Analysis Package

Claude-backed keyword evaluation:
- ClaudeClient: raw completions, strict-JSON mode, connectivity ping
- KeywordAnalyst: prompted operations (keyword evaluation, topic
  deconstruction, seed synthesis, rationale, lateral topics, geo prompts)
"""

from .client import (
    ClaudeClient,
    AnalysisResponse,
    TokenUsage,
    LLMResponseError,
    parse_json_object,
)
from .keywords import KeywordAnalyst, RATIONALE_UNAVAILABLE

__all__ = [
    "ClaudeClient",
    "AnalysisResponse",
    "TokenUsage",
    "LLMResponseError",
    "parse_json_object",
    "KeywordAnalyst",
    "RATIONALE_UNAVAILABLE",
]
