"""
Keyword Analyst

LLM-backed operations used by the pipeline and the insight endpoints.
Each method is one Claude call. Methods that feed control flow raise
LLMResponseError on failure; methods that only decorate output fall back to
a fixed string.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from src.models import KeywordAnalysis
from src.scoring.patterns import classify_cluster
from .client import ClaudeClient, LLMResponseError
from .prompts import (
    JSON_SYSTEM_PROMPT,
    KEYWORD_EVALUATION_PROMPT,
    STRATEGIC_CONTEXT_PROMPT,
    TOPIC_DECONSTRUCTION_PROMPT,
    SEED_KEYWORD_PROMPT,
    TOPIC_KEYWORD_EVALUATION_PROMPT,
    STRATEGIC_RATIONALE_PROMPT,
    LATERAL_TOPICS_PROMPT,
    CORE_CONCEPT_PROMPT,
    GEO_PROMPTS_PROMPT,
    language_instruction,
)

logger = logging.getLogger(__name__)

RATIONALE_UNAVAILABLE = "Strategic analysis unavailable"
MIN_SEED_KEYWORDS = 8
MAX_SEED_KEYWORDS = 12


def _string_list(payload: Dict[str, Any], key: str) -> List[str]:
    values = payload.get(key)
    if not isinstance(values, list):
        return []
    return [str(v).strip() for v in values if isinstance(v, (str, int, float)) and str(v).strip()]


class KeywordAnalyst:
    """
    Prompted keyword operations on top of ClaudeClient.

    Usage:
        analyst = KeywordAnalyst(ClaudeClient(), vendor="Sage")
        analysis = await analyst.evaluate_keyword("payroll software")
    """

    def __init__(self, client: ClaudeClient, vendor: str = "Sage"):
        self.client = client
        self.vendor = vendor

    async def ping(self) -> bool:
        return await self.client.ping()

    def usage_summary(self) -> Dict[str, Any]:
        return self.client.get_usage_summary()

    # ========================================================================
    # COMPETITOR TEARDOWN
    # ========================================================================

    async def evaluate_keyword(self, keyword: str, language: Optional[str] = None) -> KeywordAnalysis:
        """
        Classify a competitor keyword (category, branding, intent, commercial value).

        Raises:
            LLMResponseError: On call failure or malformed JSON
            ValueError: If required fields are missing
        """
        payload = await self.client.complete_json(
            KEYWORD_EVALUATION_PROMPT.format(
                vendor=self.vendor,
                keyword=keyword,
                language_instruction=language_instruction(language),
            ),
            system=JSON_SYSTEM_PROMPT,
            max_tokens=400,
            temperature=0.0,
        )
        return KeywordAnalysis.from_ai(payload, content_cluster=classify_cluster(keyword))

    async def strategic_context(
        self,
        keyword: str,
        analysis: KeywordAnalysis,
        language: Optional[str] = None,
    ) -> str:
        """One or two sentences on how the vendor should approach the keyword."""
        try:
            return await self.client.complete_text(
                STRATEGIC_CONTEXT_PROMPT.format(
                    keyword=keyword,
                    intent=analysis.intent,
                    commercial_value=analysis.commercial_value,
                    vendor=self.vendor,
                    language_instruction=language_instruction(language),
                ),
                max_tokens=100,
                temperature=0.5,
                model=self.client.fast_model,
            )
        except LLMResponseError as e:
            logger.warning(f"Strategic context failed for '{keyword}': {e}")
            return RATIONALE_UNAVAILABLE

    # ========================================================================
    # TOPIC EXPANSION
    # ========================================================================

    async def deconstruct_topic(
        self,
        topic: str,
        product: str,
        language: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Break a market topic into sub-topics, pain points and personas.

        Raises:
            LLMResponseError: On call failure, malformed JSON, or no sub-topics
        """
        payload = await self.client.complete_json(
            TOPIC_DECONSTRUCTION_PROMPT.format(
                vendor=self.vendor,
                product=product,
                topic=topic,
                language_instruction=language_instruction(language),
            ),
            system=JSON_SYSTEM_PROMPT,
            max_tokens=800,
            temperature=0.2,
        )
        deconstruction = {
            "core_topic": payload.get("core_topic") or topic,
            "sub_topics": _string_list(payload, "sub_topics"),
            "pain_points": _string_list(payload, "pain_points"),
            "personas": _string_list(payload, "personas"),
            "summary": payload.get("summary") or "",
        }
        if not deconstruction["sub_topics"] and not deconstruction["pain_points"]:
            raise LLMResponseError("Topic deconstruction returned no sub-topics or pain points")
        return deconstruction

    async def generate_seed_keywords(
        self,
        deconstruction: Dict[str, Any],
        product: str,
        language: Optional[str] = None,
    ) -> List[str]:
        """
        Synthesize 8-12 unbranded seed phrases from a deconstruction.

        Returns an empty list if the model produced none; the caller treats
        that as fatal.

        Raises:
            LLMResponseError: On call failure or malformed JSON
        """
        payload = await self.client.complete_json(
            SEED_KEYWORD_PROMPT.format(
                vendor=self.vendor,
                product=product,
                deconstruction=json.dumps(deconstruction, ensure_ascii=False, indent=2),
                language_instruction=language_instruction(language),
            ),
            system=JSON_SYSTEM_PROMPT,
            max_tokens=500,
            temperature=0.4,
        )

        seeds: List[str] = []
        vendor = self.vendor.lower()
        for phrase in _string_list(payload, "seed_keywords"):
            phrase = phrase.lower()
            if vendor in phrase or phrase in seeds:
                continue
            seeds.append(phrase)

        if seeds and len(seeds) < MIN_SEED_KEYWORDS:
            logger.warning(f"Only {len(seeds)} seed keywords generated (wanted {MIN_SEED_KEYWORDS}+)")
        return seeds[:MAX_SEED_KEYWORDS]

    async def evaluate_topic_keyword(
        self,
        keyword: str,
        topic: str,
        deconstruction: Dict[str, Any],
        product: str,
        language: Optional[str] = None,
    ) -> KeywordAnalysis:
        """
        Judge intent, vertical relevance, commercial value and branding,
        grounded in the topic deconstruction.

        Raises:
            LLMResponseError: On call failure or malformed JSON
            ValueError: If required fields are missing
        """
        payload = await self.client.complete_json(
            TOPIC_KEYWORD_EVALUATION_PROMPT.format(
                vendor=self.vendor,
                product=product,
                topic=topic,
                deconstruction=json.dumps(deconstruction, ensure_ascii=False),
                keyword=keyword,
                language_instruction=language_instruction(language),
            ),
            system=JSON_SYSTEM_PROMPT,
            max_tokens=400,
            temperature=0.0,
        )
        analysis = KeywordAnalysis.from_ai(payload, content_cluster=classify_cluster(keyword))
        if analysis.vertical_relevance is None:
            raise ValueError(f"AI evaluation missing vertical_relevance for '{keyword}'")
        return analysis

    async def strategic_rationale(
        self,
        keyword: str,
        analysis: KeywordAnalysis,
        product: str,
        language: Optional[str] = None,
    ) -> str:
        """Short content angle for a published opportunity."""
        try:
            return await self.client.complete_text(
                STRATEGIC_RATIONALE_PROMPT.format(
                    keyword=keyword,
                    intent=analysis.intent,
                    vertical_relevance=analysis.vertical_relevance,
                    commercial_value=analysis.commercial_value,
                    vendor=self.vendor,
                    product=product,
                    language_instruction=language_instruction(language),
                ),
                max_tokens=120,
                temperature=0.5,
                model=self.client.fast_model,
            )
        except LLMResponseError as e:
            logger.warning(f"Strategic rationale failed for '{keyword}': {e}")
            return RATIONALE_UNAVAILABLE

    # ========================================================================
    # INSIGHT ENDPOINTS
    # ========================================================================

    async def lateral_topics(self, keyword: str, reasoning: str, country: str = "us") -> List[str]:
        """Related topics a buyer researching `keyword` would also explore."""
        payload = await self.client.complete_json(
            LATERAL_TOPICS_PROMPT.format(
                vendor=self.vendor,
                keyword=keyword,
                reasoning=reasoning or "n/a",
                country=country,
            ),
            system=JSON_SYSTEM_PROMPT,
            max_tokens=400,
            temperature=0.7,
        )
        return _string_list(payload, "lateral_topics")

    async def core_concept(self, keyword: str) -> str:
        """Reduce a keyword to its core concept; falls back to the keyword itself."""
        try:
            payload = await self.client.complete_json(
                CORE_CONCEPT_PROMPT.format(keyword=keyword),
                system=JSON_SYSTEM_PROMPT,
                max_tokens=50,
                temperature=0.0,
                model=self.client.fast_model,
            )
        except LLMResponseError as e:
            logger.warning(f"Core concept extraction failed for '{keyword}': {e}")
            return keyword
        concept = str(payload.get("core_concept") or "").strip()
        return concept or keyword

    async def geo_prompts(self, keyword: str, concept: str, country: str = "us") -> List[str]:
        """Questions buyers would ask an AI assistant about the concept."""
        payload = await self.client.complete_json(
            GEO_PROMPTS_PROMPT.format(keyword=keyword, concept=concept, country=country),
            system=JSON_SYSTEM_PROMPT,
            max_tokens=400,
            temperature=0.7,
        )
        return _string_list(payload, "prompts")
