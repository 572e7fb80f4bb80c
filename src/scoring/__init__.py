"""
Scoring Module for the Keyword Opportunity Engine

This module provides the deterministic core of the pipeline:

1. **Pattern Classifier**
   Relevance (0 / 50 / 90), intent and content cluster from static
   substring tables.

2. **Opportunity Score** (0-100)
   Heuristic, legacy strategic and weighted-blend strategic formulas,
   selected by pipeline mode.

3. **Revenue Model**
   Flat and tiered organic revenue estimates plus paid-search insight.

Example Usage:
    from src.scoring import classify_relevance, estimate_revenue

    relevance = classify_relevance("payroll software for small business")
    revenue = estimate_revenue(volume=2400, intent="transactional")
    print(revenue.estimated_traffic, revenue.monthly_revenue)
"""

from .helpers import (
    SearchIntent,
    VOLUME_TIERS,
    HEURISTIC_DIFFICULTY_TIERS,
    LEGACY_DIFFICULTY_TIERS,
    STRATEGIC_DIFFICULTY_TIERS,
    get_volume_points,
    difficulty_bonus,
    competitor_rank_bonus,
    clamp_score,
    normalize_intent,
)
from .patterns import (
    classify_relevance,
    classify_intent,
    classify_cluster,
    contains_any,
    brand_terms_for,
    COMPETITOR_BRAND_TERMS,
    DEFAULT_CLUSTER,
)
from .opportunity import (
    ScoringFormula,
    calculate_heuristic_score,
    calculate_legacy_strategic_score,
    calculate_strategic_score,
    score_keyword,
)
from .revenue import (
    RevenueEstimate,
    PaidSearchInsight,
    REVENUE_MODELS,
    estimate_revenue,
    estimate_tiered_revenue,
    estimate_paid_search,
    choose_paid_strategy,
    get_product_tier,
    get_customer_value,
    normalize_cpc,
)

__all__ = [
    # Helpers
    "SearchIntent",
    "VOLUME_TIERS",
    "HEURISTIC_DIFFICULTY_TIERS",
    "LEGACY_DIFFICULTY_TIERS",
    "STRATEGIC_DIFFICULTY_TIERS",
    "get_volume_points",
    "difficulty_bonus",
    "competitor_rank_bonus",
    "clamp_score",
    "normalize_intent",

    # Classifier
    "classify_relevance",
    "classify_intent",
    "classify_cluster",
    "contains_any",
    "brand_terms_for",
    "COMPETITOR_BRAND_TERMS",
    "DEFAULT_CLUSTER",

    # Scores
    "ScoringFormula",
    "calculate_heuristic_score",
    "calculate_legacy_strategic_score",
    "calculate_strategic_score",
    "score_keyword",

    # Revenue
    "RevenueEstimate",
    "PaidSearchInsight",
    "REVENUE_MODELS",
    "estimate_revenue",
    "estimate_tiered_revenue",
    "estimate_paid_search",
    "choose_paid_strategy",
    "get_product_tier",
    "get_customer_value",
    "normalize_cpc",
]
